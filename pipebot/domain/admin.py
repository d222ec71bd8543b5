"""Admin authorization state.

Admin mode is on when a pin is configured. Users who enter the pin are
authorised until the process restarts; rights are never persisted.
"""

from typing import Optional, Set


class AdminState:
    def __init__(self, pin: Optional[int] = None):
        self._pin = pin
        self._authorised: Set[str] = set()

    def admin_mode_enabled(self) -> bool:
        return self._pin is not None

    def authorise_user(self, user_id: str, pin: int) -> bool:
        """Grant admin rights if ``pin`` is correct. Wrong pin changes nothing."""
        if not self.admin_mode_enabled() or pin != self._pin:
            return False
        self._authorised.add(user_id)
        return True

    def authenticate_user(self, user_id: str) -> bool:
        return self.admin_mode_enabled() and user_id in self._authorised

    @property
    def authorised_users(self) -> Set[str]:
        return set(self._authorised)
