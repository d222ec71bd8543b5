"""Configuration loaded from the environment (.env supported)."""

import os
import re
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)


def _parse_pin(raw: str) -> Optional[int]:
    raw = raw.strip()
    if not raw:
        return None
    if not re.fullmatch(r"[+-]?[0-9]+", raw):
        _stderr_print(f"Invalid ADMIN_PIN={raw!r}, admin mode disabled")
        return None
    return int(raw)


def _parse_float(name: str, raw: str, default: float) -> float:
    try:
        value = float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default
    if value <= 0:
        _stderr_print(f"{name} must be positive, falling back to {default}")
        return default
    return value


def _parse_port(raw: str) -> int:
    raw = raw.strip()
    if not raw:
        return 0
    try:
        port = int(raw)
    except ValueError:
        _stderr_print(f"Invalid STATUS_PORT={raw!r}, status API disabled")
        return 0
    if not 0 <= port <= 65535:
        _stderr_print(f"STATUS_PORT={port} out of range, status API disabled")
        return 0
    return port


@dataclass
class AppConfig:
    discord_token: str = ""
    admin_pin: Optional[int] = None
    storage_dir: str = "memory"
    schedule_tick_seconds: float = 10.0
    status_port: int = 0

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            discord_token=os.getenv("DISCORD_BOT_TOKEN", ""),
            admin_pin=_parse_pin(os.getenv("ADMIN_PIN", "")),
            storage_dir=os.getenv("STORAGE_DIR", "memory"),
            schedule_tick_seconds=_parse_float(
                "SCHEDULE_TICK_SECONDS", os.getenv("SCHEDULE_TICK_SECONDS", "10"), 10.0
            ),
            status_port=_parse_port(os.getenv("STATUS_PORT", "")),
        )
