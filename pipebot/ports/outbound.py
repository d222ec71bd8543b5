"""Outbound ports — interfaces for external system adapters."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Protocol, Sequence, Type, TypeVar, runtime_checkable

T = TypeVar("T")


class ResponseType(str, Enum):
    """Where a response goes. Schedule entries reuse the first two as channel kinds."""

    CHANNEL = "Channel"
    DIRECT_MESSAGE = "DirectMessage"
    TYPING = "Typing"


@dataclass(frozen=True)
class ResponseMessage:
    """One reply produced by a handler, consumed by the transport."""

    response_type: ResponseType
    channel_id: str
    user_id: str = ""
    text: str = ""


class StorageError(Exception):
    """Raised when records cannot be read or written."""


@runtime_checkable
class StoragePort(Protocol):
    """Interface for typed record persistence."""

    def read_records(self, name: str, record_type: Type[T]) -> List[T]: ...
    def write_records(self, name: str, records: Sequence[T]) -> None: ...


@runtime_checkable
class StatsPort(Protocol):
    """Interface for recording named operational values."""

    def record_stat(self, key: str, value: str) -> None: ...
    def get_stats(self) -> Dict[str, str]: ...


@runtime_checkable
class NotificationPort(Protocol):
    """Interface for sending messages to channels."""

    async def send(self, channel_id: str, text: str) -> None: ...
    async def send_direct(self, user_id: str, text: str) -> None: ...
    async def send_typing(self, channel_id: str) -> None: ...
