"""Port interfaces (Hexagonal Architecture)."""

from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import (
    NotificationPort,
    ResponseMessage,
    ResponseType,
    StatsPort,
    StorageError,
    StoragePort,
)

__all__ = [
    "IncomingMessage",
    "NotificationPort",
    "ResponseMessage",
    "ResponseType",
    "StatsPort",
    "StorageError",
    "StoragePort",
]
