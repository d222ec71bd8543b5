"""Field codecs for delimited record files.

Each record type that can be stored gets a RecordCodec: an ordered list of
string fields going out, and a constructor from those fields coming back.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Generic, List, Optional, TypeVar

from pipebot.domain.schedule import ScheduleEntry
from pipebot.ports.outbound import ResponseType, StorageError

T = TypeVar("T")

NULL_VALUE = "=Null"

_TIMESPAN_RE = re.compile(r"^(?:(-?\d+)\.)?(\d{1,2}):(\d{2}):(\d{2})(?:\.(\d{1,7}))?$")


@dataclass(frozen=True)
class RecordCodec(Generic[T]):
    field_count: int
    encode: Callable[[T], List[str]]
    decode: Callable[[List[str]], T]


def format_timespan(value: timedelta) -> str:
    """Render a timedelta as ``[d.]hh:mm:ss[.ffffff]``."""
    hours, rem = divmod(value.seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if value.microseconds:
        text += f".{value.microseconds:06d}"
    if value.days:
        text = f"{value.days}.{text}"
    return text


def parse_timespan(text: str) -> timedelta:
    m = _TIMESPAN_RE.match(text.strip())
    if not m:
        raise StorageError(f"invalid timespan: {text!r}")
    days, hours, minutes, seconds, fraction = m.groups()
    micros = int((fraction or "0").ljust(6, "0")[:6])
    return timedelta(
        days=int(days or 0),
        hours=int(hours),
        minutes=int(minutes),
        seconds=int(seconds),
        microseconds=micros,
    )


def format_optional_datetime(value: Optional[datetime]) -> str:
    return NULL_VALUE if value is None else value.isoformat()


def parse_optional_datetime(text: str) -> Optional[datetime]:
    if text == NULL_VALUE or text == "":
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise StorageError(f"invalid timestamp: {text!r}") from e


def parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise StorageError(f"invalid boolean: {text!r}")


def parse_channel_type(text: str) -> ResponseType:
    if text == ResponseType.CHANNEL.value:
        return ResponseType.CHANNEL
    if text == ResponseType.DIRECT_MESSAGE.value:
        return ResponseType.DIRECT_MESSAGE
    raise StorageError(f"invalid channel type: {text!r}")


def _encode_schedule_entry(entry: ScheduleEntry) -> List[str]:
    return [
        format_optional_datetime(entry.last_run),
        format_timespan(entry.run_every),
        entry.command,
        entry.channel,
        entry.channel_type.value,
        entry.user_id,
        entry.user_name,
        str(entry.run_only_at_night),
    ]


def _decode_schedule_entry(fields: List[str]) -> ScheduleEntry:
    return ScheduleEntry(
        last_run=parse_optional_datetime(fields[0]),
        run_every=parse_timespan(fields[1]),
        command=fields[2],
        channel=fields[3],
        channel_type=parse_channel_type(fields[4]),
        user_id=fields[5],
        user_name=fields[6],
        run_only_at_night=parse_bool(fields[7]),
    )


SCHEDULE_ENTRY_CODEC: RecordCodec[ScheduleEntry] = RecordCodec(
    field_count=8,
    encode=_encode_schedule_entry,
    decode=_decode_schedule_entry,
)

DEFAULT_CODECS = {ScheduleEntry: SCHEDULE_ENTRY_CODEC}
