"""Shared fakes and helpers for pipeline and scheduler tests."""

from typing import List

from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseType, StorageError


class FakeStorage:
    """In-memory StoragePort. ``writes`` keeps (command, last_run) snapshots."""

    def __init__(self, records=None, fail_reads=False, fail_writes=False):
        self.records = {"schedules": list(records or [])}
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes: List[list] = []

    def read_records(self, name, record_type):
        if self.fail_reads:
            raise StorageError("disk on fire")
        return list(self.records.get(name, []))

    def write_records(self, name, records):
        if self.fail_writes:
            raise StorageError("disk full")
        self.records[name] = list(records)
        self.writes.append([(r.command, r.last_run) for r in records])


def make_message(text: str, user_id: str = "U1", username: str = "alice",
                 channel: str = "C1", channel_type: ResponseType = ResponseType.CHANNEL) -> IncomingMessage:
    return IncomingMessage(
        message_id="M1",
        text=text,
        targeted_text=text,
        user_id=user_id,
        username=username,
        channel_id=channel,
        channel_type=channel_type,
    )


async def collect(responses):
    return [r async for r in responses]
