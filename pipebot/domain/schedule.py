"""Schedule store — recurring command entries, persistence, and due-checking.

Entries are re-injected into the message pipeline as if their owner had just
typed the command. The whole set is loaded once on start and written back
after every mutation and every tick.
"""

import asyncio
import sys
import uuid
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable, List, Optional

from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseType, StatsPort, StoragePort


def _log(msg: str):
    print(msg, file=sys.stderr)


SCHEDULES_FILE = "schedules"
TICK_INTERVAL_SECONDS = 10

# Night is strictly after 20:00:00 or strictly before 05:00:00.
NIGHT_STARTS = time(20, 0, 0)
NIGHT_ENDS = time(5, 0, 0)

STAT_LAST_RUN = "Schedules:LastRun"
STAT_IS_NIGHT = "Schedules:IsCurrentlyNight"
STAT_ACTIVE = "Schedules:Active"
STAT_FAILED_RUNS = "Schedules:FailedRuns"
STAT_PERSIST_ERROR = "Schedules:LastPersistError"

Dispatch = Callable[[IncomingMessage], Awaitable[None]]


class ScheduleLoadError(Exception):
    """Raised when the persisted schedule set cannot be loaded at start."""


@dataclass(eq=False)
class ScheduleEntry:
    """A stored command run every ``run_every`` on behalf of its owner.

    Compared by identity; the same command may be scheduled twice for one
    channel.
    """

    run_every: timedelta
    command: str
    channel: str
    channel_type: ResponseType = ResponseType.CHANNEL
    user_id: str = ""
    user_name: str = ""
    run_only_at_night: bool = False
    last_run: Optional[datetime] = None

    def describe(self, index: Optional[int] = None) -> str:
        last = self.last_run.strftime("%Y-%m-%d %H:%M:%S") if self.last_run else "never"
        text = (
            f"Running command `'{self.command}'` every `'{self.run_every}'`. "
            f"Last run at `'{last}'`. Runs only at night: `{self.run_only_at_night}`."
        )
        if index is not None:
            text = f"Id: `{index}`. {text}"
        return text


def is_night(moment: datetime) -> bool:
    t = moment.time()
    return t > NIGHT_STARTS or t < NIGHT_ENDS


def is_due(entry: ScheduleEntry, now: datetime) -> bool:
    """Check if entry should run at ``now`` (interval elapsed, night gate)."""
    due = entry.last_run is None or entry.last_run + entry.run_every < now
    if due and entry.run_only_at_night:
        due = is_night(now)
    return due


def sort_schedules(entries: List[ScheduleEntry]) -> List[ScheduleEntry]:
    """Order by interval asc, last run desc (never-run last), command asc.

    Successive stable sorts, least significant key first; remaining ties keep
    insertion order.
    """
    ordered = sorted(entries, key=lambda e: e.command)
    ordered.sort(key=lambda e: (e.last_run is not None, e.last_run or datetime.min), reverse=True)
    ordered.sort(key=lambda e: e.run_every)
    return ordered


class ScheduleStore:
    """Owns the schedule set: CRUD, persistence, and the periodic tick."""

    def __init__(
        self,
        storage: StoragePort,
        stats: StatsPort,
        dispatch: Dispatch,
        clock: Callable[[], datetime] = datetime.now,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ):
        self._storage = storage
        self._stats = stats
        self._dispatch = dispatch
        self._clock = clock
        self._tick_interval = tick_interval
        self._lock = asyncio.Lock()
        self._schedules: List[ScheduleEntry] = []
        self._tick_task: Optional[asyncio.Task] = None
        self._tick_running = False
        self._failed_runs = 0
        self._loaded = False

    @property
    def running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    async def start(self):
        """Load persisted entries and begin ticking. Load failure is fatal."""
        if self.running:
            return
        async with self._lock:
            try:
                loaded = self._storage.read_records(SCHEDULES_FILE, ScheduleEntry)
            except Exception as e:
                raise ScheduleLoadError(f"cannot load schedules: {e}") from e
            self._schedules[:] = loaded
            self._loaded = True
        _log(f"[ScheduleStore] started, {len(loaded)} schedule(s) loaded, tick every {self._tick_interval}s")
        self._tick_task = asyncio.create_task(self._tick_loop())

    async def stop(self):
        """Stop ticking and persist. In-flight dispatches are not awaited.

        Nothing is written if the store never loaded, so a failed start cannot
        overwrite the persisted set.
        """
        task, self._tick_task = self._tick_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if not self._loaded:
            return
        async with self._lock:
            self._persist_locked()
        _log("[ScheduleStore] stopped")

    async def add_schedule(self, entry: ScheduleEntry):
        async with self._lock:
            self._schedules.append(entry)
            self._persist_locked()

    async def delete_schedule(self, entry: ScheduleEntry) -> bool:
        """Remove entry by identity. Returns True if found and removed."""
        async with self._lock:
            for i, existing in enumerate(self._schedules):
                if existing is entry:
                    del self._schedules[i]
                    self._persist_locked()
                    return True
            return False

    async def list_schedules_for_channel(self, channel: str) -> List[ScheduleEntry]:
        async with self._lock:
            return sort_schedules([e for e in self._schedules if e.channel == channel])

    async def list_all_schedules(self) -> List[ScheduleEntry]:
        async with self._lock:
            return sort_schedules(list(self._schedules))

    async def run_schedules(self):
        """One tick: dispatch every due entry, then persist.

        A tick that fires while the previous one is still running is skipped.
        The lock is released while commands are dispatched, so scheduled
        commands may themselves query the store.
        """
        if self._tick_running:
            _log("[ScheduleStore] previous tick still running, skipping")
            return
        self._tick_running = True
        try:
            now = self._clock()
            async with self._lock:
                self._stats.record_stat(STAT_LAST_RUN, now.strftime("%Y-%m-%d %H:%M:%S"))
                self._stats.record_stat(STAT_IS_NIGHT, str(is_night(now)))
                due = [e for e in self._schedules if is_due(e, now)]

            completed = []
            for entry in due:
                _log(f"[ScheduleStore] running schedule: {entry.describe()}")
                try:
                    await self._dispatch(self._to_message(entry))
                except Exception as e:
                    self._failed_runs += 1
                    self._stats.record_stat(STAT_FAILED_RUNS, str(self._failed_runs))
                    _log(f"[ScheduleStore] schedule {entry.command!r} in {entry.channel} failed: {e}")
                    continue
                completed.append(entry)

            async with self._lock:
                for entry in completed:
                    still_present = any(e is entry for e in self._schedules)
                    if still_present and (entry.last_run is None or entry.last_run < now):
                        entry.last_run = now
                self._persist_locked()
        finally:
            self._tick_running = False

    async def _tick_loop(self):
        while True:
            await asyncio.sleep(self._tick_interval)
            try:
                await self.run_schedules()
            except Exception as e:
                _log(f"[ScheduleStore] tick error: {e}")

    @staticmethod
    def _to_message(entry: ScheduleEntry) -> IncomingMessage:
        return IncomingMessage(
            message_id=f"schedule-{uuid.uuid4().hex[:8]}",
            text=entry.command,
            targeted_text=entry.command,
            user_id=entry.user_id,
            username=entry.user_name,
            channel_id=entry.channel,
            channel_type=entry.channel_type,
        )

    def _persist_locked(self) -> bool:
        """Write the full set. Caller holds the lock. Failures are logged, not raised."""
        try:
            self._storage.write_records(SCHEDULES_FILE, list(self._schedules))
        except Exception as e:
            _log(f"[ScheduleStore] save failed: {e}")
            self._stats.record_stat(STAT_PERSIST_ERROR, str(e))
            return False
        finally:
            self._stats.record_stat(STAT_ACTIVE, str(len(self._schedules)))
        return True
