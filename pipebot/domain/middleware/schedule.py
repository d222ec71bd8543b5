"""Schedule commands — add, list, and delete schedules for the current channel."""

from datetime import timedelta
from typing import AsyncIterator

from pipebot.domain.pipeline import HandlerMapping, Middleware
from pipebot.domain.schedule import ScheduleEntry, ScheduleStore
from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseMessage

HOURLY = timedelta(hours=1)
DAILY = timedelta(days=1)


class ScheduleMiddleware(Middleware):
    def __init__(self, schedules: ScheduleStore):
        self._schedules = schedules
        self.handler_mappings = (
            HandlerMapping(
                valid_handles=("schedule list",),
                evaluator=self._list_handler,
                description="`schedule list` - list schedules for this channel",
            ),
            HandlerMapping(
                valid_handles=("schedule delete",),
                evaluator=self._delete_handler,
                description="`schedule delete <id>` - remove a schedule by its list id",
            ),
            HandlerMapping(
                valid_handles=("schedule hourly",),
                evaluator=self._add_handler(HOURLY, night_only=False),
                description="`schedule hourly <command>` - run a command every hour",
            ),
            HandlerMapping(
                valid_handles=("schedule daily",),
                evaluator=self._add_handler(DAILY, night_only=False),
                description="`schedule daily <command>` - run a command every day",
            ),
            HandlerMapping(
                valid_handles=("schedule nightly",),
                evaluator=self._add_handler(DAILY, night_only=True),
                description="`schedule nightly <command>` - run a command once a night",
            ),
        )

    def _add_handler(self, run_every: timedelta, night_only: bool):
        async def handler(message: IncomingMessage, handle: str) -> AsyncIterator[ResponseMessage]:
            command = message.targeted_text[len(handle):].strip()
            if not command:
                yield message.reply_to_channel(
                    f"Please give me a command to schedule, e.g. `{handle} help`."
                )
                return

            entry = ScheduleEntry(
                run_every=run_every,
                command=command,
                channel=message.channel_id,
                channel_type=message.channel_type,
                user_id=message.user_id,
                user_name=message.username,
                run_only_at_night=night_only,
            )
            await self._schedules.add_schedule(entry)
            yield message.reply_to_channel(f"Schedule added: {entry.describe()}")

        return handler

    async def _list_handler(self, message: IncomingMessage, handle: str) -> AsyncIterator[ResponseMessage]:
        schedules = await self._schedules.list_schedules_for_channel(message.channel_id)
        if not schedules:
            yield message.reply_to_channel("No schedules set for this channel.")
            return

        yield message.indicate_typing_on_channel()
        lines = [entry.describe(i) for i, entry in enumerate(schedules)]
        yield message.reply_to_channel("Schedules for this channel:")
        yield message.reply_to_channel(">>>" + "\n".join(lines))

    async def _delete_handler(self, message: IncomingMessage, handle: str) -> AsyncIterator[ResponseMessage]:
        id_text = message.targeted_text[len(handle):].strip()
        try:
            index = int(id_text)
        except ValueError:
            yield message.reply_to_channel(f"Unable to parse id '{id_text}'")
            return

        schedules = await self._schedules.list_schedules_for_channel(message.channel_id)
        if index < 0 or index >= len(schedules):
            yield message.reply_to_channel(f"Schedule with id `{index}` not found.")
            return

        entry = schedules[index]
        if await self._schedules.delete_schedule(entry):
            yield message.reply_to_channel(f"Removed schedule: {entry.describe()}")
        else:
            yield message.reply_to_channel(f"Schedule with id `{index}` not found.")
