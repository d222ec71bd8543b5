"""Admin commands: ``admin pin <pin>`` and ``admin schedules list``."""

import re
from typing import AsyncIterator

from pipebot.domain.admin import AdminState
from pipebot.domain.pipeline import HandlerMapping, Middleware
from pipebot.domain.schedule import ScheduleStore
from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseMessage

_PIN_PATTERN = re.compile(r"[+-]?[0-9]+")


class AdminMiddleware(Middleware):
    def __init__(self, admin: AdminState, schedules: ScheduleStore):
        self._admin = admin
        self._schedules = schedules
        self.handler_mappings = (
            HandlerMapping(
                valid_handles=("admin pin",),
                evaluator=self._pin_handler,
                description="`admin pin <pin>` - get admin rights",
            ),
            HandlerMapping(
                valid_handles=("admin schedules list",),
                evaluator=self._schedules_list_handler,
                description="`admin schedules list` - list schedules in every channel",
            ),
        )

    async def _pin_handler(self, message: IncomingMessage, handle: str) -> AsyncIterator[ResponseMessage]:
        if not self._admin.admin_mode_enabled():
            yield message.reply_to_channel("Admin mode isn't enabled.")
            return

        pin_text = message.targeted_text[len(handle):].strip()
        # int() alone would take "12_34" and non-ASCII digits
        if not _PIN_PATTERN.fullmatch(pin_text):
            yield message.reply_to_channel(f"Unable to parse pin '{pin_text}'")
            return
        pin = int(pin_text)

        if self._admin.authorise_user(message.user_id, pin):
            yield message.reply_to_channel(f"{message.username} - you now have admin rights.")
        else:
            yield message.reply_to_channel("Incorrect admin pin entered.")

    async def _schedules_list_handler(self, message: IncomingMessage, handle: str) -> AsyncIterator[ResponseMessage]:
        if not self._admin.authenticate_user(message.user_id):
            yield message.reply_to_channel(f"Sorry {message.username}, only admins can use this function.")
            return

        yield message.indicate_typing_on_channel()

        schedules = await self._schedules.list_all_schedules()
        lines = [f"{entry.describe(i)} Channel: {entry.channel}" for i, entry in enumerate(schedules)]

        yield message.reply_to_channel("All Schedules:")
        yield message.reply_to_channel(">>>" + "\n".join(lines))
