"""``help`` — list every command the pipeline understands."""

from typing import AsyncIterator, Sequence

from pipebot.domain.pipeline import HandlerMapping, Middleware, Pipeline
from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseMessage


class HelpMiddleware(Middleware):
    def __init__(self, stages: Sequence[Middleware]):
        self.handler_mappings = (
            HandlerMapping(
                valid_handles=("help",),
                evaluator=self._help_handler,
                description="`help` - this message",
            ),
        )
        self._listed = Pipeline((*stages, self))

    async def _help_handler(self, message: IncomingMessage, handle: str) -> AsyncIterator[ResponseMessage]:
        lines = []
        for valid_handle, description in self._listed.handles():
            # mappings with several handles share one description
            line = description or f"`{valid_handle}`"
            if line not in lines:
                lines.append(line)
        yield message.reply_to_channel("**Commands**\n" + "\n".join(lines))
