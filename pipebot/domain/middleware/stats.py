"""``stats`` — show recorded operational stats."""

from typing import AsyncIterator

from pipebot.domain.pipeline import HandlerMapping, Middleware
from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseMessage, StatsPort


class StatsMiddleware(Middleware):
    def __init__(self, stats: StatsPort):
        self._stats = stats
        self.handler_mappings = (
            HandlerMapping(
                valid_handles=("stats",),
                evaluator=self._stats_handler,
                description="`stats` - show bot stats",
            ),
        )

    async def _stats_handler(self, message: IncomingMessage, handle: str) -> AsyncIterator[ResponseMessage]:
        stats = self._stats.get_stats()
        if not stats:
            yield message.reply_to_channel("No stats recorded yet.")
            return
        lines = [f"{key}: {value}" for key, value in stats.items()]
        yield message.reply_to_channel(">>>" + "\n".join(lines))
