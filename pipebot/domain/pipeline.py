"""Message pipeline — ordered middleware stages with prefix-based dispatch.

Each stage declares HandlerMappings: literal, case-sensitive prefixes and the
evaluator that handles them. The first stage with a matching prefix owns the
message; when no stage matches, the terminal stage replies that the request
was not understood.
"""

import sys
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional, Sequence, Tuple

from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseMessage


def _log(msg: str):
    print(msg, file=sys.stderr)


Evaluator = Callable[[IncomingMessage, str], AsyncIterator[ResponseMessage]]


@dataclass(frozen=True)
class HandlerMapping:
    valid_handles: Tuple[str, ...]
    evaluator: Evaluator
    description: str = ""

    def match(self, text: str) -> Optional[str]:
        """Return the first handle that ``text`` starts with, if any."""
        for handle in self.valid_handles:
            if text.startswith(handle):
                return handle
        return None


class Middleware:
    """One pipeline stage. Subclasses set ``handler_mappings`` in __init__."""

    handler_mappings: Tuple[HandlerMapping, ...] = ()

    def match(self, text: str) -> Optional[Tuple[HandlerMapping, str]]:
        for mapping in self.handler_mappings:
            handle = mapping.match(text)
            if handle is not None:
                return mapping, handle
        return None

    async def handle(self, message: IncomingMessage, mapping: HandlerMapping, handle: str) -> AsyncIterator[ResponseMessage]:
        async for response in mapping.evaluator(message, handle):
            yield response


class UnhandledMessageMiddleware(Middleware):
    """Terminal stage — owns every message nobody else matched."""

    def match(self, text: str) -> Optional[Tuple[HandlerMapping, str]]:
        return HandlerMapping(valid_handles=("",), evaluator=self._not_understood), ""

    async def _not_understood(self, message: IncomingMessage, handle: str) -> AsyncIterator[ResponseMessage]:
        yield message.reply_to_channel(f"Sorry {message.username}, I didn't understand that request.")


class Pipeline:
    """Immutable ordered chain of stages. Build with PipelineBuilder."""

    def __init__(self, stages: Sequence[Middleware]):
        self._stages: Tuple[Middleware, ...] = tuple(stages)

    @property
    def stages(self) -> Tuple[Middleware, ...]:
        return self._stages

    def resolve(self, text: str) -> Tuple[Middleware, HandlerMapping, str]:
        for stage in self._stages:
            found = stage.match(text)
            if found is not None:
                return stage, found[0], found[1]
        # Builder always appends the terminal stage; this is for hand-built pipelines.
        terminal = UnhandledMessageMiddleware()
        mapping, handle = terminal.match(text)
        return terminal, mapping, handle

    async def invoke(self, message: IncomingMessage) -> AsyncIterator[ResponseMessage]:
        """Yield the owning stage's responses in order. Never raises."""
        stage, mapping, handle = self.resolve(message.targeted_text)
        try:
            async for response in stage.handle(message, mapping, handle):
                yield response
        except Exception as e:
            _log(f"[Pipeline] {type(stage).__name__} failed on {message.targeted_text!r}: {e}")
            yield message.reply_to_channel(
                f"Sorry {message.username}, something went wrong handling that request."
            )

    def handles(self) -> List[Tuple[str, str]]:
        """All (handle, description) pairs in dispatch order."""
        result = []
        for stage in self._stages:
            for mapping in stage.handler_mappings:
                for handle in mapping.valid_handles:
                    result.append((handle, mapping.description))
        return result


class PipelineBuilder:
    def __init__(self):
        self._stages: List[Middleware] = []

    def add(self, stage: Middleware) -> "PipelineBuilder":
        self._stages.append(stage)
        return self

    def build(self) -> Pipeline:
        return Pipeline([*self._stages, UnhandledMessageMiddleware()])
