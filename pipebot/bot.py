"""Bot — runs messages through the pipeline and delivers the replies."""

from typing import Optional

from pipebot.domain.pipeline import Pipeline
from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import NotificationPort, ResponseMessage, ResponseType


class Bot:
    """Transport-agnostic core shared by live messages and scheduled commands.

    The notification port is wired once the transport is connected.
    """

    def __init__(self, pipeline: Pipeline, notification: Optional[NotificationPort] = None):
        self.pipeline = pipeline
        self._notification = notification

    def wire(self, notification: NotificationPort):
        self._notification = notification

    async def handle(self, message: IncomingMessage):
        """Dispatch message and deliver replies in emission order.

        Delivery errors propagate so scheduled runs can be retried.
        """
        async for response in self.pipeline.invoke(message):
            await self._deliver(response)

    async def _deliver(self, response: ResponseMessage):
        if self._notification is None:
            raise RuntimeError("Bot has no notification port wired")
        if response.response_type == ResponseType.TYPING:
            await self._notification.send_typing(response.channel_id)
        elif response.response_type == ResponseType.DIRECT_MESSAGE:
            await self._notification.send_direct(response.user_id, response.text)
        else:
            await self._notification.send(response.channel_id, response.text)
