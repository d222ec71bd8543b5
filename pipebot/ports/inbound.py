"""Inbound port — transport-agnostic message representation."""

from dataclasses import dataclass

from pipebot.ports.outbound import ResponseMessage, ResponseType


@dataclass(frozen=True)
class IncomingMessage:
    """Discord/CLI/scheduler-agnostic message representation.

    ``targeted_text`` is ``text`` with any bot-mention prefix stripped; the
    pipeline matches on it.
    """

    message_id: str
    text: str
    targeted_text: str
    user_id: str
    username: str
    channel_id: str
    channel_type: ResponseType = ResponseType.CHANNEL

    def reply_to_channel(self, text: str) -> ResponseMessage:
        return ResponseMessage(
            response_type=ResponseType.CHANNEL,
            channel_id=self.channel_id,
            user_id=self.user_id,
            text=text,
        )

    def reply_direct(self, text: str) -> ResponseMessage:
        return ResponseMessage(
            response_type=ResponseType.DIRECT_MESSAGE,
            channel_id=self.channel_id,
            user_id=self.user_id,
            text=text,
        )

    def indicate_typing_on_channel(self) -> ResponseMessage:
        return ResponseMessage(
            response_type=ResponseType.TYPING,
            channel_id=self.channel_id,
            user_id=self.user_id,
        )
