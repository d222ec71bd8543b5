"""Discord adapter — bridges discord.Client to the Bot pipeline.

DiscordTransport converts Discord messages to IncomingMessage and hands them
to Bot; DiscordNotificationAdapter sends the replies back.
"""

import re
import sys
from typing import Awaitable, Callable, Optional

import discord

from pipebot.bot import Bot
from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseType

_MAX_MESSAGE_LENGTH = 2000


def _log(msg: str):
    print(msg, file=sys.stderr)


def strip_bot_mention(text: str, bot_id: Optional[int], bot_name: Optional[str]) -> str:
    """Strip a leading ``<@id>``, ``<@!id>`` or ``@name`` addressed to the bot."""
    stripped = text.strip()
    prefixes = []
    if bot_id is not None:
        prefixes += [f"<@{bot_id}>", f"<@!{bot_id}>"]
    if bot_name:
        prefixes.append(f"@{bot_name}")
    for prefix in prefixes:
        if not stripped.lower().startswith(prefix.lower()):
            continue
        rest = stripped[len(prefix):]
        # "@pipebotty" is not "@pipebot"
        if rest and not prefix.endswith(">") and rest[0] not in " \t:,":
            continue
        return re.sub(r"^[\s:,]+", "", rest)
    return stripped


class DiscordNotificationAdapter:
    """NotificationPort implementation using discord.Client."""

    def __init__(self, client: discord.Client):
        self._client = client

    async def _resolve_channel(self, channel_id: str):
        """Cached channel, else fetched. DM channels are uncached after a restart.

        discord.NotFound and discord.HTTPException propagate.
        """
        channel = self._client.get_channel(int(channel_id))
        if channel is None:
            channel = await self._client.fetch_channel(int(channel_id))
        return channel

    async def send(self, channel_id: str, text: str) -> None:
        channel = await self._resolve_channel(channel_id)
        # Split long messages
        while text:
            await channel.send(text[:_MAX_MESSAGE_LENGTH])
            text = text[_MAX_MESSAGE_LENGTH:]

    async def send_direct(self, user_id: str, text: str) -> None:
        user = self._client.get_user(int(user_id))
        if user is None:
            user = await self._client.fetch_user(int(user_id))
        while text:
            await user.send(text[:_MAX_MESSAGE_LENGTH])
            text = text[_MAX_MESSAGE_LENGTH:]

    async def send_typing(self, channel_id: str) -> None:
        channel = await self._resolve_channel(channel_id)
        await channel.typing()


class DiscordTransport(discord.Client):
    """Thin Discord client that delegates every human message to Bot.

    ``on_connected`` runs after each successful login (e.g. to start the
    schedule store).
    """

    def __init__(
        self,
        bot: Bot,
        token: str,
        on_connected: Optional[Callable[[], Awaitable[None]]] = None,
        **discord_kwargs,
    ):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self._bot = bot
        self._token = token
        self._on_connected = on_connected

    async def connect_session(self):
        """Log in and run the gateway until disconnected."""
        await self.start(self._token)

    async def disconnect(self):
        if not self.is_closed():
            await self.close()

    def _to_incoming(self, message: discord.Message) -> IncomingMessage:
        """Convert a Discord message to transport-agnostic IncomingMessage."""
        bot_id = self.user.id if self.user else None
        bot_name = self.user.name if self.user else None
        is_dm = isinstance(message.channel, discord.DMChannel)
        return IncomingMessage(
            message_id=str(message.id),
            text=message.content,
            targeted_text=strip_bot_mention(message.content, bot_id, bot_name),
            user_id=str(message.author.id),
            username=message.author.name,
            channel_id=str(message.channel.id),
            channel_type=ResponseType.DIRECT_MESSAGE if is_dm else ResponseType.CHANNEL,
        )

    async def on_ready(self):
        _log(f"[Discord] logged in as {self.user}")
        self._bot.wire(DiscordNotificationAdapter(self))
        if self._on_connected:
            await self._on_connected()

    async def on_message(self, message: discord.Message):
        # Ignore own and other bots' messages
        if not self.user or message.author == self.user or message.author.bot:
            return

        incoming = self._to_incoming(message)
        try:
            await self._bot.handle(incoming)
        except Exception as e:
            _log(f"[Discord] failed to handle message {incoming.message_id}: {e}")
