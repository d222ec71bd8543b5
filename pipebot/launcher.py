"""Launcher — wires storage, scheduler, pipeline and transport, then runs."""

import asyncio
import sys
from dataclasses import dataclass
from typing import Optional

import uvicorn

from pipebot.adapters.discord.adapter import DiscordTransport
from pipebot.adapters.storage.delimited_store import DelimitedStorage
from pipebot.adapters.web.status_routes import create_app
from pipebot.bot import Bot
from pipebot.config import AppConfig
from pipebot.domain.admin import AdminState
from pipebot.domain.middleware import (
    AdminMiddleware,
    HelpMiddleware,
    ScheduleMiddleware,
    StatsMiddleware,
)
from pipebot.domain.pipeline import PipelineBuilder
from pipebot.domain.schedule import ScheduleLoadError, ScheduleStore
from pipebot.infrastructure.stats import StatsRecorder
from pipebot.ports.inbound import IncomingMessage


def _log(msg: str):
    print(msg, file=sys.stderr)


@dataclass
class Components:
    bot: Bot
    schedules: ScheduleStore
    stats: StatsRecorder
    admin: AdminState


def build_components(config: AppConfig) -> Components:
    """Build the object graph. The scheduler feeds its commands back into Bot."""
    stats = StatsRecorder()
    storage = DelimitedStorage(config.storage_dir)
    admin = AdminState(pin=config.admin_pin)

    bot: Optional[Bot] = None

    async def dispatch(message: IncomingMessage):
        await bot.handle(message)

    schedules = ScheduleStore(
        storage=storage,
        stats=stats,
        dispatch=dispatch,
        tick_interval=config.schedule_tick_seconds,
    )

    stages = [
        AdminMiddleware(admin, schedules),
        ScheduleMiddleware(schedules),
        StatsMiddleware(stats),
    ]
    builder = PipelineBuilder()
    for stage in stages:
        builder.add(stage)
    builder.add(HelpMiddleware(stages))

    bot = Bot(builder.build())
    return Components(bot=bot, schedules=schedules, stats=stats, admin=admin)


async def run(config: AppConfig):
    if not config.discord_token:
        _log("[Launcher] DISCORD_BOT_TOKEN not set, nothing to run.")
        return

    components = build_components(config)
    if not components.admin.admin_mode_enabled():
        _log("[Launcher] ADMIN_PIN not set, admin mode disabled")

    startup_errors = []
    server: Optional[uvicorn.Server] = None

    async def on_connected():
        try:
            await components.schedules.start()
        except ScheduleLoadError as e:
            # discord.py swallows errors raised from on_ready; shut down instead.
            _log(f"[Launcher] scheduler failed to start: {e}")
            startup_errors.append(e)
            if server is not None:
                server.should_exit = True
            await transport.disconnect()

    transport = DiscordTransport(components.bot, config.discord_token, on_connected=on_connected)

    tasks = [transport.connect_session()]
    if config.status_port:
        app = create_app(components.stats, components.schedules)
        server = uvicorn.Server(uvicorn.Config(app, host="0.0.0.0", port=config.status_port, log_level="info"))
        tasks.append(server.serve())
        _log(f"[Launcher] status API on port {config.status_port}")

    try:
        await asyncio.gather(*tasks)
    finally:
        await components.schedules.stop()
        await transport.disconnect()
    if startup_errors:
        raise startup_errors[0]


def main():
    asyncio.run(run(AppConfig.from_env()))


if __name__ == "__main__":
    main()
