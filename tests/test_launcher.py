"""Tests for the launcher wiring — pipeline stages and scheduler feedback loop."""

import tempfile

import pytest

from helpers import make_message
from pipebot.config import AppConfig
from pipebot.domain.middleware import (
    AdminMiddleware,
    HelpMiddleware,
    ScheduleMiddleware,
    StatsMiddleware,
)
from pipebot.domain.pipeline import UnhandledMessageMiddleware
from pipebot.launcher import build_components, run


class _RecordingNotification:
    def __init__(self):
        self.sent = []

    async def send(self, channel_id, text):
        self.sent.append((channel_id, text))

    async def send_direct(self, user_id, text):
        self.sent.append((user_id, text))

    async def send_typing(self, channel_id):
        pass


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as d:
        yield d


def test_stage_order(tmp_dir):
    components = build_components(AppConfig(storage_dir=tmp_dir, admin_pin=1))
    kinds = [type(s) for s in components.bot.pipeline.stages]
    assert kinds == [
        AdminMiddleware,
        ScheduleMiddleware,
        StatsMiddleware,
        HelpMiddleware,
        UnhandledMessageMiddleware,
    ]
    assert components.admin.admin_mode_enabled() is True


@pytest.mark.asyncio
async def test_help_lists_every_command(tmp_dir):
    components = build_components(AppConfig(storage_dir=tmp_dir))
    notification = _RecordingNotification()
    components.bot.wire(notification)

    await components.bot.handle(make_message("help"))

    [(_, text)] = notification.sent
    for handle in ("admin pin", "admin schedules list", "schedule hourly", "schedule list", "stats", "help"):
        assert f"`{handle}" in text


@pytest.mark.asyncio
async def test_scheduled_command_runs_through_pipeline(tmp_dir):
    components = build_components(AppConfig(storage_dir=tmp_dir))
    notification = _RecordingNotification()
    components.bot.wire(notification)

    await components.bot.handle(make_message("schedule hourly stats", channel="C5"))
    notification.sent.clear()

    await components.schedules.run_schedules()

    [(channel, text)] = notification.sent
    assert channel == "C5"
    assert text.startswith(">>>")
    assert "Schedules:Active: 1" in text


@pytest.mark.asyncio
async def test_run_without_token_returns(tmp_dir):
    await run(AppConfig(storage_dir=tmp_dir, discord_token=""))
