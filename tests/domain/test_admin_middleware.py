"""Tests for admin commands — pin authorization and schedule listing."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from helpers import collect, make_message
from pipebot.domain.admin import AdminState
from pipebot.domain.middleware.admin import AdminMiddleware
from pipebot.domain.pipeline import PipelineBuilder
from pipebot.domain.schedule import ScheduleEntry, ScheduleStore
from pipebot.ports.outbound import ResponseType

PIN = 4321


def _pipeline(admin, store):
    return PipelineBuilder().add(AdminMiddleware(admin, store)).build()


@pytest.fixture
def store(storage, stats):
    return ScheduleStore(storage=storage, stats=stats, dispatch=AsyncMock())


# ---------------------------------------------------------------------------
# admin pin
# ---------------------------------------------------------------------------

class TestPin:
    @pytest.mark.asyncio
    async def test_admin_mode_disabled(self, store):
        admin = AdminState(pin=None)
        responses = await collect(_pipeline(admin, store).invoke(make_message(f"admin pin {PIN}")))
        assert [r.text for r in responses] == ["Admin mode isn't enabled."]
        assert admin.authorised_users == set()

    @pytest.mark.asyncio
    async def test_correct_pin_grants_rights(self, store):
        admin = AdminState(pin=PIN)
        responses = await collect(_pipeline(admin, store).invoke(make_message(f"admin pin {PIN}")))
        assert [r.text for r in responses] == ["alice - you now have admin rights."]
        assert admin.authenticate_user("U1") is True

    @pytest.mark.asyncio
    async def test_repeating_correct_pin_keeps_rights(self, store):
        admin = AdminState(pin=PIN)
        pipeline = _pipeline(admin, store)
        await collect(pipeline.invoke(make_message(f"admin pin {PIN}")))
        await collect(pipeline.invoke(make_message(f"admin pin {PIN}")))
        assert admin.authorised_users == {"U1"}

    @pytest.mark.asyncio
    async def test_incorrect_pin(self, store):
        admin = AdminState(pin=PIN)
        responses = await collect(_pipeline(admin, store).invoke(make_message("admin pin 1111")))
        assert [r.text for r in responses] == ["Incorrect admin pin entered."]
        assert admin.authorised_users == set()

    @pytest.mark.asyncio
    async def test_incorrect_pin_does_not_revoke(self, store):
        admin = AdminState(pin=PIN)
        pipeline = _pipeline(admin, store)
        await collect(pipeline.invoke(make_message(f"admin pin {PIN}")))
        await collect(pipeline.invoke(make_message("admin pin 1111")))
        assert admin.authenticate_user("U1") is True

    @pytest.mark.asyncio
    async def test_non_numeric_pin(self, store):
        admin = AdminState(pin=PIN)
        responses = await collect(_pipeline(admin, store).invoke(make_message("admin pin 12ab")))
        assert [r.text for r in responses] == ["Unable to parse pin '12ab'"]
        assert admin.authorised_users == set()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pin_text", ["43_21", "٤٣٢١", "4 321"])
    async def test_pin_must_be_plain_digits(self, store, pin_text):
        admin = AdminState(pin=PIN)
        responses = await collect(_pipeline(admin, store).invoke(make_message(f"admin pin {pin_text}")))
        assert [r.text for r in responses] == [f"Unable to parse pin '{pin_text}'"]
        assert admin.authorised_users == set()

    @pytest.mark.asyncio
    async def test_signed_pin_parses(self, store):
        admin = AdminState(pin=PIN)
        responses = await collect(_pipeline(admin, store).invoke(make_message(f"admin pin +{PIN}")))
        assert [r.text for r in responses] == ["alice - you now have admin rights."]

    @pytest.mark.asyncio
    async def test_missing_pin(self, store):
        admin = AdminState(pin=PIN)
        responses = await collect(_pipeline(admin, store).invoke(make_message("admin pin")))
        assert [r.text for r in responses] == ["Unable to parse pin ''"]


# ---------------------------------------------------------------------------
# admin schedules list
# ---------------------------------------------------------------------------

class TestSchedulesList:
    @pytest.mark.asyncio
    async def test_denied_without_rights(self, store):
        admin = AdminState(pin=PIN)
        responses = await collect(_pipeline(admin, store).invoke(make_message("admin schedules list")))
        assert [r.text for r in responses] == ["Sorry alice, only admins can use this function."]

    @pytest.mark.asyncio
    async def test_lists_all_channels(self, store):
        admin = AdminState(pin=PIN)
        admin.authorise_user("U1", PIN)
        await store.add_schedule(ScheduleEntry(
            run_every=timedelta(hours=1), command="stats", channel="C100",
            user_id="U2", user_name="bob",
            last_run=datetime(2026, 3, 14, 9, 0, 0),
        ))
        await store.add_schedule(ScheduleEntry(
            run_every=timedelta(days=1), command="help", channel="C200",
            user_id="U3", user_name="carol", run_only_at_night=True,
        ))

        responses = await collect(_pipeline(admin, store).invoke(make_message("admin schedules list")))

        assert len(responses) == 3
        assert responses[0].response_type == ResponseType.TYPING
        assert responses[1].text == "All Schedules:"
        assert responses[2].text.startswith(">>>")
        lines = responses[2].text[len(">>>"):].split("\n")
        assert len(lines) == 2
        assert lines[0].startswith("Id: `0`.")
        assert lines[0].endswith("C100")
        assert "`'stats'`" in lines[0]
        assert "`'1:00:00'`" in lines[0]
        assert "`'2026-03-14 09:00:00'`" in lines[0]
        assert "Runs only at night: `False`" in lines[0]
        assert lines[1].startswith("Id: `1`.")
        assert lines[1].endswith("C200")
        assert "Runs only at night: `True`" in lines[1]

    @pytest.mark.asyncio
    async def test_rights_required_even_with_pin_configured_for_other_user(self, store):
        admin = AdminState(pin=PIN)
        admin.authorise_user("U9", PIN)
        responses = await collect(_pipeline(admin, store).invoke(
            make_message("admin schedules list", user_id="U1", username="alice")
        ))
        assert responses[0].text == "Sorry alice, only admins can use this function."
