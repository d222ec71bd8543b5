"""Read-only status API — stats and schedules."""

from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel

from pipebot.domain.schedule import ScheduleStore
from pipebot.ports.outbound import StatsPort


class ScheduleView(BaseModel):
    id: int
    command: str
    channel: str
    channel_type: str
    user_name: str
    run_every_seconds: float
    last_run: Optional[datetime] = None
    run_only_at_night: bool


class StatsResponse(BaseModel):
    stats: Dict[str, str]


def create_status_router(stats: StatsPort, schedules: Optional[ScheduleStore]) -> APIRouter:
    router = APIRouter(prefix="/status", tags=["Status"])

    @router.get("/stats", response_model=StatsResponse)
    async def get_stats():
        return StatsResponse(stats=stats.get_stats())

    @router.get("/schedules", response_model=List[ScheduleView])
    async def get_schedules():
        if schedules is None:
            raise HTTPException(status_code=503, detail="Scheduler not configured")
        entries = await schedules.list_all_schedules()
        return [
            ScheduleView(
                id=i,
                command=e.command,
                channel=e.channel,
                channel_type=e.channel_type.value,
                user_name=e.user_name,
                run_every_seconds=e.run_every.total_seconds(),
                last_run=e.last_run,
                run_only_at_night=e.run_only_at_night,
            )
            for i, e in enumerate(entries)
        ]

    return router


def create_app(stats: StatsPort, schedules: Optional[ScheduleStore]) -> FastAPI:
    app = FastAPI(title="pipebot status")
    app.include_router(create_status_router(stats, schedules))
    return app
