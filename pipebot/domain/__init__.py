"""Domain layer — pure Python, no framework dependencies."""

from pipebot.domain.admin import AdminState
from pipebot.domain.pipeline import (
    HandlerMapping,
    Middleware,
    Pipeline,
    PipelineBuilder,
    UnhandledMessageMiddleware,
)
from pipebot.domain.schedule import (
    ScheduleEntry,
    ScheduleLoadError,
    ScheduleStore,
    is_due,
    is_night,
    sort_schedules,
)

__all__ = [
    "AdminState",
    "HandlerMapping",
    "Middleware",
    "Pipeline",
    "PipelineBuilder",
    "UnhandledMessageMiddleware",
    "ScheduleEntry",
    "ScheduleLoadError",
    "ScheduleStore",
    "is_due",
    "is_night",
    "sort_schedules",
]
