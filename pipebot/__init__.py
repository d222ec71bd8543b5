"""pipebot — chat command pipeline with a persistent command scheduler."""

__version__ = "0.1.0"

from pipebot.bot import Bot
from pipebot.config import AppConfig
from pipebot.domain.admin import AdminState
from pipebot.domain.pipeline import HandlerMapping, Middleware, Pipeline, PipelineBuilder
from pipebot.domain.schedule import ScheduleEntry, ScheduleLoadError, ScheduleStore
from pipebot.infrastructure.stats import StatsRecorder
from pipebot.ports.inbound import IncomingMessage
from pipebot.ports.outbound import ResponseMessage, ResponseType

__all__ = [
    "AdminState",
    "AppConfig",
    "Bot",
    "HandlerMapping",
    "IncomingMessage",
    "Middleware",
    "Pipeline",
    "PipelineBuilder",
    "ResponseMessage",
    "ResponseType",
    "ScheduleEntry",
    "ScheduleLoadError",
    "ScheduleStore",
    "StatsRecorder",
]
