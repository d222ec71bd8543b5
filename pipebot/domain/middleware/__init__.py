"""Standard pipeline stages."""

from pipebot.domain.middleware.admin import AdminMiddleware
from pipebot.domain.middleware.help import HelpMiddleware
from pipebot.domain.middleware.schedule import ScheduleMiddleware
from pipebot.domain.middleware.stats import StatsMiddleware

__all__ = [
    "AdminMiddleware",
    "HelpMiddleware",
    "ScheduleMiddleware",
    "StatsMiddleware",
]
