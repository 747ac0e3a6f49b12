"""Background scheduling of notification runs."""

from .registry import ScheduledJob, ScheduleRegistry, UserSchedule
from .scheduler import NotificationScheduler, ScopeRunner

__all__ = [
    "NotificationScheduler",
    "ScheduleRegistry",
    "ScheduledJob",
    "ScopeRunner",
    "UserSchedule",
]
