"""Bookkeeping of the timer task installed for each user."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import time

from license_manager.domain.entities import NotificationScope, NotificationSettings


@dataclass(frozen=True)
class UserSchedule:
    """Daily fire time and pipeline scope of one user."""

    user_id: int
    notification_time: time
    days_before_expiration: int
    include_inactive: bool = False

    @classmethod
    def from_settings(cls, settings: NotificationSettings) -> "UserSchedule":
        return cls(
            user_id=settings.user_id,
            notification_time=settings.notification_time,
            days_before_expiration=settings.days_before_expiration,
            include_inactive=settings.include_inactive,
        )

    def to_scope(self) -> NotificationScope:
        return NotificationScope(
            days_ahead=self.days_before_expiration,
            include_inactive=self.include_inactive,
            user_id=self.user_id,
        )


@dataclass
class ScheduledJob:
    schedule: UserSchedule
    task: asyncio.Task


class ScheduleRegistry:
    """Hold at most one :class:`ScheduledJob` per user."""

    def __init__(self) -> None:
        self._jobs: dict[int, ScheduledJob] = {}

    def get(self, user_id: int) -> ScheduledJob | None:
        return self._jobs.get(user_id)

    def put(self, job: ScheduledJob) -> ScheduledJob | None:
        """Store ``job`` and return the job it replaced, if any."""

        previous = self._jobs.get(job.schedule.user_id)
        self._jobs[job.schedule.user_id] = job
        return previous

    def pop(self, user_id: int) -> ScheduledJob | None:
        return self._jobs.pop(user_id, None)

    def drain(self) -> list[ScheduledJob]:
        """Remove and return every job."""

        jobs = list(self._jobs.values())
        self._jobs.clear()
        return jobs

    def user_ids(self) -> list[int]:
        return sorted(self._jobs)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)


__all__ = ["ScheduleRegistry", "ScheduledJob", "UserSchedule"]
