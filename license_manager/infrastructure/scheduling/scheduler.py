"""Per-user daily timers driving the expiration notification pipeline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone, tzinfo
from typing import Protocol

import anyio.to_thread
from sqlalchemy.orm import Session, sessionmaker

from license_manager.application.use_cases.notification_settings import (
    get_enabled_schedule,
    list_enabled_schedules,
)
from license_manager.domain.entities import NotificationRunSummary, NotificationScope
from license_manager.utils import format_time_of_day, next_fire_time

from .registry import ScheduledJob, ScheduleRegistry, UserSchedule

logger = logging.getLogger(__name__)


class ScopeRunner(Protocol):
    async def process(self, scope: NotificationScope) -> NotificationRunSummary:
        ...


class NotificationScheduler:
    """Install, replace and cancel one daily timer per opted-in user.

    Every timer is an ``asyncio`` task sleeping until the user's next local
    fire time, so the scheduler must be driven from a running event loop.
    """

    def __init__(
        self,
        runner: ScopeRunner,
        session_factory: sessionmaker[Session],
        *,
        timezone: tzinfo,
        registry: ScheduleRegistry | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._runner = runner
        self._session_factory = session_factory
        self.timezone = timezone
        self.registry = registry if registry is not None else ScheduleRegistry()
        self._sleep = sleep
        self._clock = clock or (lambda: datetime.now(tz=self.timezone))
        self.startup_run: asyncio.Task[None] | None = None

    async def start(self, *, run_immediately: bool = False) -> int:
        """Install a timer for every enabled user; return how many were installed.

        With ``run_immediately`` every user is also checked once by the
        ``startup_run`` background task.
        """

        schedules = await anyio.to_thread.run_sync(self._load_all)
        for schedule in schedules:
            self.install_or_replace(schedule)
        logger.info("Notification scheduler started with %d user schedule(s)", len(schedules))

        if run_immediately and schedules:
            self.startup_run = asyncio.get_running_loop().create_task(
                self._fire_all(schedules), name="license-notifications-startup"
            )
        return len(schedules)

    async def shutdown(self) -> None:
        """Cancel every timer and wait for the tasks to finish."""

        jobs = self.registry.drain()
        tasks = [job.task for job in jobs]
        if self.startup_run is not None:
            tasks.append(self.startup_run)
            self.startup_run = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Notification scheduler stopped (%d timer(s) cancelled)", len(jobs))

    def install_or_replace(self, schedule: UserSchedule) -> ScheduledJob:
        """Start the timer of ``schedule.user_id``, cancelling any previous one."""

        task = asyncio.get_running_loop().create_task(
            self._run_forever(schedule), name=f"license-notifications-{schedule.user_id}"
        )
        job = ScheduledJob(schedule=schedule, task=task)
        previous = self.registry.put(job)
        if previous is not None:
            previous.task.cancel()
        logger.info(
            "Scheduled notifications for user %s at %s (%s days ahead)",
            schedule.user_id,
            format_time_of_day(schedule.notification_time),
            schedule.days_before_expiration,
        )
        return job

    def remove_schedule(self, user_id: int) -> bool:
        """Cancel the timer of ``user_id``; return whether one existed."""

        job = self.registry.pop(user_id)
        if job is None:
            return False
        job.task.cancel()
        logger.info("Removed notification schedule for user %s", user_id)
        return True

    async def refresh_user(self, user_id: int) -> bool:
        """Reload ``user_id``'s settings and install or remove its timer.

        Returns ``True`` when a timer is installed afterwards.
        """

        schedule = await anyio.to_thread.run_sync(self._load_one, user_id)
        if schedule is None:
            self.remove_schedule(user_id)
            return False
        self.install_or_replace(schedule)
        return True

    def next_run_at(self, user_id: int) -> datetime | None:
        job = self.registry.get(user_id)
        if job is None:
            return None
        return next_fire_time(job.schedule.notification_time, self._now())

    async def _run_forever(self, schedule: UserSchedule) -> None:
        after = self._now()
        while True:
            fire_at = next_fire_time(schedule.notification_time, after)
            # Sleep for elapsed time, not the local wall-clock difference.
            delay = fire_at.astimezone(timezone.utc) - self._now().astimezone(timezone.utc)
            await self._sleep(max(delay.total_seconds(), 0.0))
            await self._fire(schedule)
            after = max(self._now(), fire_at, key=lambda value: value.astimezone(timezone.utc))

    def _now(self) -> datetime:
        return self._clock().astimezone(self.timezone)

    async def _fire_all(self, schedules: list[UserSchedule]) -> None:
        for schedule in schedules:
            await self._fire(schedule)
        logger.info("Startup notification checks finished for %d user(s)", len(schedules))

    async def _fire(self, schedule: UserSchedule) -> None:
        logger.info("Running scheduled notification check for user %s", schedule.user_id)
        try:
            await self._runner.process(schedule.to_scope())
        except Exception:
            logger.exception(
                "Scheduled notification check failed for user %s", schedule.user_id
            )

    def _load_all(self) -> list[UserSchedule]:
        with self._session_factory() as session:
            return [UserSchedule.from_settings(item) for item in list_enabled_schedules(session)]

    def _load_one(self, user_id: int) -> UserSchedule | None:
        with self._session_factory() as session:
            settings = get_enabled_schedule(session, user_id)
        return UserSchedule.from_settings(settings) if settings else None


__all__ = ["NotificationScheduler", "ScopeRunner"]
