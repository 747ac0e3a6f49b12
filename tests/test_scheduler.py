"""Tests for the per-user notification timers."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from license_manager.application.use_cases.notification_settings import (
    update_notification_settings,
)
from license_manager.domain.entities import NotificationScope
from license_manager.infrastructure.scheduling import (
    NotificationScheduler,
    ScheduleRegistry,
    UserSchedule,
)

BANGKOK = ZoneInfo("Asia/Bangkok")
NOW = datetime(2024, 6, 15, 8, 0, tzinfo=BANGKOK)


class FakeRunner:
    def __init__(self) -> None:
        self.scopes: list[NotificationScope] = []
        self.failing_users: set[int] = set()
        self.fired = asyncio.Event()

    async def process(self, scope: NotificationScope):
        self.scopes.append(scope)
        self.fired.set()
        if scope.user_id in self.failing_users:
            raise RuntimeError("pipeline exploded")


async def _block_forever(delay: float) -> None:
    await asyncio.Event().wait()


def _scheduler(runner, session_factory, sleep=_block_forever) -> NotificationScheduler:
    return NotificationScheduler(
        runner, session_factory, timezone=BANGKOK, sleep=sleep, clock=lambda: NOW
    )


def test_start_installs_enabled_users_only(session_factory, seed):
    enabled = seed.user("enabled")
    disabled = seed.user("disabled")
    seed.settings(enabled)
    seed.settings(disabled, send_to_email=False)

    async def scenario():
        scheduler = _scheduler(FakeRunner(), session_factory)
        installed = await scheduler.start()
        user_ids = scheduler.registry.user_ids()
        await scheduler.shutdown()
        return installed, user_ids, len(scheduler.registry)

    installed, user_ids, remaining = asyncio.run(scenario())

    assert installed == 1
    assert user_ids == [enabled]
    assert remaining == 0


def test_timer_sleeps_until_local_fire_time_and_runs_user_scope(session_factory, seed):
    user_id = seed.user("alice")
    seed.settings(user_id, notification_time=time(9, 0), days_before_expiration=14)
    delays: list[float] = []

    async def scenario():
        runner = FakeRunner()

        async def fake_sleep(delay: float) -> None:
            delays.append(delay)
            if len(delays) > 1:
                await asyncio.Event().wait()

        scheduler = _scheduler(runner, session_factory, sleep=fake_sleep)
        await scheduler.start()
        await asyncio.wait_for(runner.fired.wait(), timeout=1)
        await scheduler.shutdown()
        return runner.scopes

    scopes = asyncio.run(scenario())

    assert delays[0] == 3600
    assert scopes == [NotificationScope(days_ahead=14, include_inactive=False, user_id=user_id)]


def test_failing_run_is_logged_and_timers_keep_going(session_factory, seed, caplog):
    broken = seed.user("broken")
    healthy = seed.user("healthy")
    seed.settings(broken)
    seed.settings(healthy)

    async def scenario():
        runner = FakeRunner()
        runner.failing_users.add(broken)
        calls = 0
        rearmed = asyncio.Event()

        async def fake_sleep(delay: float) -> None:
            nonlocal calls
            calls += 1
            if calls > 2:
                if calls == 4:
                    rearmed.set()
                await asyncio.Event().wait()

        scheduler = _scheduler(runner, session_factory, sleep=fake_sleep)
        await scheduler.start()
        await asyncio.wait_for(rearmed.wait(), timeout=1)
        fired_users = sorted(scope.user_id for scope in runner.scopes)
        await scheduler.shutdown()
        return fired_users

    with caplog.at_level(logging.ERROR):
        fired_users = asyncio.run(scenario())

    assert fired_users == sorted([broken, healthy])
    assert f"failed for user {broken}" in caplog.text


def test_run_immediately_fires_each_user_once(session_factory, seed):
    user_id = seed.user("alice")
    seed.settings(user_id)

    async def scenario():
        runner = FakeRunner()
        scheduler = _scheduler(runner, session_factory)
        await scheduler.start(run_immediately=True)
        await scheduler.startup_run
        await scheduler.shutdown()
        return runner.scopes

    assert [scope.user_id for scope in asyncio.run(scenario())] == [user_id]


def test_run_immediately_does_not_block_start(session_factory, seed):
    user_id = seed.user("alice")
    seed.settings(user_id)

    class SlowRunner(FakeRunner):
        async def process(self, scope: NotificationScope):
            await asyncio.Event().wait()

    async def scenario():
        scheduler = _scheduler(SlowRunner(), session_factory)
        installed = await asyncio.wait_for(scheduler.start(run_immediately=True), timeout=1)
        startup_run = scheduler.startup_run
        pending = not startup_run.done()
        await scheduler.shutdown()
        return installed, pending, startup_run.cancelled()

    installed, pending, cancelled = asyncio.run(scenario())

    assert installed == 1
    assert pending is True
    assert cancelled is True


def test_timer_fires_once_per_day_across_dst_fall_back(session_factory):
    new_york = ZoneInfo("America/New_York")
    current = datetime(2024, 11, 2, 13, 30, tzinfo=timezone.utc)
    fired: list[str] = []

    class RecordingRunner(FakeRunner):
        async def process(self, scope: NotificationScope):
            fired.append(current.astimezone(new_york).strftime("%m-%d %H:%M"))

    async def advance(delay: float) -> None:
        nonlocal current
        if len(fired) == 2:
            await asyncio.Event().wait()
        current += timedelta(seconds=delay)

    async def scenario():
        scheduler = NotificationScheduler(
            RecordingRunner(),
            session_factory,
            timezone=new_york,
            sleep=advance,
            clock=lambda: current,
        )
        scheduler.install_or_replace(
            UserSchedule(user_id=1, notification_time=time(9, 0), days_before_expiration=30)
        )
        for _ in range(100):
            if len(fired) == 2:
                break
            await asyncio.sleep(0)
        await scheduler.shutdown()

    asyncio.run(scenario())

    assert fired == ["11-03 09:00", "11-04 09:00"]


def test_refresh_removes_timer_when_email_is_disabled(session_factory, seed):
    user_id = seed.user("alice")
    seed.settings(user_id)

    async def scenario():
        scheduler = _scheduler(FakeRunner(), session_factory)
        await scheduler.start()
        job = scheduler.registry.get(user_id)

        with session_factory() as session:
            update_notification_settings(
                session,
                user_id=user_id,
                days_before_expiration=30,
                notification_time="09:00",
                send_to_email=False,
            )
        scheduled = await scheduler.refresh_user(user_id)
        await asyncio.gather(job.task, return_exceptions=True)
        return scheduled, user_id in scheduler.registry, job.task.cancelled()

    scheduled, still_registered, cancelled = asyncio.run(scenario())

    assert scheduled is False
    assert still_registered is False
    assert cancelled is True


def test_refresh_installs_timer_for_newly_enabled_user(session_factory, seed):
    user_id = seed.user("alice")

    async def scenario():
        scheduler = _scheduler(FakeRunner(), session_factory)
        await scheduler.start()
        before = user_id in scheduler.registry
        with session_factory() as session:
            update_notification_settings(
                session,
                user_id=user_id,
                days_before_expiration=10,
                notification_time="18:45",
            )
        scheduled = await scheduler.refresh_user(user_id)
        job = scheduler.registry.get(user_id)
        next_run = scheduler.next_run_at(user_id)
        await scheduler.shutdown()
        return before, scheduled, job.schedule, next_run

    before, scheduled, schedule, next_run = asyncio.run(scenario())

    assert before is False
    assert scheduled is True
    assert schedule.notification_time == time(18, 45)
    assert schedule.days_before_expiration == 10
    assert next_run == datetime(2024, 6, 15, 18, 45, tzinfo=BANGKOK)


def test_install_replaces_the_previous_timer(session_factory):
    async def scenario():
        scheduler = _scheduler(FakeRunner(), session_factory)
        first = scheduler.install_or_replace(
            UserSchedule(user_id=1, notification_time=time(9, 0), days_before_expiration=30)
        )
        second = scheduler.install_or_replace(
            UserSchedule(user_id=1, notification_time=time(10, 0), days_before_expiration=7)
        )
        await asyncio.gather(first.task, return_exceptions=True)
        current = scheduler.registry.get(1)
        await scheduler.shutdown()
        return first, second, current

    first, second, current = asyncio.run(scenario())

    assert first.task.cancelled()
    assert current is second
    assert current.schedule.notification_time == time(10, 0)


def test_each_scheduler_owns_its_registry(session_factory):
    shared = ScheduleRegistry()
    first = _scheduler(FakeRunner(), session_factory)
    second = _scheduler(FakeRunner(), session_factory)
    explicit = NotificationScheduler(
        FakeRunner(), session_factory, timezone=BANGKOK, registry=shared
    )

    assert first.registry is not second.registry
    assert explicit.registry is shared
