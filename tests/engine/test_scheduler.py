"""Tests for the engine timer schedulers."""

import asyncio

import pytest

from vnscript.engine import AsyncioScheduler, ManualScheduler, TimerHandle


class TestTimerHandle:
    def test_cancel_runs_hook_once(self):
        calls = []
        handle = TimerHandle(on_cancel=lambda: calls.append("cancel"))
        handle.cancel()
        handle.cancel()
        assert handle.cancelled
        assert not handle.active
        assert calls == ["cancel"]

    def test_fired_handle_is_inactive(self):
        handle = TimerHandle()
        handle.mark_fired()
        assert not handle.active
        assert not handle.cancelled


class TestManualScheduler:
    """Virtual clock behaviour."""

    def test_nothing_runs_until_clock_moves(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(0.0, lambda: fired.append(1))
        assert fired == []
        assert scheduler.pending == 1

    def test_runs_in_due_order(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(0.3, lambda: fired.append("c"))
        scheduler.call_later(0.1, lambda: fired.append("a"))
        scheduler.call_later(0.2, lambda: fired.append("b"))
        assert scheduler.advance(0.25) == 2
        assert fired == ["a", "b"]
        assert scheduler.now == pytest.approx(0.25)
        scheduler.advance(1.0)
        assert fired == ["a", "b", "c"]

    def test_same_due_time_keeps_scheduling_order(self):
        scheduler = ManualScheduler()
        fired = []
        for name in "xyz":
            scheduler.call_later(0.5, lambda n=name: fired.append(n))
        scheduler.advance(0.5)
        assert fired == ["x", "y", "z"]

    def test_cancelled_timer_never_runs(self):
        scheduler = ManualScheduler()
        fired = []
        handle = scheduler.call_later(0.1, lambda: fired.append(1))
        handle.cancel()
        assert scheduler.pending == 0
        assert scheduler.next_due() is None
        scheduler.advance(1.0)
        assert fired == []

    def test_callbacks_can_schedule_more_work_in_window(self):
        scheduler = ManualScheduler()
        fired = []

        def tick():
            fired.append(scheduler.now)
            if len(fired) < 3:
                scheduler.call_later(0.1, tick)

        scheduler.call_later(0.1, tick)
        assert scheduler.advance(1.0) == 3
        assert fired == pytest.approx([0.1, 0.2, 0.3])

    def test_callback_sees_its_due_time(self):
        scheduler = ManualScheduler()
        seen = []
        scheduler.call_later(0.4, lambda: seen.append(scheduler.now))
        scheduler.advance(10.0)
        assert seen == [pytest.approx(0.4)]
        assert scheduler.now == pytest.approx(10.0)

    def test_run_until_idle(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(5.0, lambda: fired.append("late"))
        scheduler.call_later(0.1, lambda: fired.append("early"))
        assert scheduler.run_until_idle() == 2
        assert fired == ["early", "late"]
        assert scheduler.now == pytest.approx(5.0)
        assert scheduler.pending == 0

    def test_run_until_idle_respects_limit(self):
        scheduler = ManualScheduler()

        def forever():
            scheduler.call_later(1.0, forever)

        scheduler.call_later(1.0, forever)
        assert scheduler.run_until_idle(limit=10.0) == 10
        assert scheduler.pending == 1

    def test_fired_handle_reports_inactive(self):
        scheduler = ManualScheduler()
        handle = scheduler.call_later(0.1, lambda: None)
        scheduler.advance(0.2)
        assert not handle.active
        assert not handle.cancelled


class TestAsyncioScheduler:
    @pytest.mark.asyncio
    async def test_runs_and_cancels_on_event_loop(self):
        scheduler = AsyncioScheduler()
        fired = []
        kept = scheduler.call_later(0.01, lambda: fired.append("kept"))
        dropped = scheduler.call_later(0.01, lambda: fired.append("dropped"))
        dropped.cancel()
        await asyncio.sleep(0.05)
        assert fired == ["kept"]
        assert not kept.active
        assert dropped.cancelled

    @pytest.mark.asyncio
    async def test_explicit_loop(self):
        loop = asyncio.get_running_loop()
        scheduler = AsyncioScheduler(loop)
        assert scheduler.loop is loop
        done = asyncio.Event()
        scheduler.call_later(0.0, done.set)
        await asyncio.wait_for(done.wait(), timeout=1.0)
