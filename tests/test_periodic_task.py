"""
Test suite for PeriodicTask.
"""

import asyncio

import pytest

from core.scheduling import PeriodicTask


class TestPeriodicTask:
    def test_runs_until_stopped(self):
        calls = []

        async def tick():
            calls.append(1)

        async def scenario():
            task = PeriodicTask("counter", tick, 0.02)
            task.start()
            await asyncio.sleep(0.15)
            task.stop()
            frozen = len(calls)
            await asyncio.sleep(0.1)
            return frozen

        frozen = asyncio.run(scenario())

        assert frozen >= 2
        assert len(calls) == frozen

    def test_first_tick_waits_for_interval_unless_immediate(self):
        calls = {"delayed": 0, "immediate": 0}

        def counter(name):
            async def tick():
                calls[name] += 1

            return tick

        async def scenario():
            delayed = PeriodicTask("delayed", counter("delayed"), 10)
            immediate = PeriodicTask(
                "immediate", counter("immediate"), 10, run_immediately=True
            )
            delayed.start()
            immediate.start()
            await asyncio.sleep(0.05)
            delayed.stop()
            immediate.stop()

        asyncio.run(scenario())

        assert calls == {"delayed": 0, "immediate": 1}

    def test_start_and_stop_are_idempotent(self):
        async def tick():
            pass

        async def scenario():
            task = PeriodicTask("idempotent", tick, 10)
            return [
                task.start(),
                task.start(),
                task.is_running,
                task.stop(),
                task.stop(),
                task.is_running,
            ]

        assert asyncio.run(scenario()) == [True, False, True, True, False, False]

    def test_overlapping_tick_is_skipped(self):
        running = {"now": 0, "max": 0, "calls": 0}

        async def slow_tick():
            running["calls"] += 1
            running["now"] += 1
            running["max"] = max(running["max"], running["now"])
            await asyncio.sleep(0.15)
            running["now"] -= 1

        async def scenario():
            task = PeriodicTask("slow", slow_tick, 0.03, run_immediately=True)
            task.start()
            await asyncio.sleep(0.25)
            task.stop()
            return task

        task = asyncio.run(scenario())

        assert running["max"] == 1
        assert running["calls"] == 2
        assert task.ticks_skipped >= 3

    def test_errors_do_not_stop_the_schedule(self):
        calls = []

        async def failing_tick():
            calls.append(1)
            raise RuntimeError("boom")

        async def scenario():
            task = PeriodicTask("failing", failing_tick, 0.02, run_immediately=True)
            task.start()
            await asyncio.sleep(0.1)
            task.stop()

        asyncio.run(scenario())

        assert len(calls) >= 2

    def test_callback_can_stop_its_own_task(self):
        calls = []

        async def scenario():
            async def tick():
                calls.append(1)
                task.stop()
                await asyncio.sleep(0)
                calls.append(2)

            task = PeriodicTask("self-stopping", tick, 0.02, run_immediately=True)
            task.start()
            await asyncio.sleep(0.1)
            return task.is_running

        assert asyncio.run(scenario()) is False
        assert calls == [1, 2]

    def test_stop_cancels_tick_in_progress(self):
        finished = []

        async def tick():
            await asyncio.sleep(0.2)
            finished.append(1)

        async def scenario():
            task = PeriodicTask("cancelled", tick, 10, run_immediately=True)
            task.start()
            await asyncio.sleep(0.05)
            assert task.is_busy
            task.stop()
            await asyncio.sleep(0.25)

        asyncio.run(scenario())

        assert finished == []

    def test_interval_must_be_positive(self):
        async def tick():
            pass

        with pytest.raises(ValueError):
            PeriodicTask("invalid", tick, 0)
