"""Tests for the virtual-clock scheduler."""

import pytest

from deckbattle.sim.core.scheduler import ManualScheduler


class TestCallLater:
    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            ManualScheduler().call_later(-1, lambda: None)

    def test_nothing_fires_until_the_clock_moves(self):
        sched = ManualScheduler()
        fired: list[str] = []
        sched.call_later(0, lambda: fired.append("a"))
        assert fired == []
        assert sched.pending == 1

    def test_cancel(self):
        sched = ManualScheduler()
        fired: list[str] = []
        call = sched.call_later(10, lambda: fired.append("a"))
        call.cancel()
        assert sched.pending == 0
        assert sched.is_idle
        sched.run_until_idle()
        assert fired == []


class TestAdvance:
    def test_fires_in_due_order(self):
        sched = ManualScheduler()
        fired: list[str] = []
        sched.call_later(300, lambda: fired.append("late"))
        sched.call_later(100, lambda: fired.append("early"))
        assert sched.advance(300) == 2
        assert fired == ["early", "late"]

    def test_equal_due_times_fire_fifo(self):
        sched = ManualScheduler()
        fired: list[int] = []
        for i in range(5):
            sched.call_later(50, lambda i=i: fired.append(i))
        sched.advance(50)
        assert fired == [0, 1, 2, 3, 4]

    def test_partial_advance(self):
        sched = ManualScheduler()
        fired: list[str] = []
        sched.call_later(1000, lambda: fired.append("a"))
        sched.advance(999)
        assert fired == []
        assert sched.now_ms == 999
        sched.advance(1)
        assert fired == ["a"]

    def test_nested_scheduling_fires_in_same_advance(self):
        sched = ManualScheduler()
        fired: list[str] = []

        def first():
            fired.append("first")
            sched.call_later(10, lambda: fired.append("second"))

        sched.call_later(10, first)
        sched.advance(20)
        assert fired == ["first", "second"]

    def test_negative_advance_rejected(self):
        with pytest.raises(ValueError):
            ManualScheduler().advance(-5)


class TestRunUntilIdle:
    def test_drains_and_moves_clock(self):
        sched = ManualScheduler()
        sched.call_later(2500, lambda: None)
        sched.call_later(100, lambda: None)
        assert sched.run_until_idle() == 2
        assert sched.now_ms == 2500
        assert sched.is_idle

    def test_runaway_rescheduling_raises(self):
        sched = ManualScheduler()

        def again():
            sched.call_later(1, again)

        sched.call_later(0, again)
        with pytest.raises(RuntimeError):
            sched.run_until_idle(max_calls=50)
