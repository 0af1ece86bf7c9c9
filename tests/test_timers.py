"""60Hz gate and tone signalling."""

from chip8vm.constants import TIMER_INTERVAL
from chip8vm.timers import Timers


class TestGate:

    def test_no_step_below_one_interval(self):
        timers = Timers()
        timers.delay = 10
        for _ in range(100):
            assert not timers.tick(TIMER_INTERVAL / 200)
        assert timers.delay == 10

    def test_accumulated_time_fires_once(self):
        timers = Timers()
        timers.delay = 10
        fired = [timers.tick(TIMER_INTERVAL / 2) for _ in range(2)]
        assert fired == [False, True]
        assert timers.delay == 9

    def test_excess_time_is_dropped(self):
        timers = Timers()
        timers.delay = 10
        assert timers.tick(1.0)
        assert timers.delay == 9
        # Accumulator restarted from zero, not from 1.0 - 1/60
        assert not timers.tick(0.0)
        assert timers.delay == 9

    def test_counters_stop_at_zero(self):
        timers = Timers()
        timers.delay = 1
        timers.tick(TIMER_INTERVAL)
        timers.tick(TIMER_INTERVAL)
        assert timers.delay == 0
        assert timers.ticks == 2


class TestTone:

    def test_tone_on_every_step_while_sounding(self):
        tones = []
        timers = Timers(on_tone=lambda: tones.append(timers.sound))
        timers.sound = 3
        for _ in range(5):
            timers.tick(TIMER_INTERVAL)
        assert tones == [3, 2, 1]
        assert timers.sound == 0
        assert not timers.sounding

    def test_silent_without_callback(self):
        timers = Timers()
        timers.sound = 2
        timers.tick(TIMER_INTERVAL)
        assert timers.sound == 1
