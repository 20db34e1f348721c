"""Tests for tempo bookkeeping and tick sampling."""

import pytest

from smf.clock import PlaybackClock


def test_defaults():
    clock = PlaybackClock()
    assert clock.tempo == 120
    assert clock.tempo_adjust == 0
    assert clock.ticks_per_quarter_note == 48
    assert clock.time_signature == (4, 4)
    # 500000 us per beat / 48 ticks
    assert clock.tick_time == 10416


class TestTickTime:
    def test_microseconds_per_quarter_note(self):
        clock = PlaybackClock()
        clock.set_microseconds_per_quarter_note(1000000)
        assert clock.tempo == 60
        assert clock.tick_time == 20833

    def test_time_signature_denominator_scales_the_beat(self):
        clock = PlaybackClock()
        clock.set_time_signature(6, 8)
        assert clock.tick_time == 5208

    def test_ticks_per_quarter_note(self):
        clock = PlaybackClock()
        clock.set_ticks_per_quarter_note(96)
        assert clock.tick_time == 5208

    def test_zero_divisor_keeps_previous_value(self):
        clock = PlaybackClock()
        clock.set_ticks_per_quarter_note(0)
        assert clock.tick_time == 10416
        clock.set_time_signature(4, 0)
        assert clock.tick_time == 10416

    def test_tempo_adjust(self):
        clock = PlaybackClock()
        clock.set_tempo_adjust(-119)
        assert clock.tempo_adjust == -119
        # 1 BPM
        assert clock.tick_time == 1250000

    def test_constructor_adjustment(self):
        clock = PlaybackClock(tempo_adjust=30)
        assert clock.tempo_adjust == 30
        assert clock.tick_time == (60000000 // 150 * 4) // (4 * 48)


class TestTempoPolicy:
    def test_adjustment_that_stops_the_clock_is_ignored(self):
        clock = PlaybackClock()
        clock.set_tempo_adjust(-120)
        assert clock.tempo_adjust == 0
        assert clock.tick_time == 10416

    def test_tempo_rejected_against_adjustment(self):
        clock = PlaybackClock()
        clock.set_tempo_adjust(-50)
        clock.set_tempo(50)
        assert clock.tempo == 120
        clock.set_tempo(51)
        assert clock.tempo == 51

    def test_non_positive_microseconds_ignored(self):
        clock = PlaybackClock()
        clock.set_microseconds_per_quarter_note(0)
        assert clock.tempo == 120

    def test_reset_keeps_adjustment(self):
        clock = PlaybackClock()
        clock.set_tempo_adjust(10)
        clock.set_ticks_per_quarter_note(480)
        clock.set_time_signature(3, 4)
        clock.sync(5000)
        clock.reset()
        assert clock.tempo == 120
        assert clock.tempo_adjust == 10
        assert clock.ticks_per_quarter_note == 48
        assert clock.time_signature == (4, 4)
        assert clock.last_check_time == 0


class TestSampling:
    def test_less_than_a_tick_does_not_mutate(self):
        clock = PlaybackClock()
        clock.sync(1000)
        assert clock.sample_elapsed_ticks(1000 + 10415) == 0
        assert clock.last_check_time == 1000
        assert clock.last_tick_error == 0

    def test_remainder_is_carried(self):
        clock = PlaybackClock()
        clock.sync(0)
        assert clock.sample_elapsed_ticks(25000) == 2
        assert clock.last_tick_error == 25000 - 2 * 10416
        assert clock.last_check_time == 25000

    @pytest.mark.parametrize(
        "chop",
        [
            [1],
            [10416],
            [7, 9999, 31000],
            [1234, 5678, 91011, 12],
            [10415, 2],
            [3000000],
        ],
        ids=["1us", "exact", "mixed", "irregular", "just-under", "large"],
    )
    def test_total_ticks_independent_of_sampling(self, chop):
        clock = PlaybackClock()
        ticks_wanted = 37
        total = ticks_wanted * clock.tick_time

        now = 0
        clock.sync(now)
        ticks = 0
        i = 0
        while now < total:
            step = min(chop[i % len(chop)], total - now)
            now += step
            ticks += clock.sample_elapsed_ticks(now)
            i += 1

        assert ticks == ticks_wanted
        assert clock.last_tick_error == 0


class TestDegenerateInputs:
    def test_huge_denominator_keeps_previous_tick_time(self):
        clock = PlaybackClock()
        clock.set_time_signature(4, 1 << 16)
        assert clock.time_signature == (4, 65536)
        assert clock.tick_time == 10416

    def test_clock_keeps_running_after_huge_denominator(self):
        clock = PlaybackClock()
        clock.set_time_signature(4, 1 << 16)
        clock.sync(0)
        assert clock.sample_elapsed_ticks(1000000) == 1000000 // 10416

    def test_rejected_setters_do_not_recompute(self):
        clock = PlaybackClock()
        clock.tick_time = 1
        clock.set_tempo(-500)
        clock.set_tempo_adjust(-500)
        assert clock.tick_time == 1
        assert (clock.tempo, clock.tempo_adjust) == (120, 0)
