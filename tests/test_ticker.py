import time
from datetime import timedelta

import pytest

from diffusionsim.controller.ticker import TickGovernor


def test_short_tick_is_padded(fake_clock):
    governor = TickGovernor(0.01, clock=fake_clock, sleep=fake_clock.sleep)
    governor.start()
    fake_clock.advance(0.004)
    governor.end()
    assert fake_clock.sleeps == [pytest.approx(0.006)]


def test_long_tick_is_not_padded(fake_clock):
    governor = TickGovernor(0.01, clock=fake_clock, sleep=fake_clock.sleep)
    governor.start()
    fake_clock.advance(0.05)
    governor.end()
    assert fake_clock.sleeps == []


def test_rate_is_published_after_a_full_window(fake_clock):
    # 1/16 s ticks: exactly 16 ticks fill one second
    governor = TickGovernor(0.0625, clock=fake_clock, sleep=fake_clock.sleep)
    for _ in range(15):
        governor.start()
        governor.end()
    assert governor.get_rate() == 0

    governor.start()
    governor.end()
    assert governor.get_rate() == 16
    assert governor.rolling_tick_count == 0


def test_rate_is_stale_between_windows(fake_clock):
    governor = TickGovernor(0.0625, clock=fake_clock, sleep=fake_clock.sleep)
    for _ in range(16):
        governor.start()
        governor.end()
    governor.set_min_tick_time(0.125)
    for _ in range(7):
        governor.start()
        governor.end()
    assert governor.get_rate() == 16
    governor.start()
    governor.end()
    assert governor.get_rate() == 8


def test_new_minimum_applies_to_following_ticks(fake_clock):
    governor = TickGovernor(0.01, clock=fake_clock, sleep=fake_clock.sleep)
    governor.start()
    governor.set_min_tick_time(timedelta(milliseconds=20))
    governor.end()
    governor.start()
    governor.end()
    assert fake_clock.sleeps == [pytest.approx(0.01), pytest.approx(0.02)]
    assert governor.min_tick_duration == pytest.approx(0.02)


def test_negative_minimum_is_rejected():
    with pytest.raises(ValueError):
        TickGovernor(-1.0)


def test_real_ticks_last_at_least_the_minimum():
    governor = TickGovernor(0.01)
    for _ in range(5):
        before = time.monotonic()
        governor.start()
        governor.end()
        assert time.monotonic() - before >= 0.01 * 0.99


def test_real_rate_matches_achievable_rate():
    governor = TickGovernor(0.02)
    deadline = time.monotonic() + 1.2
    while time.monotonic() < deadline:
        governor.start()
        governor.end()
    # 20 ms ticks: at most 50 per second, sleep overhead only lowers it
    assert 35 <= governor.get_rate() <= 51
