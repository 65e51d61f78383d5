from datetime import datetime, timezone

import pytest

from price_poller.errors import SchedulerError
from price_poller.scheduler import Ticker, alignment_wait, first_fire_delay, make_ticker


def at(second: int, microsecond: int = 0) -> datetime:
    return datetime(2024, 1, 1, 12, 0, second, microsecond, tzinfo=timezone.utc)


class FakeTicker(Ticker):
    """Ticker on a manual clock, sleeping advances the clock."""

    def __init__(self, first_delay, period):
        super().__init__(first_delay, period)
        self.clock = 100.0
        self.sleeps: list[float] = []

    def _now(self):
        return self.clock

    async def _sleep(self, seconds):
        self.sleeps.append(seconds)
        self.clock += seconds


class TestAlignment:
    @pytest.mark.parametrize("interval", range(1, 61))
    def test_wait_within_a_minute(self, interval):
        for second in range(60):
            assert 0 <= alignment_wait(interval, second) < 60

    @pytest.mark.parametrize("interval", [d for d in range(1, 61) if 60 % d == 0])
    def test_fires_on_multiples_of_interval(self, interval):
        for second in range(60):
            assert (second + alignment_wait(interval, second)) % interval == 0

    @pytest.mark.parametrize(
        "interval, second, expected",
        [(30, 10, 20), (30, 45, 15), (30, 30, 30), (15, 59, 1), (60, 0, 0), (60, 1, 59)],
    )
    def test_known_waits(self, interval, second, expected):
        assert alignment_wait(interval, second) == expected

    def test_long_intervals_are_accepted(self):
        assert 0 <= alignment_wait(90, 10) < 60

    @pytest.mark.parametrize("interval", [0, -5])
    def test_rejects_intervals_below_one_second(self, interval):
        with pytest.raises(SchedulerError):
            alignment_wait(interval, 10)


class TestFirstFireDelay:
    def test_lands_on_the_next_boundary(self):
        assert first_fire_delay(30, at(10, 250_000)) == pytest.approx(19.75)

    def test_whole_second(self):
        assert first_fire_delay(30, at(10)) == pytest.approx(20.0)

    def test_fires_immediately_when_already_aligned(self):
        assert first_fire_delay(60, at(0, 500_000)) == 0.0

    def test_defaults_to_current_time(self):
        assert 0 <= first_fire_delay(30) <= 30

    def test_invalid_interval(self):
        with pytest.raises(SchedulerError):
            first_fire_delay(0, at(10))


class TestMakeTicker:
    def test_period_is_the_interval(self):
        ticker = make_ticker(30)
        assert ticker.period == 30.0
        assert 0 <= ticker.first_delay <= 30

    def test_unrepresentable_interval_fails_at_startup(self):
        with pytest.raises(SchedulerError):
            make_ticker(10**400)

    def test_invalid_interval_fails_at_startup(self):
        with pytest.raises(SchedulerError):
            make_ticker(0)


class TestTicker:
    @pytest.mark.asyncio
    async def test_fixed_period(self):
        ticker = FakeTicker(first_delay=5.0, period=30)

        fired = [await ticker.tick() for _ in range(3)]

        assert fired == [105.0, 135.0, 165.0]
        assert ticker.sleeps == [5.0, 30.0, 30.0]

    @pytest.mark.asyncio
    async def test_work_between_ticks_does_not_drift(self):
        ticker = FakeTicker(first_delay=0.5, period=30)

        await ticker.tick()
        ticker.clock += 4.0
        fired = await ticker.tick()

        assert fired == 130.5
        assert ticker.sleeps == [0.5, 26.0]

    @pytest.mark.asyncio
    async def test_late_tick_fires_immediately_without_catch_up(self):
        ticker = FakeTicker(first_delay=0, period=30)

        assert await ticker.tick() == 100.0
        # previous tick overran by more than two periods
        ticker.clock += 75.0

        assert await ticker.tick() == 175.0
        assert await ticker.tick() == 205.0
        assert ticker.sleeps == [30.0]

    def test_rejects_non_positive_period(self):
        with pytest.raises(SchedulerError):
            Ticker(1.0, 0)

    @pytest.mark.parametrize("period", [10**400, float("inf"), float("nan")])
    def test_rejects_period_beyond_float_range(self, period):
        with pytest.raises(SchedulerError):
            Ticker(1.0, period)
