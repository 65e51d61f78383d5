import asyncio
import math
from datetime import datetime, timezone

from loguru import logger

from price_poller.errors import SchedulerError


def alignment_wait(interval: int, seconds: int) -> int:
    """
    Whole seconds from `seconds` (within the minute) to the next multiple of `interval`,
    e.g. interval=30: 10 -> 20, 45 -> 15, 30 -> 30
    """
    if interval < 1:
        raise SchedulerError(f"interval must be at least 1 second, got {interval}")

    return (interval - (seconds + interval) % interval) % 60


def first_fire_delay(interval: int, now: datetime | None = None) -> float:
    """
    Delay in seconds until the first tick, so that ticks land on multiples of
    `interval` within each minute (interval=30 fires at :00 and :30).

    Alignment only works within a minute, longer intervals are accepted but
    fire at an arbitrary phase.
    """
    now = now or datetime.now(timezone.utc)
    fraction = now.microsecond / 1_000_000

    wait = alignment_wait(interval, now.second)

    # wait - 1 whole seconds plus what is left of the current one
    delay = (wait - 1) + (1 - fraction)

    # already on an aligned second, fire right away
    return max(delay, 0.0)


class Ticker:
    """
    Fires once after `first_delay` seconds and then every `period` seconds.

    The schedule is kept on the event loop clock and does not drift. A tick
    awaited after its deadline (the previous one ran long) fires at once and
    the schedule restarts from there, missed ticks are not replayed.
    """

    def __init__(self, first_delay: float, period: float):
        # deadlines are loop times, the period has to fit in a float
        try:
            period = float(period)
        except OverflowError as exc:
            raise SchedulerError("tick period is too large to schedule") from exc

        if not math.isfinite(period) or period <= 0:
            raise SchedulerError(f"tick period must be positive and finite, got {period}")

        self.first_delay = first_delay
        self.period = period
        self.deadline: float | None = None

    def _now(self) -> float:
        return asyncio.get_running_loop().time()

    async def _sleep(self, seconds: float):
        await asyncio.sleep(seconds)

    async def tick(self) -> float:
        """
        Suspend until the next tick, return the loop time it fired at
        """
        now = self._now()
        if self.deadline is None:
            self.deadline = now + self.first_delay

        if self.deadline > now:
            await self._sleep(self.deadline - now)
            fired = self.deadline
        else:
            fired = now
            if now > self.deadline:
                logger.warning(f"tick is {now - self.deadline:.1f}s late")

        self.deadline = fired + self.period
        return fired


def make_ticker(interval: int) -> Ticker:
    delay = first_fire_delay(interval)
    ticker = Ticker(delay, interval)
    logger.info(f"first tick in {delay:.3f}s, then every {interval}s")
    return ticker
