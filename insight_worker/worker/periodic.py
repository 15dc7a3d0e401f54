import time
from collections.abc import Callable

from insight_worker.logging.logger import Log


class PeriodicTask:
    """Calls ``callback`` on a fixed interval until interrupted.

    The interval is measured from the end of one call to the start of the
    next, so calls never overlap. Tests call the callback directly instead of
    running the loop.
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], object],
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._interval_seconds = interval_seconds
        self._callback = callback
        self._sleep = sleep

    def run(self, max_ticks: int | None = None) -> int:
        """Tick until KeyboardInterrupt, or ``max_ticks`` ticks if given.

        Returns:
            Number of completed ticks.
        """
        ticks = 0
        try:
            while max_ticks is None or ticks < max_ticks:
                self._callback()
                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break
                self._sleep(self._interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")
        return ticks
