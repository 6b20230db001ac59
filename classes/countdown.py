import logging

logger = logging.getLogger(__name__)


def format_time(seconds):
    """Render seconds as m:ss."""
    seconds = max(0, int(seconds or 0))
    mins, secs = divmod(seconds, 60)
    return f"{mins}:{secs:02d}"


class CountdownTimer:
    """Single countdown that fires ``on_expire`` exactly once.

    The timer does not own a thread. Its owner calls ``tick()`` once per
    elapsed second; after expiry or ``cancel()`` further ticks are ignored.
    """

    def __init__(self, seconds, on_expire):
        self.remaining = max(0, int(seconds))
        self._on_expire = on_expire
        self._running = True

    @property
    def running(self):
        return self._running

    def tick(self):
        if not self._running:
            return False

        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self._running = False
            logger.info("Countdown expired")
            self._on_expire()
        return True

    def cancel(self):
        self._running = False
