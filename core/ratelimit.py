import logging
import threading
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int


class FixedWindowRateLimiter:
    """Per-key fixed window counter kept in process memory.

    Counts reset on restart and are not shared between processes. Views get
    an instance through ``as_view(rate_limiter=...)``.
    """

    def __init__(self, limit: int, window_seconds: float, clock=time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries = {}  # key -> [count, reset_at]
        self._lock = threading.Lock()
        self._timer = None

    def check(self, key: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry[1] <= now:
                self._entries[key] = [1, now + self.window_seconds]
                return RateLimitResult(True, self.limit - 1)
            if entry[0] >= self.limit:
                return RateLimitResult(False, 0)
            entry[0] += 1
            return RateLimitResult(True, self.limit - entry[0])

    def cleanup(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, (_, reset_at) in self._entries.items() if reset_at <= now]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug('Rate limiter dropped %d expired entries', len(expired))
        return len(expired)

    def start_cleanup(self, interval: float):
        """Sweep expired entries every ``interval`` seconds on a daemon timer."""
        if interval <= 0:
            return

        def _tick():
            self.cleanup()
            self._schedule(interval, _tick)

        self._schedule(interval, _tick)

    def _schedule(self, interval, fn):
        timer = threading.Timer(interval, fn)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def stop_cleanup(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __len__(self):
        return len(self._entries)


def client_ip(request):
    forwarded = request.headers.get('x-forwarded-for')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return (
        request.headers.get('x-real-ip')
        or request.META.get('REMOTE_ADDR')
        or 'unknown'
    )


class RateLimitMixin:
    """For class based views; pass the limiter with ``as_view(rate_limiter=...)``."""

    rate_limiter = None

    def is_rate_limited(self, request):
        if self.rate_limiter is None:
            return False
        key = client_ip(request)
        if self.rate_limiter.check(key).allowed:
            return False
        logger.warning('Rate limit hit for %s on %s', key, request.path)
        return True
