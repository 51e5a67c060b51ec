import time
from typing import Dict, Optional, Tuple


class FixedWindowRateLimiter:
    """
    Tiny per-client request counter: { key: (window_reset_ts, hits) }.
    max_requests <= 0 disables limiting.
    """

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: Dict[str, Tuple[float, int]] = {}

    @property
    def enabled(self) -> bool:
        return self.max_requests > 0

    def hit(self, key: str, now: Optional[float] = None) -> bool:
        """Record one request for `key`; False when it is over the limit."""
        if not self.enabled:
            return True
        now = time.time() if now is None else now

        reset_ts, hits = self._windows.get(key, (0.0, 0))
        if now >= reset_ts:
            self._prune(now)
            reset_ts, hits = now + self.window_seconds, 0
        hits += 1
        self._windows[key] = (reset_ts, hits)
        return hits <= self.max_requests

    def retry_after(self, key: str, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        reset_ts, _hits = self._windows.get(key, (now, 0))
        return max(int(reset_ts - now), 0)

    def _prune(self, now: float) -> None:
        expired = [k for k, (reset_ts, _) in self._windows.items() if now >= reset_ts]
        for k in expired:
            self._windows.pop(k, None)
