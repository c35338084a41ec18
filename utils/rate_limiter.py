"""
In-process sliding window rate limiter.

RateLimiter is the Flask extension object; it keeps no counters itself.
init_app stores a RateLimitState in app.extensions['rate_limiter'] and
every call is routed to the state of the current app, so two apps (or two
tests) never share attempts or settings.
"""

import time
import logging
import threading
from collections import deque
from flask import current_app

logger = logging.getLogger(__name__)

# Above this many tracked keys, a hit also drops every expired key
SWEEP_THRESHOLD = 1024


class RateLimitState:
    """Settings and attempt counters of one app."""

    def __init__(self, enabled=True, max_attempts=5, window_seconds=60, clock=None):
        self.enabled = enabled
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.clock = clock or time.monotonic
        self._hits = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._hits)

    def _prune(self, key, now):
        # Caller holds the lock. Returns None once the key has no recent attempts.
        attempts = self._hits.get(key)
        if attempts is None:
            return None
        while attempts and now - attempts[0] >= self.window_seconds:
            attempts.popleft()
        if not attempts:
            del self._hits[key]
            return None
        return attempts

    def _sweep(self, now):
        for key in list(self._hits):
            self._prune(key, now)

    def hit(self, key: str) -> bool:
        """
        Register one attempt for key.

        Returns:
            False if the key already used all attempts in the window
        """
        if not self.enabled:
            return True

        now = self.clock()
        with self._lock:
            attempts = self._prune(key, now)
            if attempts is not None and len(attempts) >= self.max_attempts:
                logger.warning(f"Rate limit exceeded for {key}")
                return False

            if attempts is None:
                attempts = self._hits[key] = deque()
            attempts.append(now)

            if len(self._hits) > SWEEP_THRESHOLD:
                self._sweep(now)
            return True

    def remaining(self, key: str) -> int:
        with self._lock:
            attempts = self._prune(key, self.clock())
            return max(0, self.max_attempts - len(attempts or ()))

    def reset(self, key: str = None) -> None:
        """Forget attempts for key, or for every key when None."""
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


class RateLimiter:
    """
    Flask extension handing out per-app RateLimitState.

    Usage:
        rate_limiter = RateLimiter()
        rate_limiter.init_app(app)

        if not rate_limiter.hit('login:ip:127.0.0.1'):
            return api_error(..., status=429)
    """

    def __init__(self, app=None, clock=None):
        self.clock = clock
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions['rate_limiter'] = RateLimitState(
            enabled=app.config.get('RATELIMIT_ENABLED', True),
            max_attempts=int(app.config.get('RATELIMIT_MAX_ATTEMPTS', 5)),
            window_seconds=float(app.config.get('RATELIMIT_WINDOW_SECONDS', 60)),
            clock=self.clock,
        )

    def get_state(self, app=None) -> RateLimitState:
        app = app or current_app
        return app.extensions['rate_limiter']

    def hit(self, key: str, app=None) -> bool:
        return self.get_state(app).hit(key)

    def remaining(self, key: str, app=None) -> int:
        return self.get_state(app).remaining(key)

    def reset(self, key: str = None, app=None) -> None:
        self.get_state(app).reset(key)
