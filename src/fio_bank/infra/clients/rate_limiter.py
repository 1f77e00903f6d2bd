from __future__ import annotations

from collections.abc import Callable
import threading
import time

from fio_bank.core.config import DEFAULT_RATE_LIMIT_SECONDS
from fio_bank.infra.clients.logger import FioClientLogger


class RateLimiter:
    """Per-credential cooldown between outbound requests.

    Each credential gets its own lock, held across the wait and the timestamp
    update, so concurrent callers sharing a credential proceed one cooldown
    apart. Waiting blocks only the calling thread.
    """

    def __init__(
        self,
        cooldown_seconds: float = DEFAULT_RATE_LIMIT_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        logger: FioClientLogger | None = None,
    ) -> None:
        self._cooldown = cooldown_seconds
        self._clock = clock
        self._sleep = sleep
        self._logger = logger or FioClientLogger()
        self._last_request: dict[str, float] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown

    def _lock_for(self, credential: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(credential)
            if lock is None:
                lock = self._locks[credential] = threading.Lock()
            return lock

    def acquire(self, credential: str) -> float:
        """Wait out the cooldown for ``credential`` and record the issue time.

        Returns:
            Seconds spent waiting (0.0 when no wait was needed).
        """
        with self._lock_for(credential):
            waited = 0.0
            last = self._last_request.get(credential)
            if last is not None:
                elapsed = self._clock() - last
                if elapsed < self._cooldown:
                    waited = self._cooldown - elapsed
                    self._logger.cooldown_wait(credential, waited)
                    self._sleep(waited)
            self._last_request[credential] = self._clock()
            return waited
