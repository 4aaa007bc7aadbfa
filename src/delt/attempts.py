"""Failed-attempt counting and temporary lockout.

The unlock flow only reads ``attempts_remaining``; this tracker is the host
side that owns the counter and decides when a lockout ends.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

logger = logging.getLogger("delt.attempts")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_LOCKOUT_SECONDS = 30.0


class AttemptTracker:
    """Counts failed unlock attempts and enforces a lockout window."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        lockout_seconds: float = DEFAULT_LOCKOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._lockout_seconds = lockout_seconds
        self._clock = clock
        self._failed_attempts = 0
        self._locked_at: float | None = None

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def lockout_seconds(self) -> float:
        return self._lockout_seconds

    @property
    def failed_attempts(self) -> int:
        return self._failed_attempts

    @property
    def attempts_remaining(self) -> int:
        return max(self._max_attempts - self._failed_attempts, 0)

    @property
    def is_locked_out(self) -> bool:
        return self._locked_at is not None

    def record_failure(self) -> int:
        """Count one failed attempt and return the attempts remaining."""
        if self.is_locked_out:
            return 0

        self._failed_attempts += 1
        if self._failed_attempts >= self._max_attempts:
            self._locked_at = self._clock()
            logger.warning(
                "Locked out after %d failed attempts for %.0f seconds",
                self._failed_attempts,
                self._lockout_seconds,
            )
        return self.attempts_remaining

    def record_success(self) -> None:
        self._failed_attempts = 0
        self._locked_at = None

    def lockout_remaining(self) -> float:
        """Seconds until the lockout ends (0 when not locked out)."""
        if self._locked_at is None:
            return 0.0
        elapsed = self._clock() - self._locked_at
        return max(self._lockout_seconds - elapsed, 0.0)

    def refresh(self) -> bool:
        """Reset the counter if the lockout window has passed.

        Returns True when the lockout was lifted by this call.
        """
        if self._locked_at is not None and self.lockout_remaining() <= 0:
            logger.info("Lockout expired, attempts reset")
            self.record_success()
            return True
        return False

    def lockout_message(self) -> str:
        seconds = math.ceil(self.lockout_remaining()) or math.ceil(self._lockout_seconds)
        return f"Too many failed attempts. Please wait {seconds} seconds."
