"""PIN unlock flow.

UI-independent state machine behind the unlock screen. It owns the collected
code, the submitting gate and the obscure toggle; the number of attempts
remaining belongs to the host and is only read here.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from .errors import (
    InvalidLengthError,
    SubmissionBlockedError,
    UnlockRejectedError,
)
from .types import VALID_TRANSITIONS, Result, UnlockState

logger = logging.getLogger("delt.unlock")

PIN_LENGTH = 6

UnlockHandler = Callable[[str], Awaitable[Result[None]]]
UnlockFailedNotifier = Callable[[], None]


class InvalidTransitionError(Exception):
    pass


def filter_pin_input(text: str, max_length: int = PIN_LENGTH) -> str:
    """Keep digits only and truncate to ``max_length`` characters."""
    return "".join(c for c in text if c in "0123456789")[:max_length]


@dataclass
class TransitionRecord:
    state: UnlockState
    entered_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class UnlockAttemptState:
    code: str = ""
    is_submitting: bool = False
    attempts_remaining: int = 3

    @property
    def is_locked(self) -> bool:
        return self.attempts_remaining <= 0


class UnlockFlow:
    """Collects a fixed-length PIN and hands it to an unlock handler.

    The handler decides whether the PIN is correct. The flow only checks the
    shape of the code, guarantees at most one submission in flight and
    clears the code after every failed attempt.
    """

    def __init__(
        self,
        on_unlock: UnlockHandler,
        on_unlock_failed: UnlockFailedNotifier | None = None,
        attempts_remaining: int = 3,
        pin_length: int = PIN_LENGTH,
    ) -> None:
        self._on_unlock = on_unlock
        self._on_unlock_failed = on_unlock_failed
        self._pin_length = pin_length
        self._attempt = UnlockAttemptState(attempts_remaining=attempts_remaining)
        self._state = UnlockState.IDLE
        self._history: list[TransitionRecord] = [TransitionRecord(UnlockState.IDLE)]
        self._obscured = True
        self._notice: str | None = None

    @property
    def state(self) -> UnlockState:
        return self._state

    @property
    def code(self) -> str:
        return self._attempt.code

    @property
    def pin_length(self) -> int:
        return self._pin_length

    @property
    def attempts_remaining(self) -> int:
        return self._attempt.attempts_remaining

    @property
    def is_locked(self) -> bool:
        return self._attempt.is_locked

    @property
    def is_submitting(self) -> bool:
        return self._attempt.is_submitting

    @property
    def is_unlocked(self) -> bool:
        return self._state == UnlockState.UNLOCKED

    @property
    def input_enabled(self) -> bool:
        return self._state == UnlockState.IDLE and not self.is_locked

    @property
    def can_submit(self) -> bool:
        return self.input_enabled

    @property
    def obscured(self) -> bool:
        return self._obscured

    @property
    def notice(self) -> str | None:
        """Last error message to show the user, if any."""
        return self._notice

    @property
    def history(self) -> list[UnlockState]:
        return [record.state for record in self._history]

    def set_attempts_remaining(self, attempts_remaining: int) -> None:
        """Apply the host's current attempts count (a re-render)."""
        self._attempt.attempts_remaining = attempts_remaining

    def toggle_obscure(self) -> bool:
        self._obscured = not self._obscured
        return self._obscured

    def clear_notice(self) -> None:
        self._notice = None

    def input(self, text: str) -> str:
        """Replace the collected code with the filtered ``text``."""
        if self.input_enabled:
            self._attempt.code = filter_pin_input(text, self._pin_length)
        return self._attempt.code

    def append(self, char: str) -> str:
        return self.input(self._attempt.code + char)

    def backspace(self) -> str:
        return self.input(self._attempt.code[:-1])

    def clear(self) -> None:
        self._attempt.code = ""

    def can_transition(self, to_state: UnlockState) -> bool:
        return to_state in VALID_TRANSITIONS.get(self._state, [])

    def _transition(self, to_state: UnlockState) -> None:
        if not self.can_transition(to_state):
            raise InvalidTransitionError(
                f"Invalid transition from {self._state.value} to {to_state.value}"
            )
        self._state = to_state
        self._attempt.is_submitting = to_state == UnlockState.SUBMITTING
        self._history.append(TransitionRecord(to_state))

    def _blocked_reason(self) -> SubmissionBlockedError | None:
        if self._state == UnlockState.UNLOCKED:
            return SubmissionBlockedError("Already unlocked", reason="unlocked")
        if self._state == UnlockState.SUBMITTING:
            return SubmissionBlockedError("Unlock already in progress", reason="submitting")
        if self.is_locked:
            return SubmissionBlockedError("Too many attempts. Please wait.", reason="locked")
        return None

    async def submit(self) -> Result[None]:
        """Validate the code and run the unlock handler once.

        Returns ``Result.ok(None)`` when unlocked. Failures are returned, not
        raised, and always leave the flow in ``IDLE`` with an empty code.
        """
        blocked = self._blocked_reason()
        if blocked is not None:
            logger.debug("Submission blocked: %s", blocked.reason)
            self.clear()
            return Result.err(blocked)

        code = self._attempt.code
        if len(code) != self._pin_length:
            self.clear()
            error = InvalidLengthError(self._pin_length, len(code))
            self._notice = error.message
            return Result.err(error)

        self._notice = None
        self._transition(UnlockState.SUBMITTING)
        try:
            result = await self._on_unlock(code)
        except Exception as e:
            result = Result.err(e)

        self.clear()

        if result.is_ok():
            self._transition(UnlockState.UNLOCKED)
            logger.info("Unlocked")
            return Result.ok(None)

        error = result.unwrap_err()
        if not isinstance(error, UnlockRejectedError):
            error = UnlockRejectedError(str(error) or type(error).__name__, cause=error)
        self._notice = error.message
        self._transition(UnlockState.IDLE)
        logger.warning("Unlock attempt rejected: %s", error.message)

        if self._on_unlock_failed is not None:
            self._on_unlock_failed()

        return Result.err(error)
