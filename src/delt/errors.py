"""Structured error types with recovery hints for the delt app.

This module provides a hierarchy of error types that include:
- Error categorization for different failure modes
- Recovery hints that guide users to fix issues
- Error logging capabilities
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, auto
from pathlib import Path


class ErrorCategory(Enum):
    """Categories of errors for routing recovery strategies."""

    USER_INPUT = auto()  # Malformed PIN, wrong length
    AUTHENTICATION = auto()  # Rejected PIN
    STATE = auto()  # Action not allowed in the current state
    STORAGE = auto()  # Credential store, group files
    CONFIG = auto()  # Bad configuration values
    INTERNAL = auto()  # Unexpected errors, bugs


@dataclass
class RecoveryHint:
    """A suggested recovery action for an error."""

    action: str
    command: str | None = None

    def __str__(self) -> str:
        result = self.action
        if self.command:
            result += f"\n  Command: {self.command}"
        return result


@dataclass
class DeltError(Exception):
    """Base error type with recovery hints."""

    message: str
    category: ErrorCategory
    recovery_hints: list[RecoveryHint] = field(default_factory=list)
    cause: Exception | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def format_full(self) -> str:
        """Format error with all recovery hints."""
        lines = [f"Error: {self.message}"]

        if self.cause:
            lines.append(f"Caused by: {self.cause}")

        if self.recovery_hints:
            lines.append("\nRecovery options:")
            for i, hint in enumerate(self.recovery_hints, 1):
                lines.append(f"  {i}. {hint}")

        return "\n".join(lines)


class InvalidLengthError(DeltError):
    """PIN does not have the required number of digits."""

    def __init__(self, expected: int = 6, actual: int | None = None) -> None:
        super().__init__(
            message=f"PIN must be {expected} digits",
            category=ErrorCategory.USER_INPUT,
            recovery_hints=[RecoveryHint(f"Enter exactly {expected} digits")],
        )
        self.expected = expected
        self.actual = actual


class PinFormatError(DeltError):
    """PIN contains characters other than digits."""

    def __init__(self, message: str = "PIN must contain only digits") -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.USER_INPUT,
        )


class UnlockRejectedError(DeltError):
    """The unlock handler refused the PIN.

    The message is shown to the user as-is.
    """

    def __init__(self, message: str = "Incorrect PIN", cause: Exception | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.AUTHENTICATION,
            cause=cause,
        )


class SubmissionBlockedError(DeltError):
    """Submission refused locally: locked out, already submitting or unlocked."""

    def __init__(self, message: str, reason: str = "") -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.STATE,
        )
        self.reason = reason


class StateError(DeltError):
    """Error related to invalid application state."""

    def __init__(
        self,
        message: str,
        current_state: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        hints = []
        if current_state:
            hints.append(RecoveryHint(f"Current state: {current_state}"))
        hints.append(RecoveryHint("Check setup status", command="delt status"))

        super().__init__(
            message=message,
            category=ErrorCategory.STATE,
            recovery_hints=hints,
            cause=cause,
        )
        self.current_state = current_state


class StorageError(DeltError):
    """Error reading or writing the credential store or group files."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        cause: Exception | None = None,
    ) -> None:
        hints = []
        if path:
            hints.append(RecoveryHint(f"Check {path} is readable and writable"))
        hints.append(RecoveryHint("Verify the data directory permissions"))

        super().__init__(
            message=message,
            category=ErrorCategory.STORAGE,
            recovery_hints=hints,
            cause=cause,
        )
        self.path = path


# Error logging


class ErrorLogger:
    """Logger for structured error tracking."""

    def __init__(self, log_path: Path | None = None) -> None:
        self._log_path = log_path or Path.home() / ".config" / "delt" / "errors.log"
        self._logger = logging.getLogger("delt.errors")
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Configure file logging."""
        self._log_path.parent.mkdir(parents=True, exist_ok=True)

        for existing in list(self._logger.handlers):
            if isinstance(existing, logging.FileHandler) and Path(
                existing.baseFilename
            ) == self._log_path.absolute():
                return

        handler = logging.FileHandler(self._log_path)
        handler.setLevel(logging.WARNING)
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
        handler.setFormatter(formatter)

        self._logger.addHandler(handler)
        self._logger.setLevel(logging.WARNING)

    @property
    def log_path(self) -> Path:
        return self._log_path

    def log_error(self, error: DeltError) -> None:
        """Log an error with full context."""
        context = {
            "category": error.category.name,
            "error_message": error.message,
            "error_timestamp": error.timestamp.isoformat(),
        }
        if error.cause:
            context["cause"] = str(error.cause)

        self._logger.error(
            f"[{error.category.name}] {error.message}",
            extra=context,
        )

    def log_warning(self, message: str, category: ErrorCategory) -> None:
        """Log a warning."""
        self._logger.warning(f"[{category.name}] {message}")

    def get_recent_errors(self, count: int = 10) -> list[str]:
        """Get recent error log entries."""
        if not self._log_path.exists():
            return []

        for handler in self._logger.handlers:
            handler.flush()

        with open(self._log_path) as f:
            lines = f.readlines()

        return lines[-count:]


def wrap_exception(
    exception: Exception,
    category: ErrorCategory = ErrorCategory.INTERNAL,
) -> DeltError:
    """Wrap a generic exception in a DeltError."""
    if isinstance(exception, DeltError):
        return exception

    return DeltError(
        message=str(exception) or type(exception).__name__,
        category=category,
        cause=exception,
    )
