"""Status indicator widget for the unlock attempts line.

Displays a status with appropriate icon and color based on state.
"""

from __future__ import annotations

from enum import Enum

from textual.widgets import Static

from ...config import MAX_LOGIN_ATTEMPTS
from ...formatting import attempts_text


class Status(Enum):
    """Status states with associated styling."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"
    BLOCKED = "blocked"
    UNKNOWN = "unknown"


# Status configuration: (icon, CSS class suffix)
STATUS_CONFIG: dict[Status, tuple[str, str]] = {
    Status.OK: ("*", "ok"),
    Status.WARNING: ("!", "warning"),
    Status.ERROR: ("!", "error"),
    Status.BLOCKED: ("X", "blocked"),
    Status.UNKNOWN: ("?", "unknown"),
}


class StatusIndicator(Static):
    """Widget to display status with icon and color.

    Attributes:
        status: The current Status enum value.
        text: The text to display alongside the icon.
    """

    DEFAULT_CSS = """
    StatusIndicator {
        width: auto;
        height: 1;
        text-style: bold;
    }

    StatusIndicator.status-ok {
        color: $success;
    }

    StatusIndicator.status-warning {
        color: $warning;
    }

    StatusIndicator.status-error {
        color: $error;
    }

    StatusIndicator.status-blocked {
        color: $error;
    }

    StatusIndicator.status-unknown {
        color: $text-muted;
    }
    """

    def __init__(
        self,
        status: Status = Status.UNKNOWN,
        text: str = "",
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._status = status
        self._text = text
        self._update_display()

    @property
    def status(self) -> Status:
        return self._status

    @status.setter
    def status(self, value: Status) -> None:
        self._status = value
        self._update_display()

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value
        self._update_display()

    def set_status(self, status: Status, text: str | None = None) -> None:
        """Update status and optionally text.

        Args:
            status: New status value.
            text: Optional new text (keeps current if None).
        """
        self._status = status
        if text is not None:
            self._text = text
        self._update_display()

    def _update_display(self) -> None:
        """Update the widget display based on current state."""
        icon, css_suffix = STATUS_CONFIG.get(self._status, STATUS_CONFIG[Status.UNKNOWN])

        for s in Status:
            _, suffix = STATUS_CONFIG.get(s, ("", "unknown"))
            self.remove_class(f"status-{suffix}")

        self.add_class(f"status-{css_suffix}")

        if self._text:
            self.update(f"{icon} {self._text}")
        else:
            self.update(icon)


def status_from_attempts(attempts: int, max_attempts: int = MAX_LOGIN_ATTEMPTS) -> Status:
    """Determine status based on unlock attempts remaining.

    Args:
        attempts: Attempts remaining before lockout.
        max_attempts: Attempts allowed in total.

    Returns:
        BLOCKED at zero, ERROR on the last attempt, WARNING after any
        failure, OK otherwise.
    """
    if attempts <= 0:
        return Status.BLOCKED
    elif attempts <= 1:
        return Status.ERROR
    elif attempts < max_attempts:
        return Status.WARNING
    else:
        return Status.OK


def format_attempts_status(
    attempts: int, max_attempts: int = MAX_LOGIN_ATTEMPTS
) -> tuple[Status, str]:
    """Format attempts remaining as status and text tuple."""
    status = status_from_attempts(attempts, max_attempts)
    if status == Status.BLOCKED:
        return status, "Too many attempts. Please wait."
    return status, attempts_text(attempts)
