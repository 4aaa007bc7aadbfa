"""PIN unlock screen.

Renders an UnlockFlow: digits-only input limited to the PIN length, an
obscure/reveal toggle, the Unlock button and the attempts indicator. The
screen dismisses with True once the flow reaches UNLOCKED, or False when
the user leaves.
"""

from __future__ import annotations

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Input, Static

from ...config import MAX_LOGIN_ATTEMPTS
from ...errors import SubmissionBlockedError
from ...formatting import show_attempts_warning
from ...unlock import UnlockFlow
from ..widgets.status_indicator import StatusIndicator, format_attempts_status

SUBTITLE_UNLOCK = "Enter your PIN to unlock"
SUBTITLE_LOCKED = "Too many attempts. Please wait."


class PinUnlockScreen(Screen[bool]):
    """Screen asking a returning user for their PIN.

    Keyboard shortcuts:
    - Enter: Submit the PIN
    - Ctrl+R: Show or hide the PIN
    - Escape: Leave without unlocking
    """

    BINDINGS = [
        Binding("ctrl+r", "toggle_obscure", "Show/Hide PIN", show=True),
        Binding("escape", "cancel", "Quit", show=True),
    ]

    DEFAULT_CSS = """
    PinUnlockScreen {
        align: center middle;
    }

    PinUnlockScreen #unlock-container {
        width: 44;
        height: auto;
        border: round $primary;
        padding: 1 2;
        background: $surface;
    }

    PinUnlockScreen #lock-icon {
        width: 100%;
        text-align: center;
        color: $primary;
        padding-bottom: 1;
    }

    PinUnlockScreen #title {
        width: 100%;
        text-align: center;
        text-style: bold;
    }

    PinUnlockScreen #subtitle {
        width: 100%;
        text-align: center;
        color: $text-muted;
        padding-bottom: 1;
    }

    PinUnlockScreen #subtitle.locked {
        color: $error;
    }

    PinUnlockScreen #pin-row {
        width: 100%;
        height: 3;
    }

    PinUnlockScreen #pin-input {
        width: 1fr;
    }

    PinUnlockScreen #toggle-obscure {
        min-width: 8;
        width: 8;
    }

    PinUnlockScreen #unlock {
        width: 100%;
        margin-top: 1;
    }

    PinUnlockScreen #attempts {
        width: 100%;
        text-align: center;
        margin-top: 1;
    }
    """

    def __init__(
        self,
        flow: UnlockFlow,
        max_attempts: int = MAX_LOGIN_ATTEMPTS,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        """Initialize the unlock screen.

        Args:
            flow: The unlock flow this screen renders.
            max_attempts: Attempts allowed before lockout, for the indicator.
            name: Screen name.
            id: Screen ID.
            classes: Additional CSS classes.
        """
        super().__init__(name=name, id=id, classes=classes)
        self._flow = flow
        self._max_attempts = max_attempts

    @property
    def flow(self) -> UnlockFlow:
        return self._flow

    def compose(self) -> ComposeResult:
        """Compose the screen layout."""
        with Vertical(id="unlock-container"):
            yield Static("[ LOCKED ]", id="lock-icon")
            yield Static("Welcome back", id="title")
            yield Static(SUBTITLE_UNLOCK, id="subtitle")
            with Horizontal(id="pin-row"):
                yield Input(
                    placeholder=f"Enter {self._flow.pin_length}-digit PIN",
                    password=self._flow.obscured,
                    restrict=r"[0-9]*",
                    max_length=self._flow.pin_length,
                    id="pin-input",
                )
                yield Button("Show", id="toggle-obscure")
            yield Button("Unlock", id="unlock", variant="primary")
            yield StatusIndicator(id="attempts")
        yield Footer()

    def on_mount(self) -> None:
        """Sync widgets with the flow and focus the PIN input."""
        self.refresh_view()
        pin_input = self.query_one("#pin-input", Input)
        if not pin_input.disabled:
            pin_input.focus()

    def set_attempts_remaining(self, attempts_remaining: int) -> None:
        """Re-render with the host's current attempts count."""
        self._flow.set_attempts_remaining(attempts_remaining)
        self.refresh_view()

    def refresh_view(self) -> None:
        """Update every widget from the flow's current state."""
        locked = self._flow.is_locked

        subtitle = self.query_one("#subtitle", Static)
        subtitle.update(SUBTITLE_LOCKED if locked else SUBTITLE_UNLOCK)
        subtitle.set_class(locked, "locked")

        pin_input = self.query_one("#pin-input", Input)
        pin_input.disabled = not self._flow.input_enabled
        pin_input.password = self._flow.obscured
        if pin_input.value != self._flow.code:
            pin_input.value = self._flow.code

        toggle = self.query_one("#toggle-obscure", Button)
        toggle.label = "Show" if self._flow.obscured else "Hide"

        unlock_button = self.query_one("#unlock", Button)
        unlock_button.disabled = not self._flow.can_submit
        unlock_button.label = "Unlocking..." if self._flow.is_submitting else "Unlock"

        attempts = self.query_one("#attempts", StatusIndicator)
        remaining = self._flow.attempts_remaining
        if show_attempts_warning(remaining, self._max_attempts):
            status, text = format_attempts_status(remaining, self._max_attempts)
            attempts.set_status(status, text)
            attempts.display = True
        else:
            attempts.display = False

    @on(Input.Changed, "#pin-input")
    def on_pin_changed(self, event: Input.Changed) -> None:
        """Keep the flow's code in step with the input."""
        filtered = self._flow.input(event.value)
        if filtered != event.value:
            event.input.value = filtered

    @on(Input.Submitted, "#pin-input")
    def on_pin_submitted(self) -> None:
        """Handle Enter key in the PIN input."""
        self.submit_pin()

    @on(Button.Pressed, "#unlock")
    def on_unlock_pressed(self) -> None:
        """Handle Unlock button press."""
        self.submit_pin()

    @on(Button.Pressed, "#toggle-obscure")
    def on_toggle_pressed(self) -> None:
        self.action_toggle_obscure()

    def action_toggle_obscure(self) -> None:
        """Show or hide the PIN."""
        self._flow.toggle_obscure()
        self.refresh_view()

    def action_cancel(self) -> None:
        """Leave the screen without unlocking."""
        self.dismiss(False)

    @work(group="unlock")
    async def submit_pin(self) -> None:
        """Submit the collected code through the flow."""
        if self._flow.can_submit:
            self.query_one("#pin-input", Input).disabled = True
            unlock_button = self.query_one("#unlock", Button)
            unlock_button.disabled = True
            unlock_button.label = "Unlocking..."

        result = await self._flow.submit()

        if result.is_ok():
            self.dismiss(True)
            return

        error = result.unwrap_err()
        blocked_in_flight = (
            isinstance(error, SubmissionBlockedError) and error.reason == "submitting"
        )
        if not blocked_in_flight:
            self.notify(str(error), severity="error")
            self.refresh_view()
            pin_input = self.query_one("#pin-input", Input)
            if not pin_input.disabled:
                pin_input.focus()
