"""Main Textual application for the delt TUI.

The app opens on the PIN unlock screen and, once unlocked, shows the
balances of the loaded group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from .screens import BalancesScreen, PinUnlockScreen

if TYPE_CHECKING:
    from .controller import UnlockController


class DeltApp(App[bool]):
    """Main TUI application.

    Exits with True when the user unlocked, False when they left the unlock
    screen.
    """

    TITLE = "Delt"
    SUB_TITLE = "Shared expenses"

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(self, controller: UnlockController) -> None:
        """Initialize the application.

        Args:
            controller: Host for unlock requests and group data.
        """
        super().__init__()
        self._controller = controller
        self._unlock_screen: PinUnlockScreen | None = None

    @property
    def controller(self) -> UnlockController:
        return self._controller

    @property
    def unlock_screen(self) -> PinUnlockScreen | None:
        return self._unlock_screen

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Footer()

    def on_mount(self) -> None:
        """Start on the unlock screen."""
        self.show_unlock()

    def show_unlock(self) -> None:
        flow = self._controller.create_flow(on_failed=self._after_unlock_failed)
        self._unlock_screen = PinUnlockScreen(flow, max_attempts=self._controller.max_attempts)
        self.push_screen(self._unlock_screen, callback=self._on_unlock_result)
        if self._controller.tracker.is_locked_out:
            self._schedule_lockout_expiry()

    def _after_unlock_failed(self) -> None:
        """Re-render the unlock screen with the host's new attempts count."""
        if self._unlock_screen is not None:
            self._unlock_screen.set_attempts_remaining(self._controller.attempts_remaining)
        if self._controller.tracker.is_locked_out:
            self.notify(
                self._controller.tracker.lockout_message(),
                severity="error",
                timeout=5,
            )
            self._schedule_lockout_expiry()

    def _schedule_lockout_expiry(self) -> None:
        delay = max(self._controller.tracker.lockout_remaining(), 0.1)
        self.set_timer(delay, self._on_lockout_timer)

    def _on_lockout_timer(self) -> None:
        if self._controller.refresh_lockout() and self._unlock_screen is not None:
            self._unlock_screen.set_attempts_remaining(self._controller.attempts_remaining)
        elif self._controller.tracker.is_locked_out:
            self._schedule_lockout_expiry()

    def _on_unlock_result(self, unlocked: bool | None) -> None:
        self._unlock_screen = None
        if unlocked:
            self.push_screen(BalancesScreen(self._controller))
        else:
            self.exit(False)

    def action_quit(self) -> None:  # type: ignore[override]
        """Handle quit action."""
        self.exit(self._controller.is_unlocked)


def run_tui(controller: UnlockController) -> bool:
    """Run the delt TUI application.

    Returns:
        True if the user unlocked during the session.
    """
    app = DeltApp(controller=controller)
    return bool(app.run())


def create_app(controller: UnlockController) -> DeltApp:
    """Create an application instance without running it.

    This is useful for testing or custom initialization.
    """
    return DeltApp(controller=controller)
