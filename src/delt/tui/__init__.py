"""Delt terminal user interface.

This module provides the PIN unlock screen and the group balances view.
It uses Textual for the TUI framework.

Entry points:
    - run_tui(): Launch the TUI application with a controller
    - create_app(): Create app instance without running
    - DeltApp: The main Textual application class
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .app import DeltApp
    from .controller import UnlockController

__all__ = [
    "DeltApp",
    "create_app",
    "run_tui",
]


def run_tui(controller: UnlockController) -> bool:
    """Launch the delt TUI application.

    Args:
        controller: UnlockController instance for unlock and group data.

    Returns:
        True if the user unlocked during the session.
    """
    from .app import run_tui as _run_tui

    return _run_tui(controller)


def create_app(controller: UnlockController) -> DeltApp:
    """Create a delt application instance without running it.

    Args:
        controller: UnlockController instance.

    Returns:
        Configured DeltApp instance.
    """
    from .app import create_app as _create_app

    return _create_app(controller)
