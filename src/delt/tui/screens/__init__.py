"""TUI Screen components.

This module contains all screen classes for the delt TUI.
"""

from __future__ import annotations

from .balances import BalancesScreen
from .pin_unlock import PinUnlockScreen

__all__ = [
    "BalancesScreen",
    "PinUnlockScreen",
]
