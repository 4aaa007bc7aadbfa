"""TUI Widget components.

This module contains reusable widget classes for the delt TUI.
"""

from __future__ import annotations

from .balance_card import BalanceCard
from .member_chip import MemberAvatar, MemberChip
from .status_indicator import Status, StatusIndicator, format_attempts_status, status_from_attempts

__all__ = [
    "BalanceCard",
    "MemberAvatar",
    "MemberChip",
    "Status",
    "StatusIndicator",
    "format_attempts_status",
    "status_from_attempts",
]
