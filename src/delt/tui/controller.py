"""TUI Controller for the unlock host and balance data.

This module provides the UnlockController class that bridges the TUI layer
with the credential store, the attempt tracker and the loaded group.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from ..attempts import AttemptTracker
from ..balance import (
    BalanceCalculator,
    Group,
    Member,
    MemberBalance,
    SettlementCalculator,
    SettlementTransaction,
)
from ..config import BALANCE_THRESHOLD, AppConfig
from ..errors import ErrorCategory, ErrorLogger, UnlockRejectedError, wrap_exception
from ..security import SecurityManager
from ..types import Result
from ..unlock import UnlockFlow

logger = logging.getLogger("delt.tui.controller")


@dataclass
class BalanceDisplayInfo:
    """A member and their balance, ready for rendering."""

    member: Member
    balance: MemberBalance

    @property
    def member_name(self) -> str:
        return self.balance.member_name

    @property
    def sort_key(self) -> tuple[Decimal, str]:
        return (-self.balance.balance, self.member.name.lower())


class UnlockController:
    """Owns the attempt counter and answers unlock requests.

    The unlock flow calls ``unlock`` to verify a code and ``unlock_failed``
    after each rejection; only the latter changes the attempts count.
    """

    def __init__(
        self,
        security: SecurityManager,
        tracker: AttemptTracker | None = None,
        group: Group | None = None,
        error_logger: ErrorLogger | None = None,
        pin_length: int = 6,
        balance_threshold: Decimal = BALANCE_THRESHOLD,
    ) -> None:
        self._security = security
        self._tracker = tracker or AttemptTracker()
        self._group = group
        self._error_logger = error_logger
        self._pin_length = pin_length
        self._balance_threshold = balance_threshold
        self._database_key: str | None = None

    @classmethod
    def from_config(cls, config: AppConfig, group: Group | None = None) -> UnlockController:
        return cls(
            security=SecurityManager(
                config.security_path,
                iterations=config.pbkdf2_iterations,
                pin_length=config.pin_length,
            ),
            tracker=AttemptTracker(
                max_attempts=config.max_login_attempts,
                lockout_seconds=config.lockout_seconds,
            ),
            group=group,
            error_logger=ErrorLogger(config.error_log_path),
            pin_length=config.pin_length,
            balance_threshold=config.balance_threshold,
        )

    @property
    def tracker(self) -> AttemptTracker:
        return self._tracker

    @property
    def group(self) -> Group | None:
        return self._group

    @property
    def attempts_remaining(self) -> int:
        return self._tracker.attempts_remaining

    @property
    def max_attempts(self) -> int:
        return self._tracker.max_attempts

    @property
    def is_unlocked(self) -> bool:
        return self._database_key is not None

    @property
    def database_key(self) -> str | None:
        return self._database_key

    def create_flow(self, on_failed: Callable[[], None] | None = None) -> UnlockFlow:
        """Create a flow wired to this host.

        Args:
            on_failed: Called after the failure has been counted, so the
                caller can re-render with the new attempts count.
        """

        def notify_failed() -> None:
            self.unlock_failed()
            if on_failed is not None:
                on_failed()

        return UnlockFlow(
            on_unlock=self.unlock,
            on_unlock_failed=notify_failed,
            attempts_remaining=self.attempts_remaining,
            pin_length=self._pin_length,
        )

    async def unlock(self, code: str) -> Result[None]:
        """Verify ``code`` against the credential store.

        Key derivation is slow on purpose, so it runs in a worker thread.
        """
        result = await asyncio.to_thread(self._security.unlock_with_pin, code)
        if result.is_err():
            error = result.unwrap_err()
            if not isinstance(error, UnlockRejectedError) and self._error_logger:
                self._error_logger.log_error(wrap_exception(error, ErrorCategory.STORAGE))
            return Result.err(error)

        self._database_key = result.unwrap()
        self._tracker.record_success()
        return Result.ok(None)

    def unlock_failed(self) -> None:
        remaining = self._tracker.record_failure()
        logger.info("Unlock failed, %d attempts remaining", remaining)
        if self._tracker.is_locked_out and self._error_logger:
            self._error_logger.log_warning(
                self._tracker.lockout_message(), ErrorCategory.AUTHENTICATION
            )

    def refresh_lockout(self) -> bool:
        return self._tracker.refresh()

    def get_balances(self) -> list[BalanceDisplayInfo]:
        """Balances for the loaded group, largest credit first."""
        if self._group is None:
            return []

        balances = BalanceCalculator.calculate_balances(self._group.members, self._group.expenses)
        infos = [BalanceDisplayInfo(member=m, balance=balances[m.id]) for m in self._group.members]
        return sorted(infos, key=lambda info: info.sort_key)

    def get_total_spending(self) -> Decimal:
        if self._group is None:
            return Decimal(0)
        return BalanceCalculator.get_total_spending(self._group.expenses)

    def is_group_settled(self) -> bool:
        if self._group is None:
            return True
        balances = BalanceCalculator.calculate_balances(self._group.members, self._group.expenses)
        return BalanceCalculator.is_group_settled(balances, self._balance_threshold)

    def get_settlements(self) -> list[SettlementTransaction]:
        """Suggested payments that would settle the loaded group."""
        if self._group is None:
            return []
        balances = BalanceCalculator.calculate_balances(self._group.members, self._group.expenses)
        return SettlementCalculator.calculate_optimal_settlements(
            balances, self._balance_threshold
        )
