"""Group members, expenses and balance calculation.

Balances use an equal split: every member listed in an expense's
``split_between`` owes the same share of it. A positive balance means the
member gets money back, a negative balance means they owe.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from .config import BALANCE_THRESHOLD, DEFAULT_CURRENCY
from .errors import StorageError
from .formatting import format_amount
from .types import JoinMethod, MemberRole, Result


def _now_ms() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


@dataclass
class Member:
    """A member of a group."""

    group_id: str
    name: str
    color_hex: str
    added_by: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    role: MemberRole = MemberRole.MEMBER
    join_method: JoinMethod = JoinMethod.MANUAL
    added_at: int = field(default_factory=_now_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "groupId": self.group_id,
            "name": self.name,
            "colorHex": self.color_hex,
            "role": self.role.value,
            "joinMethod": self.join_method.value,
            "addedAt": self.added_at,
            "addedBy": self.added_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Member:
        return cls(
            id=data["id"],
            group_id=data["groupId"],
            name=data["name"],
            color_hex=data.get("colorHex", ""),
            role=MemberRole(data.get("role", MemberRole.MEMBER.value)),
            join_method=JoinMethod(data.get("joinMethod", JoinMethod.MANUAL.value)),
            added_at=data.get("addedAt", 0),
            added_by=data.get("addedBy", ""),
        )


@dataclass
class GroupExpense:
    """An expense paid by one member and split between several."""

    group_id: str
    amount: Decimal
    paid_by: str
    split_between: list[str]
    category: str = "Other"
    currency: str = DEFAULT_CURRENCY
    note: str | None = None
    date: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        self.amount = to_decimal(self.amount)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "groupId": self.group_id,
            "amount": str(self.amount),
            "currency": self.currency,
            "category": self.category,
            "date": self.date.isoformat(),
            "note": self.note,
            "paidBy": self.paid_by,
            "splitBetween": list(self.split_between),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GroupExpense:
        return cls(
            id=data["id"],
            group_id=data["groupId"],
            amount=to_decimal(data["amount"]),
            currency=data.get("currency", DEFAULT_CURRENCY),
            category=data.get("category", "Other"),
            date=datetime.fromisoformat(data["date"]) if data.get("date") else datetime.now(UTC),
            note=data.get("note"),
            paid_by=data["paidBy"],
            split_between=list(data.get("splitBetween", [])),
        )


@dataclass
class Group:
    id: str
    name: str
    members: list[Member] = field(default_factory=list)
    expenses: list[GroupExpense] = field(default_factory=list)
    default_currency: str = DEFAULT_CURRENCY

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "defaultCurrency": self.default_currency,
            "members": [m.to_dict() for m in self.members],
            "expenses": [e.to_dict() for e in self.expenses],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Group:
        return cls(
            id=data["id"],
            name=data["name"],
            default_currency=data.get("defaultCurrency", DEFAULT_CURRENCY),
            members=[Member.from_dict(m) for m in data.get("members", [])],
            expenses=[GroupExpense.from_dict(e) for e in data.get("expenses", [])],
        )


@dataclass(frozen=True)
class MemberBalance:
    member_id: str
    member_name: str
    total_paid: Decimal
    fair_share: Decimal
    balance: Decimal

    @property
    def owes(self) -> bool:
        return self.balance < 0

    @property
    def is_owed(self) -> bool:
        return self.balance > 0

    def is_settled(self, threshold: Decimal = BALANCE_THRESHOLD) -> bool:
        return abs(self.balance) < threshold


class BalanceCalculator:
    """Calculates balances for group expenses."""

    @staticmethod
    def calculate_balances(
        members: list[Member],
        expenses: list[GroupExpense],
    ) -> dict[str, MemberBalance]:
        """Calculate balances for all members, keyed by member ID."""
        total_paid: dict[str, Decimal] = {m.id: Decimal(0) for m in members}
        total_owed: dict[str, Decimal] = {m.id: Decimal(0) for m in members}

        for expense in expenses:
            paid_so_far = total_paid.get(expense.paid_by, Decimal(0))
            total_paid[expense.paid_by] = paid_so_far + expense.amount

            if not expense.split_between:
                continue
            split_amount = expense.amount / len(expense.split_between)
            for member_id in expense.split_between:
                total_owed[member_id] = total_owed.get(member_id, Decimal(0)) + split_amount

        balances: dict[str, MemberBalance] = {}
        for member in members:
            paid = total_paid[member.id]
            owed = total_owed[member.id]
            balances[member.id] = MemberBalance(
                member_id=member.id,
                member_name=member.name,
                total_paid=paid,
                fair_share=owed,
                balance=paid - owed,
            )

        return balances

    @staticmethod
    def get_total_spending(expenses: list[GroupExpense]) -> Decimal:
        return sum((e.amount for e in expenses), Decimal(0))

    @staticmethod
    def get_spending_by_category(expenses: list[GroupExpense]) -> dict[str, Decimal]:
        totals: dict[str, Decimal] = {}
        for expense in expenses:
            totals[expense.category] = totals.get(expense.category, Decimal(0)) + expense.amount
        return totals

    @staticmethod
    def is_group_settled(
        balances: dict[str, MemberBalance],
        threshold: Decimal = BALANCE_THRESHOLD,
    ) -> bool:
        return all(b.is_settled(threshold) for b in balances.values())


@dataclass(frozen=True)
class SettlementTransaction:
    """A suggested payment from a member who owes to one who is owed."""

    payer_id: str
    payer_name: str
    payee_id: str
    payee_name: str
    amount: Decimal

    def __str__(self) -> str:
        return f"{self.payer_name} pays {self.payee_name}: {format_amount(self.amount)}"


@dataclass
class _Outstanding:
    member_id: str
    member_name: str
    amount: Decimal


class SettlementCalculator:
    """Suggests payments that settle a group's balances."""

    @staticmethod
    def calculate_optimal_settlements(
        balances: dict[str, MemberBalance],
        threshold: Decimal = BALANCE_THRESHOLD,
    ) -> list[SettlementTransaction]:
        """Greedily match the largest debtor with the largest creditor.

        Each step settles the smaller of the two outstanding amounts, so the
        number of payments stays close to the minimum. Balances within
        ``threshold`` of zero are treated as settled.
        """
        debtors = [
            _Outstanding(b.member_id, b.member_name, -b.balance)
            for b in balances.values()
            if b.balance < -threshold
        ]
        creditors = [
            _Outstanding(b.member_id, b.member_name, b.balance)
            for b in balances.values()
            if b.balance > threshold
        ]
        debtors.sort(key=lambda entry: entry.amount, reverse=True)
        creditors.sort(key=lambda entry: entry.amount, reverse=True)

        settlements: list[SettlementTransaction] = []
        d = c = 0
        while d < len(debtors) and c < len(creditors):
            debtor = debtors[d]
            creditor = creditors[c]
            amount = min(debtor.amount, creditor.amount)

            settlements.append(
                SettlementTransaction(
                    payer_id=debtor.member_id,
                    payer_name=debtor.member_name,
                    payee_id=creditor.member_id,
                    payee_name=creditor.member_name,
                    amount=amount,
                )
            )

            debtor.amount -= amount
            creditor.amount -= amount
            if debtor.amount < threshold:
                d += 1
            if creditor.amount < threshold:
                c += 1

        return settlements


def load_group(path: Path | str) -> Result[Group]:
    """Load a group export (JSON) from ``path``."""
    group_path = Path(path)
    try:
        data = json.loads(group_path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        return Result.err(StorageError(f"Failed to read group file: {e}", path=group_path, cause=e))

    try:
        return Result.ok(Group.from_dict(data))
    except (KeyError, TypeError, ValueError) as e:
        return Result.err(StorageError(f"Invalid group file: {e}", path=group_path, cause=e))
