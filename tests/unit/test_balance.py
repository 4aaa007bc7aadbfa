"""Tests for balance calculation and the group data model."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from delt.balance import (
    BalanceCalculator,
    Group,
    GroupExpense,
    Member,
    MemberBalance,
    SettlementCalculator,
    SettlementTransaction,
    load_group,
    to_decimal,
)
from delt.errors import StorageError
from delt.types import JoinMethod, MemberRole


def _balance(value: str) -> MemberBalance:
    amount = Decimal(value)
    return MemberBalance("m", "M", Decimal(0), Decimal(0), amount)


class TestToDecimal:
    def test_from_string(self) -> None:
        assert to_decimal("12.50") == Decimal("12.50")

    def test_from_float_uses_repr(self) -> None:
        assert to_decimal(0.1) == Decimal("0.1")

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            to_decimal("twelve")


class TestCalculateBalances:
    def test_sample_group(self, sample_group: Group) -> None:
        balances = BalanceCalculator.calculate_balances(
            sample_group.members, sample_group.expenses
        )

        assert balances["m1"].total_paid == Decimal(90)
        assert balances["m1"].fair_share == Decimal(45)
        assert balances["m1"].balance == Decimal(45)
        assert balances["m2"].balance == Decimal(-15)
        assert balances["m3"].balance == Decimal(-30)

    def test_balances_sum_to_zero(self, sample_group: Group) -> None:
        balances = BalanceCalculator.calculate_balances(
            sample_group.members, sample_group.expenses
        )
        assert sum(b.balance for b in balances.values()) == 0

    def test_no_expenses(self, sample_group: Group) -> None:
        balances = BalanceCalculator.calculate_balances(sample_group.members, [])
        assert all(b.balance == 0 for b in balances.values())

    def test_uneven_split_keeps_precision(self) -> None:
        members = [Member("g", name, "#000000", id=name) for name in ("a", "b", "c")]
        expense = GroupExpense("g", Decimal("10"), "a", ["a", "b", "c"])

        balances = BalanceCalculator.calculate_balances(members, [expense])

        assert abs(sum(b.balance for b in balances.values())) < Decimal("0.01")

    def test_empty_split_only_counts_payment(self) -> None:
        members = [Member("g", "a", "#000000", id="a")]
        expense = GroupExpense("g", Decimal("5"), "a", [])

        balances = BalanceCalculator.calculate_balances(members, [expense])

        assert balances["a"].total_paid == Decimal(5)
        assert balances["a"].fair_share == Decimal(0)

    def test_member_names_carried(self, sample_group: Group) -> None:
        balances = BalanceCalculator.calculate_balances(
            sample_group.members, sample_group.expenses
        )
        assert balances["m2"].member_name == "Bob"


class TestMemberBalance:
    def test_owes(self) -> None:
        assert _balance("-1").owes
        assert not _balance("-1").is_owed

    def test_is_owed(self) -> None:
        assert _balance("2").is_owed

    def test_settled_within_threshold(self) -> None:
        assert _balance("0.009").is_settled()
        assert not _balance("0.01").is_settled()


class TestTotals:
    def test_total_spending(self, sample_group: Group) -> None:
        assert BalanceCalculator.get_total_spending(sample_group.expenses) == Decimal(120)

    def test_total_spending_empty(self) -> None:
        assert BalanceCalculator.get_total_spending([]) == Decimal(0)

    def test_spending_by_category(self, sample_group: Group) -> None:
        assert BalanceCalculator.get_spending_by_category(sample_group.expenses) == {
            "Food": Decimal(90),
            "Transport": Decimal(30),
        }

    def test_group_not_settled(self, sample_group: Group) -> None:
        balances = BalanceCalculator.calculate_balances(
            sample_group.members, sample_group.expenses
        )
        assert not BalanceCalculator.is_group_settled(balances)

    def test_group_settled(self) -> None:
        assert BalanceCalculator.is_group_settled({"a": _balance("0"), "b": _balance("0.001")})


class TestSettlements:
    def test_three_member_split(self, sample_group: Group) -> None:
        balances = BalanceCalculator.calculate_balances(sample_group.members, sample_group.expenses)

        settlements = SettlementCalculator.calculate_optimal_settlements(balances)

        assert [(s.payer_name, s.payee_name, s.amount) for s in settlements] == [
            ("Carol", "Alice", Decimal(30)),
            ("Bob", "Alice", Decimal(15)),
        ]

    def test_settled_group_needs_no_payments(self) -> None:
        members = [Member(group_id="g", name=n, color_hex="", id=n) for n in ("a", "b")]
        expenses = [
            GroupExpense(group_id="g", amount=Decimal(10), paid_by="a", split_between=["a", "b"]),
            GroupExpense(group_id="g", amount=Decimal(10), paid_by="b", split_between=["a", "b"]),
        ]
        balances = BalanceCalculator.calculate_balances(members, expenses)

        assert SettlementCalculator.calculate_optimal_settlements(balances) == []

    def test_payments_clear_every_balance(self) -> None:
        members = [Member(group_id="g", name=n, color_hex="", id=n) for n in "abcd"]
        expenses = [
            GroupExpense(
                group_id="g", amount=Decimal(100), paid_by="a", split_between=["a", "b", "c", "d"]
            ),
            GroupExpense(
                group_id="g", amount=Decimal(60), paid_by="b", split_between=["b", "c", "d"]
            ),
        ]
        balances = BalanceCalculator.calculate_balances(members, expenses)

        settlements = SettlementCalculator.calculate_optimal_settlements(balances)

        remaining = {member_id: b.balance for member_id, b in balances.items()}
        for s in settlements:
            remaining[s.payer_id] += s.amount
            remaining[s.payee_id] -= s.amount
        assert all(abs(value) < Decimal("0.01") for value in remaining.values())
        assert len(settlements) <= len(members) - 1

    def test_amounts_within_threshold_ignored(self) -> None:
        balances = {
            "a": MemberBalance("a", "A", Decimal(0), Decimal(0), Decimal("0.005")),
            "b": MemberBalance("b", "B", Decimal(0), Decimal(0), Decimal("-0.005")),
        }
        assert SettlementCalculator.calculate_optimal_settlements(balances) == []

    def test_str(self) -> None:
        settlement = SettlementTransaction("b", "Bob", "a", "Alice", Decimal("12.5"))
        assert str(settlement) == "Bob pays Alice: 12.50"


class TestSerialization:
    def test_member_dict_keys(self) -> None:
        member = Member("g1", "Alice", "#4CAF50", added_by="m9", id="m1", added_at=5)
        assert member.to_dict() == {
            "id": "m1",
            "groupId": "g1",
            "name": "Alice",
            "colorHex": "#4CAF50",
            "role": "member",
            "joinMethod": "manual",
            "addedAt": 5,
            "addedBy": "m9",
        }

    def test_member_from_dict_defaults(self) -> None:
        member = Member.from_dict({"id": "m1", "groupId": "g1", "name": "Alice"})
        assert member.role == MemberRole.MEMBER
        assert member.join_method == JoinMethod.MANUAL
        assert member.color_hex == ""

    def test_member_admin_role(self) -> None:
        member = Member.from_dict(
            {"id": "m1", "groupId": "g1", "name": "A", "role": "admin", "joinMethod": "code"}
        )
        assert member.role == MemberRole.ADMIN
        assert member.join_method == JoinMethod.CODE

    def test_expense_amount_as_string(self) -> None:
        expense = GroupExpense("g", "19.99", "a", ["a"])
        assert expense.amount == Decimal("19.99")
        assert expense.to_dict()["amount"] == "19.99"

    def test_group_round_trip(self, sample_group: Group) -> None:
        restored = Group.from_dict(json.loads(json.dumps(sample_group.to_dict())))
        assert restored == sample_group


class TestLoadGroup:
    def test_load(self, group_file: Path, sample_group: Group) -> None:
        group = load_group(group_file).unwrap()
        assert group.name == "Lisbon trip"
        assert [m.name for m in group.members] == ["Alice", "Bob", "Carol"]

    def test_missing_file(self, tmp_path: Path) -> None:
        error = load_group(tmp_path / "nope.json").unwrap_err()
        assert isinstance(error, StorageError)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("[")
        assert isinstance(load_group(path).unwrap_err(), StorageError)

    def test_missing_fields(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"name": "No id"}))
        error = load_group(path).unwrap_err()
        assert isinstance(error, StorageError)
        assert "Invalid group file" in error.message
