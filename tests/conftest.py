from __future__ import annotations

import json
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from delt.attempts import AttemptTracker
from delt.balance import Group, GroupExpense, Member
from delt.config import AppConfig
from delt.prompts import MockPrompts
from delt.security import SecurityManager

TEST_PIN = "123456"
TEST_ITERATIONS = 1000


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "delt-home"
    monkeypatch.setenv("DELT_HOME", str(home))
    return home


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def app_config(data_dir: Path) -> AppConfig:
    return AppConfig(data_dir=data_dir, pbkdf2_iterations=TEST_ITERATIONS)


@pytest.fixture
def memory_security() -> SecurityManager:
    security = SecurityManager(":memory:", iterations=TEST_ITERATIONS)
    security.setup_pin(TEST_PIN).unwrap()
    return security


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(fake_clock: FakeClock) -> AttemptTracker:
    return AttemptTracker(max_attempts=3, lockout_seconds=30, clock=fake_clock)


@pytest.fixture
def sample_group() -> Group:
    """Three members; Alice paid 90 for all, Bob paid 30 for himself and Alice.

    Balances: Alice +45, Bob -15, Carol -30.
    """
    members = [
        Member(group_id="g1", name="Alice", color_hex="#4CAF50", id="m1", added_at=1),
        Member(group_id="g1", name="Bob", color_hex="#2196F3", id="m2", added_at=2),
        Member(group_id="g1", name="Carol", color_hex="not-a-colour", id="m3", added_at=3),
    ]
    expenses = [
        GroupExpense(
            group_id="g1",
            amount=Decimal("90"),
            paid_by="m1",
            split_between=["m1", "m2", "m3"],
            category="Food",
            date=datetime(2024, 5, 1, tzinfo=UTC),
            id="e1",
        ),
        GroupExpense(
            group_id="g1",
            amount=Decimal("30"),
            paid_by="m2",
            split_between=["m1", "m2"],
            category="Transport",
            date=datetime(2024, 5, 2, tzinfo=UTC),
            id="e2",
        ),
    ]
    return Group(id="g1", name="Lisbon trip", members=members, expenses=expenses)


@pytest.fixture
def group_file(tmp_path: Path, sample_group: Group) -> Path:
    path = tmp_path / "group.json"
    path.write_text(json.dumps(sample_group.to_dict()))
    return path


@pytest.fixture
def mock_prompts() -> MockPrompts:
    return MockPrompts(pin=TEST_PIN, new_pin="654321", confirmations=True)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: marks tests running full-strength key derivation")
