"""Balance card widget.

One card per member: avatar, name, amount paid and fair share on the left,
"Gets back"/"Owes" and the absolute balance on the right.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Click
from textual.message import Message
from textual.widgets import Static

from ...balance import Member, MemberBalance
from ...formatting import balance_label, format_amount
from .member_chip import MemberAvatar


class BalanceCard(Horizontal):
    """Card summarising one member's balance.

    Posts ``BalanceCard.Selected`` when clicked.
    """

    DEFAULT_CSS = """
    BalanceCard {
        height: 5;
        margin: 0 0 1 0;
        padding: 0 1;
        border: round $primary-darken-2;
        background: $surface;
    }

    BalanceCard:hover {
        background: $surface-lighten-1;
    }

    BalanceCard .card-details {
        width: 1fr;
        padding: 0 1;
    }

    BalanceCard .card-name {
        text-style: bold;
    }

    BalanceCard .card-trailing {
        width: 14;
        align: right middle;
    }

    BalanceCard .card-label {
        width: 100%;
        text-align: right;
        color: $text-muted;
    }

    BalanceCard .card-amount {
        width: 100%;
        text-align: right;
        text-style: bold;
    }

    BalanceCard .card-amount.positive {
        color: $success;
    }

    BalanceCard .card-amount.negative {
        color: $error;
    }
    """

    class Selected(Message):
        def __init__(self, card: BalanceCard) -> None:
            super().__init__()
            self.card = card

    def __init__(
        self,
        member: Member,
        balance: MemberBalance,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._member = member
        self._balance = balance

    @property
    def member(self) -> Member:
        return self._member

    @property
    def balance(self) -> MemberBalance:
        return self._balance

    @property
    def amount_text(self) -> str:
        return format_amount(abs(self._balance.balance))

    @property
    def label_text(self) -> str:
        return balance_label(self._balance.balance)

    def compose(self) -> ComposeResult:
        yield MemberAvatar(self._member, large=True)
        with Vertical(classes="card-details"):
            yield Static(self._balance.member_name, classes="card-name")
            yield Static(f"Paid: {format_amount(self._balance.total_paid)}", classes="card-paid")
            yield Static(
                f"Fair share: {format_amount(self._balance.fair_share)}", classes="card-share"
            )
        with Vertical(classes="card-trailing"):
            yield Static(self.label_text, classes="card-label")
            sign = "positive" if self._balance.balance >= 0 else "negative"
            yield Static(self.amount_text, classes=f"card-amount {sign}")

    def on_click(self, event: Click) -> None:
        self.post_message(self.Selected(self))
