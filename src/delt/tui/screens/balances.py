"""Group balances screen.

Shown after unlocking: group name, total spending, a chip per member, a
balance card per member and suggested payments to settle up.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from ...formatting import balance_label, format_amount
from ..widgets.balance_card import BalanceCard
from ..widgets.member_chip import MemberChip

if TYPE_CHECKING:
    from ..controller import UnlockController


class BalancesScreen(Screen[None]):
    """Balances of every member in the loaded group."""

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
    ]

    DEFAULT_CSS = """
    BalancesScreen #group-title {
        text-style: bold;
        color: $primary;
        padding: 1 2 0 2;
    }

    BalancesScreen #group-summary {
        color: $text-muted;
        padding: 0 2 1 2;
    }

    BalancesScreen #member-chips {
        height: 1;
        padding: 0 2;
        margin-bottom: 1;
    }

    BalancesScreen #balance-list {
        padding: 0 2;
    }

    BalancesScreen #settlements-title {
        text-style: bold;
        margin-top: 1;
    }

    BalancesScreen .settlement {
        padding-left: 2;
    }

    BalancesScreen #empty-message {
        color: $text-muted;
        padding: 1 2;
    }
    """

    def __init__(
        self,
        controller: UnlockController,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._controller = controller

    def compose(self) -> ComposeResult:
        """Compose the screen layout."""
        yield Header()
        group = self._controller.group
        if group is None:
            yield Static("No group loaded. Start with --group FILE.", id="empty-message")
            yield Footer()
            return

        infos = self._controller.get_balances()
        total = format_amount(self._controller.get_total_spending())
        settled = "settled" if self._controller.is_group_settled() else "open balances"

        yield Static(group.name, id="group-title")
        yield Static(
            f"Total spending: {total} {group.default_currency}  ({settled})",
            id="group-summary",
        )
        with Horizontal(id="member-chips"):
            for member in group.members:
                yield MemberChip(member)
        with VerticalScroll(id="balance-list"):
            if not infos:
                yield Static("This group has no members yet.", id="empty-message")
            for info in infos:
                yield BalanceCard(info.member, info.balance)
            if infos:
                yield from self._compose_settlements(group.default_currency)
        yield Footer()

    def _compose_settlements(self, currency: str) -> ComposeResult:
        yield Static("Settlement suggestions", id="settlements-title")
        settlements = self._controller.get_settlements()
        if not settlements:
            yield Static("Everyone is settled up.", id="settled-message")
        for settlement in settlements:
            yield Static(
                f"{settlement.payer_name} pays {settlement.payee_name} "
                f"{format_amount(settlement.amount)} {currency}",
                classes="settlement",
            )

    @on(BalanceCard.Selected)
    def on_card_selected(self, event: BalanceCard.Selected) -> None:
        balance = event.card.balance
        self.notify(
            f"{balance.member_name}: {balance_label(balance.balance)} "
            f"{format_amount(abs(balance.balance))}"
        )

    def action_quit(self) -> None:
        self.app.exit(self._controller.is_unlocked)
