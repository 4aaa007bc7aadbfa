"""Member chip and avatar widgets.

A member is shown as a coloured initial; the chip adds the name and, when
the host handles them, selection and removal.
"""

from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Static

from ...balance import Member
from ...colors import parse_hex_color, with_opacity
from ...formatting import member_initial


class MemberAvatar(Static):
    """A member's initial on a tinted background in the member's colour."""

    DEFAULT_CSS = """
    MemberAvatar {
        width: 3;
        height: 1;
        content-align: center middle;
        text-style: bold;
    }

    MemberAvatar.large {
        width: 5;
        height: 3;
    }
    """

    def __init__(
        self,
        member: Member,
        opacity: float = 0.2,
        large: bool = False,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(member_initial(member.name), name=name, id=id, classes=classes)
        self._member = member
        color = parse_hex_color(member.color_hex)
        self.styles.color = color
        self.styles.background = with_opacity(color, opacity)
        if large:
            self.add_class("large")

    @property
    def member(self) -> Member:
        return self._member


class MemberChip(Horizontal):
    """Chip with avatar and name.

    Posts ``MemberChip.Toggled`` on click when ``selectable`` and
    ``MemberChip.Deleted`` when the remove button is pressed.
    """

    DEFAULT_CSS = """
    MemberChip {
        width: auto;
        height: 1;
        padding: 0 1;
        margin: 0 1 0 0;
        background: $surface-lighten-1;
    }

    MemberChip.-selected {
        background: $primary 40%;
    }

    MemberChip .chip-label {
        width: auto;
        padding: 0 1;
    }

    MemberChip Button.chip-delete {
        min-width: 3;
        width: 3;
        height: 1;
        border: none;
        padding: 0;
    }
    """

    class Toggled(Message):
        def __init__(self, chip: MemberChip, selected: bool) -> None:
            super().__init__()
            self.chip = chip
            self.selected = selected

    class Deleted(Message):
        def __init__(self, chip: MemberChip) -> None:
            super().__init__()
            self.chip = chip

    def __init__(
        self,
        member: Member,
        selected: bool = False,
        selectable: bool = False,
        deletable: bool = False,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._member = member
        self._selected = selected
        self._selectable = selectable
        self._deletable = deletable
        self.set_class(selected, "-selected")

    @property
    def member(self) -> Member:
        return self._member

    @property
    def selected(self) -> bool:
        return self._selected

    @selected.setter
    def selected(self, value: bool) -> None:
        self._selected = value
        self.set_class(value, "-selected")

    def compose(self) -> ComposeResult:
        yield MemberAvatar(self._member, opacity=0.3)
        yield Static(self._member.name, classes="chip-label")
        if self._deletable:
            yield Button("x", classes="chip-delete")

    def on_click(self, event: Click) -> None:
        if not self._selectable:
            return
        self.selected = not self._selected
        self.post_message(self.Toggled(self, self._selected))

    @on(Button.Pressed, ".chip-delete")
    def on_delete_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(self.Deleted(self))
