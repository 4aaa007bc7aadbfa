from __future__ import annotations

import getpass
from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from .config import PIN_LENGTH
from .types import SecureString


@dataclass
class PINRequirements:
    """Rules a new PIN must satisfy."""

    length: int = PIN_LENGTH


def validate_pin_requirements(pin: str, requirements: PINRequirements) -> list[str]:
    """Validate PIN against requirements.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors: list[str] = []

    if not pin:
        errors.append("Please enter a PIN")
        return errors

    if not pin.isdecimal() or not pin.isascii():
        errors.append("PIN must contain only digits")
    if len(pin) != requirements.length:
        errors.append(f"PIN must be {requirements.length} digits")

    return errors


class Prompts:
    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def _show_pin_requirements(self, requirements: PINRequirements) -> None:
        """Display PIN requirements before prompting."""
        self._console.print()
        self._console.print("[cyan]PIN Requirements:[/cyan]")
        self._console.print(f"  - Exactly {requirements.length} digits")
        self._console.print()

    def get_pin(
        self,
        prompt: str,
        confirm: bool = False,
        show_requirements: bool = True,
        requirements: PINRequirements | None = None,
    ) -> SecureString:
        """Get PIN from user with requirements display.

        Args:
            prompt: The prompt message to display
            confirm: Whether to ask for the PIN a second time
            show_requirements: Whether to display requirements
            requirements: Optional PIN rules (defaults to PINRequirements())

        Returns:
            SecureString containing the PIN
        """
        if requirements is None:
            requirements = PINRequirements()

        if show_requirements:
            self._show_pin_requirements(requirements)

        while True:
            value = getpass.getpass(f"{prompt}: ")

            errors = validate_pin_requirements(value, requirements)
            if errors:
                for error in errors:
                    self._console.print(f"[red]{error}[/red]")
                continue

            if confirm:
                confirm_value = getpass.getpass(f"{prompt} (confirm): ")
                if value != confirm_value:
                    self._console.print("[red]PINs do not match[/red]")
                    continue

            return SecureString(value)

    def confirm(
        self,
        message: str,
        default: bool = False,
        dangerous: bool = False,
    ) -> bool:
        if dangerous:
            self._console.print(
                Panel(
                    f"[bold red]WARNING: DANGER[/bold red]\n\n{message}",
                    border_style="red",
                )
            )
            return Confirm.ask("Are you absolutely sure?", default=False)

        return Confirm.ask(message, default=default)


class MockPrompts(Prompts):
    """Mock prompts for testing - returns pre-configured values."""

    def __init__(
        self,
        pin: str = "123456",
        new_pin: str = "654321",
        confirmations: bool = True,
    ) -> None:
        super().__init__(Console(quiet=True))
        self._pin = pin
        self._new_pin = new_pin
        self._confirmations = confirmations

    def get_pin(
        self,
        prompt: str,
        confirm: bool = False,
        show_requirements: bool = True,
        requirements: PINRequirements | None = None,
    ) -> SecureString:
        if "new" in prompt.lower():
            return SecureString(self._new_pin)
        return SecureString(self._pin)

    def confirm(
        self,
        message: str,
        default: bool = False,
        dangerous: bool = False,
    ) -> bool:
        return self._confirmations
