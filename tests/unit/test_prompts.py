"""Tests for interactive prompts."""

from __future__ import annotations

from unittest.mock import patch

from rich.console import Console

from delt.prompts import MockPrompts, PINRequirements, Prompts, validate_pin_requirements


class TestValidatePinRequirements:
    def test_valid(self) -> None:
        assert validate_pin_requirements("482915", PINRequirements()) == []

    def test_empty(self) -> None:
        assert validate_pin_requirements("", PINRequirements()) == ["Please enter a PIN"]

    def test_wrong_length(self) -> None:
        assert "PIN must be 6 digits" in validate_pin_requirements("1234", PINRequirements())

    def test_non_digits(self) -> None:
        errors = validate_pin_requirements("12ab56", PINRequirements())
        assert "PIN must contain only digits" in errors

    def test_only_shape_checked(self) -> None:
        assert validate_pin_requirements("123456", PINRequirements()) == []
        assert validate_pin_requirements("111111", PINRequirements()) == []

    def test_custom_length(self) -> None:
        assert validate_pin_requirements("1234", PINRequirements(length=4)) == []


class TestPromptsGetPin:
    def test_returns_secure_string(self) -> None:
        prompts = Prompts(Console(quiet=True))
        with patch("delt.prompts.getpass.getpass", return_value="482915"):
            pin = prompts.get_pin("PIN", show_requirements=False)
        assert pin.get() == "482915"

    def test_retries_until_valid(self) -> None:
        prompts = Prompts(Console(quiet=True))
        with patch("delt.prompts.getpass.getpass", side_effect=["12", "482915"]) as mock_getpass:
            pin = prompts.get_pin("PIN", show_requirements=False)
        assert pin.get() == "482915"
        assert mock_getpass.call_count == 2

    def test_confirm_mismatch_retries(self) -> None:
        prompts = Prompts(Console(quiet=True))
        answers = ["482915", "000000", "482915", "482915"]
        with patch("delt.prompts.getpass.getpass", side_effect=answers):
            pin = prompts.get_pin("PIN", confirm=True, show_requirements=False)
        assert pin.get() == "482915"

    def test_requirements_displayed(self) -> None:
        console = Console(record=True, width=80)
        prompts = Prompts(console)
        with patch("delt.prompts.getpass.getpass", return_value="482915"):
            prompts.get_pin("PIN")
        assert "Exactly 6 digits" in console.export_text()


class TestPromptsConfirm:
    def test_confirm_delegates_to_rich(self) -> None:
        prompts = Prompts(Console(quiet=True))
        with patch("delt.prompts.Confirm.ask", return_value=True) as mock_ask:
            assert prompts.confirm("Continue?")
        mock_ask.assert_called_once_with("Continue?", default=False)

    def test_dangerous_confirm_shows_warning(self) -> None:
        console = Console(record=True, width=80)
        prompts = Prompts(console)
        with patch("delt.prompts.Confirm.ask", return_value=False):
            assert not prompts.confirm("Wipe everything", dangerous=True)
        assert "WARNING" in console.export_text()


class TestMockPrompts:
    def test_returns_pin(self) -> None:
        assert MockPrompts(pin="111111").get_pin("Current PIN").get() == "111111"

    def test_returns_new_pin(self) -> None:
        assert MockPrompts(new_pin="222222").get_pin("New PIN").get() == "222222"

    def test_confirmations(self) -> None:
        assert MockPrompts(confirmations=False).confirm("Sure?") is False
