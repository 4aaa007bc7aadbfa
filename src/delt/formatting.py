from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .config import MAX_LOGIN_ATTEMPTS

_CENTS = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Format an amount with two decimals, e.g. ``12.50``."""
    return str(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))


def balance_label(balance: Decimal) -> str:
    return "Gets back" if balance >= 0 else "Owes"


def member_initial(name: str) -> str:
    stripped = name.strip()
    return stripped[0].upper() if stripped else "?"


def attempts_text(attempts_remaining: int) -> str:
    return f"Attempts remaining: {attempts_remaining}"


def show_attempts_warning(attempts_remaining: int, max_attempts: int = MAX_LOGIN_ATTEMPTS) -> bool:
    """The attempts line is shown only after a failure and before lockout."""
    return 0 < attempts_remaining < max_attempts
