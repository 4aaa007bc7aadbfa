from __future__ import annotations

import argparse
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .balance import BalanceCalculator, Group, SettlementCalculator, load_group
from .config import AppConfig, ensure_data_dir, load_config
from .errors import DeltError, ErrorLogger
from .formatting import balance_label, format_amount
from .prompts import PINRequirements, Prompts
from .security import SecurityManager

console = Console()


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="delt",
        description="PIN-protected shared expense balances",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Data directory (default: $DELT_HOME or ~/.config/delt)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show error details and recent log entries",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("setup-pin", help="Choose a PIN for this device")
    subparsers.add_parser("change-pin", help="Replace the current PIN")
    subparsers.add_parser("status", help="Show PIN and configuration status")

    unlock_parser = subparsers.add_parser("unlock", help="Unlock and browse balances (TUI)")
    unlock_parser.add_argument("--group", type=Path, help="Group export (JSON) to show")

    balances_parser = subparsers.add_parser("balances", help="Print balances for a group")
    balances_parser.add_argument("file", type=Path, help="Group export (JSON)")

    subparsers.add_parser("reset", help="Remove the PIN and all security data")

    return parser


def _print_error(error: Exception, verbose: bool = False) -> None:
    if verbose and isinstance(error, DeltError):
        console.print(f"[red]{escape(error.format_full())}[/red]")
    else:
        console.print(f"[red]Error:[/red] {escape(str(error))}")


def _security_for(config: AppConfig) -> SecurityManager:
    return SecurityManager(
        config.security_path,
        iterations=config.pbkdf2_iterations,
        pin_length=config.pin_length,
    )


def cmd_setup_pin(config: AppConfig, security: SecurityManager, prompts: Prompts) -> int:
    """Store a new PIN."""
    if security.is_pin_setup():
        console.print("A PIN is already set up. Use [bold]delt change-pin[/bold] to replace it.")
        return 1

    dir_result = ensure_data_dir(config.data_dir)
    if dir_result.is_err():
        _print_error(dir_result.unwrap_err())
        return 1

    pin = prompts.get_pin(
        "Choose a PIN",
        confirm=True,
        requirements=PINRequirements(length=config.pin_length),
    )
    result = security.setup_pin(pin.get())
    pin.clear()
    if result.is_err():
        _print_error(result.unwrap_err())
        return 1

    console.print("[green]PIN set up.[/green]")
    return 0


def cmd_change_pin(config: AppConfig, security: SecurityManager, prompts: Prompts) -> int:
    """Replace the PIN, keeping the database key."""
    if not security.is_pin_setup():
        console.print("[red]No PIN set up.[/red] Run [bold]delt setup-pin[/bold] first.")
        return 1

    old_pin = prompts.get_pin(
        "Current PIN",
        show_requirements=False,
        requirements=PINRequirements(length=config.pin_length),
    )
    new_pin = prompts.get_pin(
        "New PIN",
        confirm=True,
        requirements=PINRequirements(length=config.pin_length),
    )
    result = security.change_pin(old_pin.get(), new_pin.get())
    old_pin.clear()
    new_pin.clear()
    if result.is_err():
        _print_error(result.unwrap_err())
        return 1

    console.print("[green]PIN changed.[/green]")
    return 0


def cmd_status(config: AppConfig, security: SecurityManager, verbose: bool) -> int:
    """Show PIN and configuration status."""
    console.print(f"Data directory: {config.data_dir}")
    if security.is_pin_setup():
        console.print("PIN: [green]set up[/green]")
    else:
        console.print("PIN: [yellow]not set up[/yellow] (run delt setup-pin)")

    console.print(f"PIN length: {config.pin_length}")
    console.print(f"Attempts before lockout: {config.max_login_attempts}")
    console.print(f"Lockout: {config.lockout_seconds} seconds")
    console.print(f"Default currency: {config.default_currency}")

    if verbose and config.error_log_path.exists():
        entries = ErrorLogger(config.error_log_path).get_recent_errors()
        if entries:
            console.print("\nRecent errors:")
            for entry in entries:
                console.print(f"  {escape(entry.rstrip())}")

    return 0


def show_balances(group: Group, config: AppConfig) -> None:
    """Print a table of member balances for ``group``."""
    balances = BalanceCalculator.calculate_balances(group.members, group.expenses)
    total = BalanceCalculator.get_total_spending(group.expenses)

    table = Table(title=group.name)
    table.add_column("Member")
    table.add_column("Paid", justify="right")
    table.add_column("Fair share", justify="right")
    table.add_column("Balance", justify="right")

    for member in group.members:
        balance = balances[member.id]
        style = "green" if balance.balance >= 0 else "red"
        table.add_row(
            escape(member.name),
            format_amount(balance.total_paid),
            format_amount(balance.fair_share),
            f"[{style}]{balance_label(balance.balance)} "
            f"{format_amount(abs(balance.balance))}[/{style}]",
        )

    console.print(table)
    console.print(f"Total spending: {format_amount(total)} {group.default_currency}")
    if BalanceCalculator.is_group_settled(balances, config.balance_threshold):
        console.print("[green]All settled.[/green]")
        return

    settlements = SettlementCalculator.calculate_optimal_settlements(
        balances, config.balance_threshold
    )
    console.print("\n[bold]Settlement suggestions[/bold]")
    for settlement in settlements:
        console.print(
            f"  {escape(settlement.payer_name)} pays {escape(settlement.payee_name)} "
            f"{format_amount(settlement.amount)} {group.default_currency}"
        )


def cmd_balances(ns: argparse.Namespace, config: AppConfig) -> int:
    result = load_group(ns.file)
    if result.is_err():
        _print_error(result.unwrap_err(), ns.verbose)
        return 1

    show_balances(result.unwrap(), config)
    return 0


def cmd_unlock(ns: argparse.Namespace, config: AppConfig, security: SecurityManager) -> int:
    """Launch the unlock TUI."""
    if not security.is_pin_setup():
        console.print("[red]No PIN set up.[/red] Run [bold]delt setup-pin[/bold] first.")
        return 1

    group = None
    if ns.group is not None:
        group_result = load_group(ns.group)
        if group_result.is_err():
            _print_error(group_result.unwrap_err(), ns.verbose)
            return 1
        group = group_result.unwrap()

    from .tui import run_tui
    from .tui.controller import UnlockController

    controller = UnlockController.from_config(config, group=group)
    try:
        unlocked = run_tui(controller)
    except Exception as e:
        console.print(f"[red]Error:[/red] TUI failed: {escape(str(e))}")
        return 1

    return 0 if unlocked else 1


def cmd_reset(security: SecurityManager, prompts: Prompts) -> int:
    """Remove the PIN and database key."""
    if not security.is_pin_setup():
        console.print("Nothing to reset.")
        return 0

    if not prompts.confirm(
        "This removes your PIN and the database key. Data encrypted with it is lost.",
        dangerous=True,
    ):
        console.print("Aborted.")
        return 1

    result = security.clear_all_data()
    if result.is_err():
        _print_error(result.unwrap_err())
        return 1

    console.print("Security data cleared.")
    return 0


def run(args: list[str]) -> int:
    """Main entry point."""
    parser = get_parser()
    ns = parser.parse_args(args)

    config_result = load_config(ns.data_dir)
    if config_result.is_err():
        _print_error(config_result.unwrap_err())
        return 1
    config = config_result.unwrap()

    security = _security_for(config)

    # No command: show status
    if not ns.command:
        return cmd_status(config, security, ns.verbose)

    prompts = Prompts(console)

    if ns.command == "setup-pin":
        return cmd_setup_pin(config, security, prompts)
    elif ns.command == "change-pin":
        return cmd_change_pin(config, security, prompts)
    elif ns.command == "status":
        return cmd_status(config, security, ns.verbose)
    elif ns.command == "unlock":
        return cmd_unlock(ns, config, security)
    elif ns.command == "balances":
        return cmd_balances(ns, config)
    elif ns.command == "reset":
        return cmd_reset(security, prompts)

    parser.print_help()
    return 1
