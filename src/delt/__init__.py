"""PIN-protected shared expense balances.

This package provides the PIN unlock flow guarding a local expense
database, equal-split balance calculation and a Textual interface to
browse group balances.
"""

from .attempts import AttemptTracker
from .balance import (
    BalanceCalculator,
    Group,
    GroupExpense,
    Member,
    MemberBalance,
    SettlementCalculator,
    SettlementTransaction,
    load_group,
)
from .colors import color_to_hex, parse_hex_color, with_opacity
from .config import AppConfig, ConfigError, get_data_dir, load_config, write_config
from .errors import (
    DeltError,
    ErrorCategory,
    ErrorLogger,
    InvalidLengthError,
    PinFormatError,
    RecoveryHint,
    StateError,
    StorageError,
    SubmissionBlockedError,
    UnlockRejectedError,
    wrap_exception,
)
from .formatting import balance_label, format_amount, member_initial
from .main import run
from .prompts import MockPrompts, PINRequirements, Prompts
from .security import SecurityManager, validate_pin
from .types import JoinMethod, MemberRole, Result, SecureString, UnlockState
from .unlock import InvalidTransitionError, UnlockFlow, filter_pin_input

__version__ = "0.1.0"

__all__ = [
    # Types
    "JoinMethod",
    "MemberRole",
    "Result",
    "SecureString",
    "UnlockState",
    # Unlock
    "UnlockFlow",
    "InvalidTransitionError",
    "filter_pin_input",
    "AttemptTracker",
    # Security
    "SecurityManager",
    "validate_pin",
    # Balances
    "BalanceCalculator",
    "Group",
    "GroupExpense",
    "Member",
    "MemberBalance",
    "SettlementCalculator",
    "SettlementTransaction",
    "load_group",
    # Display helpers
    "balance_label",
    "color_to_hex",
    "format_amount",
    "member_initial",
    "parse_hex_color",
    "with_opacity",
    # Configuration
    "AppConfig",
    "ConfigError",
    "get_data_dir",
    "load_config",
    "write_config",
    # Prompts
    "Prompts",
    "MockPrompts",
    "PINRequirements",
    # Errors
    "DeltError",
    "ErrorCategory",
    "ErrorLogger",
    "InvalidLengthError",
    "PinFormatError",
    "RecoveryHint",
    "StateError",
    "StorageError",
    "SubmissionBlockedError",
    "UnlockRejectedError",
    "wrap_exception",
    # Main
    "run",
    "__version__",
]
