from __future__ import annotations

import json
import os
import platform
from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from .types import Result


class ConfigError(Exception):
    pass


MAX_LOGIN_ATTEMPTS = 3
LOCKOUT_SECONDS = 30
PIN_LENGTH = 6
PBKDF2_ITERATIONS = 100_000
BALANCE_THRESHOLD = Decimal("0.01")
DEFAULT_CURRENCY = "EUR"
PERSONAL_GROUP_COLOR = "#4CAF50"

CONFIG_FILENAME = "config.json"
SECURITY_FILENAME = "security.json"
ERROR_LOG_FILENAME = "errors.log"


def get_data_dir() -> Path:
    """Get the delt data directory."""
    env_home = os.environ.get("DELT_HOME")
    if env_home:
        return Path(env_home)
    return Path.home() / ".config" / "delt"


@dataclass
class AppConfig:
    max_login_attempts: int = MAX_LOGIN_ATTEMPTS
    lockout_seconds: int = LOCKOUT_SECONDS
    pin_length: int = PIN_LENGTH
    pbkdf2_iterations: int = PBKDF2_ITERATIONS
    balance_threshold: Decimal = BALANCE_THRESHOLD
    default_currency: str = DEFAULT_CURRENCY
    data_dir: Path = field(default_factory=get_data_dir)

    def __post_init__(self) -> None:
        if self.pin_length != PIN_LENGTH:
            raise ConfigError(f"pin_length must be {PIN_LENGTH}, got {self.pin_length}")

    @property
    def security_path(self) -> Path:
        return self.data_dir / SECURITY_FILENAME

    @property
    def error_log_path(self) -> Path:
        return self.data_dir / ERROR_LOG_FILENAME

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_login_attempts": self.max_login_attempts,
            "lockout_seconds": self.lockout_seconds,
            "pin_length": self.pin_length,
            "pbkdf2_iterations": self.pbkdf2_iterations,
            "balance_threshold": str(self.balance_threshold),
            "default_currency": self.default_currency,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], data_dir: Path | None = None) -> AppConfig:
        known = {f.name for f in fields(cls)} - {"data_dir"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        values = dict(data)
        if "balance_threshold" in values:
            try:
                values["balance_threshold"] = Decimal(str(values["balance_threshold"]))
            except InvalidOperation as e:
                threshold = values["balance_threshold"]
                raise ConfigError(f"Invalid balance_threshold: {threshold}") from e

        for key in ("max_login_attempts", "lockout_seconds", "pbkdf2_iterations"):
            if key in values and (not isinstance(values[key], int) or values[key] < 1):
                raise ConfigError(f"{key} must be a positive integer")

        config = cls(**values)
        if data_dir is not None:
            config.data_dir = data_dir
        return config


def load_config(data_dir: Path | None = None) -> Result[AppConfig]:
    """Load config.json from the data directory, falling back to defaults."""
    home = data_dir or get_data_dir()
    conf_path = home / CONFIG_FILENAME

    if not conf_path.exists():
        return Result.ok(AppConfig(data_dir=home))

    try:
        data = json.loads(conf_path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        return Result.err(ConfigError(f"Could not read {conf_path}: {e}"))

    if not isinstance(data, dict):
        return Result.err(ConfigError(f"{conf_path} must contain a JSON object"))

    try:
        return Result.ok(AppConfig.from_dict(data, data_dir=home))
    except ConfigError as e:
        return Result.err(e)
    except TypeError as e:
        return Result.err(ConfigError(f"Invalid config: {e}"))


def ensure_data_dir(data_dir: Path | None = None) -> Result[Path]:
    """Ensure the data directory exists with correct permissions."""
    home = data_dir or get_data_dir()

    try:
        home.mkdir(parents=True, exist_ok=True)

        # Set restrictive permissions (0700)
        if platform.system() != "Windows":
            home.chmod(0o700)

        return Result.ok(home)
    except OSError as e:
        return Result.err(ConfigError(f"Could not create data directory: {e}"))


def write_config(config: AppConfig) -> Result[Path]:
    """Write config.json to the config's data directory."""
    dir_result = ensure_data_dir(config.data_dir)
    if dir_result.is_err():
        return Result.err(dir_result.unwrap_err())

    conf_path = config.data_dir / CONFIG_FILENAME
    try:
        conf_path.write_text(json.dumps(config.to_dict(), indent=2))
        return Result.ok(conf_path)
    except OSError as e:
        return Result.err(ConfigError(f"Could not write {CONFIG_FILENAME}: {e}"))
