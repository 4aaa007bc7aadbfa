"""PIN storage and verification.

The PIN is never stored. A PBKDF2-HMAC-SHA256 hash with a random salt is
kept for verification. The random database key is sealed with AES-256-GCM
under a second PBKDF2 derivation of the PIN, so only a correct PIN opens it.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import platform
import secrets
import string
from pathlib import Path
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .config import PBKDF2_ITERATIONS, PIN_LENGTH
from .errors import (
    InvalidLengthError,
    PinFormatError,
    StateError,
    StorageError,
    UnlockRejectedError,
)
from .types import Result

logger = logging.getLogger("delt.security")

KEY_SIZE = 32
SALT_SIZE = 32
NONCE_SIZE = 12

_KEY_PIN_SALT = "pin_salt"
_KEY_PIN_HASH = "pin_hash"
_KEY_DB_KEY = "db_key"
_KEY_KEY_SALT = "key_salt"
_KEY_KEY_NONCE = "key_nonce"

_REQUIRED_KEYS = (_KEY_PIN_SALT, _KEY_PIN_HASH, _KEY_KEY_SALT, _KEY_KEY_NONCE, _KEY_DB_KEY)


def validate_pin(pin: str, length: int = PIN_LENGTH) -> Result[str]:
    """Check that ``pin`` is exactly ``length`` digits."""
    if pin and not all(c in string.digits for c in pin):
        return Result.err(PinFormatError())
    if len(pin) != length:
        return Result.err(InvalidLengthError(length, len(pin)))
    return Result.ok(pin)


def hash_pin(pin: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", pin.encode("utf-8"), salt, iterations, dklen=KEY_SIZE)


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


class SecurityManager:
    """Handles PIN setup, verification and the database key."""

    def __init__(
        self,
        store_path: Path | str,
        iterations: int = PBKDF2_ITERATIONS,
        pin_length: int = PIN_LENGTH,
    ) -> None:
        if store_path == ":memory:":
            self._store_path: Path | None = None
        else:
            self._store_path = Path(store_path)
        self._memory: dict[str, str] = {}
        self._iterations = iterations
        self._pin_length = pin_length

    @property
    def store_path(self) -> Path | None:
        return self._store_path

    def _read(self) -> dict[str, str]:
        if self._store_path is None:
            return dict(self._memory)
        if not self._store_path.exists():
            return {}
        try:
            data: Any = json.loads(self._store_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                f"Failed to read credential store: {e}", path=self._store_path, cause=e
            ) from e
        if not isinstance(data, dict):
            raise StorageError("Credential store is corrupted", path=self._store_path)
        return data

    def _write(self, data: dict[str, str]) -> None:
        if self._store_path is None:
            self._memory = dict(data)
            return
        try:
            self._store_path.parent.mkdir(parents=True, exist_ok=True)
            self._store_path.write_text(json.dumps(data, indent=2))
            if platform.system() != "Windows":
                self._store_path.chmod(0o600)
        except OSError as e:
            raise StorageError(
                f"Failed to write credential store: {e}", path=self._store_path, cause=e
            ) from e

    def is_pin_setup(self) -> bool:
        try:
            data = self._read()
        except StorageError:
            return False
        return all(key in data for key in _REQUIRED_KEYS)

    def setup_pin(self, pin: str) -> Result[None]:
        """Store a new PIN hash and generate a fresh database key."""
        valid = validate_pin(pin, self._pin_length)
        if valid.is_err():
            return Result.err(valid.unwrap_err())

        salt = secrets.token_bytes(SALT_SIZE)
        db_key = secrets.token_bytes(KEY_SIZE)
        try:
            self._store(pin, salt, db_key)
        except StorageError as e:
            logger.error("PIN setup failed: %s", e)
            return Result.err(e)

        logger.info("PIN set up")
        return Result.ok(None)

    def _store(self, pin: str, salt: bytes, db_key: bytes) -> None:
        key_salt = secrets.token_bytes(SALT_SIZE)
        nonce = secrets.token_bytes(NONCE_SIZE)
        wrapping_key = hash_pin(pin, key_salt, self._iterations)
        sealed = AESGCM(wrapping_key).encrypt(nonce, db_key, None)
        self._write(
            {
                _KEY_PIN_SALT: _b64(salt),
                _KEY_PIN_HASH: _b64(hash_pin(pin, salt, self._iterations)),
                _KEY_KEY_SALT: _b64(key_salt),
                _KEY_KEY_NONCE: _b64(nonce),
                _KEY_DB_KEY: _b64(sealed),
            }
        )

    def _verify(self, pin: str) -> Result[bytes]:
        try:
            data = self._read()
        except StorageError as e:
            return Result.err(e)

        if not all(key in data for key in _REQUIRED_KEYS):
            return Result.err(StateError("No PIN has been set up", current_state="setup"))

        try:
            salt = base64.b64decode(data[_KEY_PIN_SALT])
            stored_hash = base64.b64decode(data[_KEY_PIN_HASH])
            key_salt = base64.b64decode(data[_KEY_KEY_SALT])
            nonce = base64.b64decode(data[_KEY_KEY_NONCE])
            sealed = base64.b64decode(data[_KEY_DB_KEY])
        except ValueError as e:
            return Result.err(StorageError("Credential store is corrupted", cause=e))

        entered_hash = hash_pin(pin, salt, self._iterations)
        if not hmac.compare_digest(entered_hash, stored_hash):
            return Result.err(UnlockRejectedError("Incorrect PIN"))

        wrapping_key = hash_pin(pin, key_salt, self._iterations)
        try:
            db_key = AESGCM(wrapping_key).decrypt(nonce, sealed, None)
        except (InvalidTag, ValueError) as e:
            return Result.err(
                StorageError("Database key could not be decrypted", path=self._store_path, cause=e)
            )

        return Result.ok(db_key)

    def unlock_with_pin(self, pin: str) -> Result[str]:
        """Verify ``pin`` and return the database key as a hex string."""
        return self._verify(pin).map(lambda key: key.hex())

    def change_pin(self, old_pin: str, new_pin: str) -> Result[None]:
        """Replace the PIN, keeping the same database key."""
        valid = validate_pin(new_pin, self._pin_length)
        if valid.is_err():
            return Result.err(valid.unwrap_err())
        if new_pin == old_pin:
            return Result.err(PinFormatError("New PIN must be different from current PIN"))

        verified = self._verify(old_pin)
        if verified.is_err():
            return Result.err(verified.unwrap_err())

        try:
            self._store(new_pin, secrets.token_bytes(SALT_SIZE), verified.unwrap())
        except StorageError as e:
            return Result.err(e)

        logger.info("PIN changed")
        return Result.ok(None)

    def clear_all_data(self) -> Result[None]:
        """Remove all stored credentials. The database key is lost."""
        if self._store_path is None:
            self._memory = {}
            return Result.ok(None)
        try:
            self._store_path.unlink(missing_ok=True)
        except OSError as e:
            return Result.err(StorageError(f"Failed to remove credential store: {e}", cause=e))
        logger.warning("Credential store cleared")
        return Result.ok(None)
