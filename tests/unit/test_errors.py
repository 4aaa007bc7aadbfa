"""Tests for structured errors and the error logger."""

from __future__ import annotations

from pathlib import Path

from delt.errors import (
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


class TestRecoveryHint:
    def test_str_without_command(self) -> None:
        assert str(RecoveryHint("Try again")) == "Try again"

    def test_str_with_command(self) -> None:
        hint = RecoveryHint("Set a PIN", command="delt setup-pin")
        assert str(hint) == "Set a PIN\n  Command: delt setup-pin"


class TestDeltError:
    def test_str_is_message(self) -> None:
        error = DeltError(message="boom", category=ErrorCategory.INTERNAL)
        assert str(error) == "boom"

    def test_format_full(self) -> None:
        error = DeltError(
            message="boom",
            category=ErrorCategory.INTERNAL,
            recovery_hints=[RecoveryHint("Restart")],
            cause=OSError("disk"),
        )
        text = error.format_full()
        assert "Error: boom" in text
        assert "Caused by: disk" in text
        assert "1. Restart" in text


class TestConcreteErrors:
    def test_invalid_length(self) -> None:
        error = InvalidLengthError(6, 5)
        assert error.message == "PIN must be 6 digits"
        assert error.category == ErrorCategory.USER_INPUT
        assert error.expected == 6
        assert error.actual == 5

    def test_pin_format_default_message(self) -> None:
        assert PinFormatError().message == "PIN must contain only digits"

    def test_unlock_rejected_keeps_message(self) -> None:
        error = UnlockRejectedError("Wrong PIN")
        assert str(error) == "Wrong PIN"
        assert error.category == ErrorCategory.AUTHENTICATION

    def test_submission_blocked_reason(self) -> None:
        error = SubmissionBlockedError("Too many attempts. Please wait.", reason="locked")
        assert error.reason == "locked"
        assert error.category == ErrorCategory.STATE

    def test_state_error_hints(self) -> None:
        error = StateError("No PIN has been set up", current_state="setup")
        commands = [h.command for h in error.recovery_hints]
        assert "delt status" in commands

    def test_storage_error_path_hint(self, tmp_path: Path) -> None:
        error = StorageError("Failed", path=tmp_path / "x.json")
        assert str(tmp_path / "x.json") in str(error.recovery_hints[0])

    def test_errors_are_exceptions(self) -> None:
        assert isinstance(UnlockRejectedError(), Exception)


class TestWrapException:
    def test_passes_delt_errors_through(self) -> None:
        error = PinFormatError()
        assert wrap_exception(error) is error

    def test_wraps_generic(self) -> None:
        cause = OSError("no space")
        wrapped = wrap_exception(cause, ErrorCategory.STORAGE)
        assert wrapped.message == "no space"
        assert wrapped.category == ErrorCategory.STORAGE
        assert wrapped.cause is cause

    def test_empty_message_uses_type_name(self) -> None:
        assert wrap_exception(RuntimeError()).message == "RuntimeError"


class TestErrorLogger:
    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        log_path = tmp_path / "logs" / "errors.log"
        ErrorLogger(log_path)
        assert log_path.parent.is_dir()

    def test_log_error_written(self, tmp_path: Path) -> None:
        error_logger = ErrorLogger(tmp_path / "errors.log")
        error_logger.log_error(StorageError("Store unreadable"))

        entries = error_logger.get_recent_errors()
        assert any("[STORAGE] Store unreadable" in line for line in entries)

    def test_log_warning_written(self, tmp_path: Path) -> None:
        error_logger = ErrorLogger(tmp_path / "errors.log")
        error_logger.log_warning("Locked out", ErrorCategory.AUTHENTICATION)

        entries = error_logger.get_recent_errors()
        assert any("[AUTHENTICATION] Locked out" in line for line in entries)

    def test_no_log_file_yet(self, tmp_path: Path) -> None:
        error_logger = ErrorLogger(tmp_path / "errors.log")
        assert error_logger.get_recent_errors() == []

    def test_handler_added_once_per_path(self, tmp_path: Path) -> None:
        log_path = tmp_path / "errors.log"
        first = ErrorLogger(log_path)
        ErrorLogger(log_path)
        first.log_warning("once", ErrorCategory.STATE)

        entries = first.get_recent_errors()
        assert len([line for line in entries if "once" in line]) == 1
