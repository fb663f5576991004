"""Unit tests for custom exception classes."""

from pathlib import Path

from rich.console import Console

from projroot import cli_helpers
from projroot.exceptions import (
    ConfigError,
    HistoryError,
    InvalidDetectionMethodError,
    ProjRootError,
    SubmissionError,
)


class TestProjRootError:
    """Tests for base ProjRootError exception."""

    def test_projroot_error_message(self):
        """Test that ProjRootError stores and displays message correctly."""
        error = ProjRootError("Test error message")
        assert str(error) == "Test error message"


class TestConfigError:
    """Tests for ConfigError exception."""

    def test_config_error(self):
        """Test ConfigError with path and message."""
        error = ConfigError(Path("/etc/projroot.yaml"), "bad indent")

        assert error.path == Path("/etc/projroot.yaml")
        assert error.message == "bad indent"
        assert "projroot.yaml" in str(error)
        assert "bad indent" in str(error)
        assert isinstance(error, ProjRootError)


class TestInvalidDetectionMethodError:
    """Tests for InvalidDetectionMethodError exception."""

    def test_invalid_detection_method_error(self):
        """Test InvalidDetectionMethodError with method and valid methods."""
        error = InvalidDetectionMethodError("magic", ["pattern", "lsp"])

        assert error.method == "magic"
        assert error.valid_methods == {"pattern", "lsp"}
        assert "magic" in str(error)
        assert "Valid methods are: lsp, pattern" in str(error)


class TestHistoryError:
    """Tests for HistoryError exception."""

    def test_history_error(self):
        """Test HistoryError with operation, path and message."""
        error = HistoryError("write", Path("/data/project_history"), "Permission denied")

        assert error.operation == "write"
        assert "Failed to write" in str(error)
        assert "Permission denied" in str(error)
        assert isinstance(error, ProjRootError)


class TestSubmissionError:
    """Tests for SubmissionError exception."""

    def test_submission_error(self):
        """Test SubmissionError with start directory and message."""
        error = SubmissionError(Path("/src"), "cannot schedule new futures after shutdown")

        assert error.start_dir == Path("/src")
        assert "/src" in str(error)
        assert "after shutdown" in str(error)
        assert isinstance(error, ProjRootError)

    def test_submission_error_report(self, monkeypatch):
        """Test that the CLI reports a refused job with its own message."""
        console = Console(record=True, width=200)
        monkeypatch.setattr(cli_helpers, "err_console", console)

        cli_helpers.handle_projroot_error(
            SubmissionError(Path("/src"), "cannot schedule new futures after shutdown")
        )

        output = console.export_text()
        assert "Could not start resolution for /src" in output
        assert "refused the job: cannot schedule new futures after shutdown" in output
