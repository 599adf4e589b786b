"""Tests for the store retry decorator.

Verifies that:
- transient OSErrors are retried up to three attempts
- missing paths and permission errors fail immediately
- the last exception is re-raised rather than wrapped in RetryError
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from portable_blocks.utils.retry import _is_transient_io_error, store_retry


class TestRetryPredicate:
    """Tests for _is_transient_io_error()."""

    def test_plain_os_error_is_transient(self) -> None:
        assert _is_transient_io_error(OSError("busy")) is True

    def test_timeout_is_transient(self) -> None:
        assert _is_transient_io_error(TimeoutError()) is True

    @pytest.mark.parametrize(
        "exc",
        [
            FileNotFoundError(),
            PermissionError(),
            IsADirectoryError(),
            NotADirectoryError(),
            ValueError("bad"),
        ],
    )
    def test_permanent_errors(self, exc: BaseException) -> None:
        assert _is_transient_io_error(exc) is False


class TestStoreRetryDecorator:
    """Tests for the store_retry decorator."""

    def test_retries_then_succeeds(self) -> None:
        call_count = 0

        @store_retry
        def flaky_read() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise OSError("temporarily unavailable")
            return "data"

        with patch("time.sleep") as mock_sleep:
            assert flaky_read() == "data"

        assert call_count == 3
        assert mock_sleep.call_count == 2

    def test_reraises_after_max_attempts(self) -> None:
        call_count = 0

        @store_retry
        def always_fails() -> None:
            nonlocal call_count
            call_count += 1
            raise OSError("still busy")

        with patch("time.sleep"), pytest.raises(OSError, match="still busy"):
            always_fails()
        assert call_count == 3

    def test_does_not_retry_missing_file(self) -> None:
        call_count = 0

        @store_retry
        def missing() -> None:
            nonlocal call_count
            call_count += 1
            raise FileNotFoundError("gone")

        with pytest.raises(FileNotFoundError):
            missing()
        assert call_count == 1
