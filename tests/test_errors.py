"""Tests for privacy_guard.utils.errors — error types and message extraction."""

from __future__ import annotations

from privacy_guard.utils import errors
from privacy_guard.utils.errors import get_error_message


class TestGetErrorMessage:
    """Tests for get_error_message()."""

    def test_exception_with_message(self) -> None:
        assert get_error_message(ValueError("something broke")) == "something broke"

    def test_exception_without_message(self) -> None:
        assert get_error_message(ValueError()) == "ValueError"

    def test_timeout_without_message(self) -> None:
        assert get_error_message(TimeoutError()) == "TimeoutError"

    def test_non_exception(self) -> None:
        assert get_error_message("oops") == "Unknown error"


class TestInvalidDomainError:
    def test_carries_entries(self) -> None:
        exc = errors.InvalidDomainError(["bad domain", "x"])
        assert exc.entries == ["bad domain", "x"]
        assert str(exc) == "Invalid domain entries: bad domain, x"

    def test_is_value_error(self) -> None:
        assert isinstance(errors.InvalidDomainError([]), ValueError)
        assert isinstance(errors.InvalidDomainError([]), errors.PrivacyGuardError)

    def test_catalog_load_error_hierarchy(self) -> None:
        assert issubclass(errors.CatalogLoadError, errors.PrivacyGuardError)
