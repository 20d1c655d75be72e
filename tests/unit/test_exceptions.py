"""Unit tests for domain exceptions."""

import pytest

from rowguard.domain.exceptions import (
    MalformedRules,
    NotFound,
    PermissionDenied,
    QueryConfigurationError,
    RowGuardError,
    ValidationError,
)


@pytest.mark.parametrize(
    "exc",
    [PermissionDenied, NotFound, ValidationError, QueryConfigurationError, MalformedRules],
)
def test_inherits_rowguard_error(exc) -> None:
    assert issubclass(exc, RowGuardError)


def test_raise_not_found_catchable_as_rowguard_error() -> None:
    """NotFound can be caught as RowGuardError."""
    with pytest.raises(RowGuardError):
        raise NotFound("Article", "123")


def test_exception_message_preserved() -> None:
    """Exception message is preserved when raised."""
    msg = "User cannot update Article"
    with pytest.raises(PermissionDenied, match=msg):
        raise PermissionDenied(msg)
