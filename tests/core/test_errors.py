"""Tests for the domain error taxonomy."""

import pytest

from src.core.errors import (
    AuthenticationRequiredError,
    ConflictError,
    DomainError,
    InvalidNestingError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationError,
    status_for_error,
)


@pytest.mark.parametrize(
    "error,expected_status",
    [
        (ValidationError(), 400),
        (InvalidNestingError(), 400),
        (AuthenticationRequiredError(), 401),
        (PermissionDeniedError(), 403),
        (NotFoundError(), 404),
        (ConflictError(), 409),
        (RateLimitExceededError(), 429),
    ],
)
def test_status_for_error(error: DomainError, expected_status: int) -> None:
    assert status_for_error(error) == expected_status


def test_unmapped_code_is_server_error() -> None:
    assert status_for_error(DomainError("boom")) == 500


def test_custom_code_overrides_class_code() -> None:
    error = DomainError("gone", code="not_found")
    assert error.code == "not_found"
    assert status_for_error(error) == 404


def test_default_messages() -> None:
    assert InvalidNestingError().message == "Replies cannot be replied to"
    assert NotFoundError("Item not found").message == "Item not found"
