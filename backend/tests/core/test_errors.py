"""Error Hierarchy — status codes, codes and the response envelope."""

import pytest

from app.core.errors import (
    AuthenticationError, BadRequestError, ConcurrencyError, ConflictError,
    DatabaseError, ErrorCategory, ForbiddenError, InvalidIdentifierError,
    ResourceNotFoundError, StorefrontError,
)


@pytest.mark.parametrize("error, status, code", [
    (BadRequestError("x"), 400, "BAD_REQUEST"),
    (InvalidIdentifierError("Product"), 400, "INVALID_ID"),
    (AuthenticationError(), 401, "UNAUTHORIZED"),
    (ForbiddenError("x"), 403, "FORBIDDEN"),
    (ResourceNotFoundError("x"), 404, "RESOURCE_NOT_FOUND"),
    (ConflictError("x"), 409, "CONFLICT"),
    (ConcurrencyError("x"), 409, "CONCURRENCY_CONFLICT"),
    (DatabaseError("x", "commit"), 500, "DATABASE_ERROR"),
])
def test_status_and_code(error, status, code):
    assert isinstance(error, StorefrontError)
    assert error.http_status == status
    assert error.code == code


def test_invalid_identifier_message_names_resource():
    assert InvalidIdentifierError("Product").message == "Invalid product ID"


def test_response_envelope_shape():
    body = ConflictError("Category already exists").to_response()
    assert body["success"] is False
    assert body["message"] == "Category already exists"
    assert body["error"]["code"] == "CONFLICT"
    assert body["error"]["category"] == ErrorCategory.CONFLICT.value
    assert "timestamp" in body["error"]


def test_database_error_message_names_operation():
    err = DatabaseError("Connection lost", "execute")
    assert err.message == "Database execute failed: Connection lost"
    assert err.operation == "execute"
