from __future__ import annotations


class DomainError(Exception):
    """Base for errors raised by the statement services."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(DomainError, ValueError):
    status_code = 400


class NotFound(DomainError, LookupError):
    status_code = 404


class ConflictViolation(DomainError, ValueError):
    status_code = 409
