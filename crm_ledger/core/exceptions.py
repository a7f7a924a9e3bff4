"""Custom exceptions for the CRM ledger application."""


class LedgerException(Exception):
    """Base exception for the ledger application."""

    status_code = 500


class ValidationError(LedgerException):
    """Raised when request data or a ledger rule is violated."""

    status_code = 400


class NotFoundError(LedgerException):
    """Raised when a referenced resource is not found."""

    status_code = 404


class ForbiddenError(LedgerException):
    """Raised when a resource belongs to another company."""

    status_code = 403


class PersistenceError(LedgerException):
    """Raised when a database operation fails."""

    status_code = 500


class ConfigurationError(LedgerException):
    """Raised when configuration is invalid."""
