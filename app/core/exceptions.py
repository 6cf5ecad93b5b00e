"""Custom exceptions for the field-services backend."""


class FieldOpsException(Exception):
    """Base exception for the application."""

    pass


class ValidationError(FieldOpsException):
    """Raised when validation fails."""

    pass


class NotFoundError(FieldOpsException):
    """Raised when a resource is not found."""

    pass


class ConversionError(FieldOpsException):
    """Raised when a lead cannot be converted into a customer record."""

    pass


class ConfigurationError(FieldOpsException):
    """Raised when configuration is invalid."""

    pass
