"""
proofspec Custom Exceptions

This module defines all custom exceptions used throughout the engine.
Exceptions are organized by layer/responsibility.
"""

from typing import Any


class ProofSpecError(Exception):
    """Base exception for all proofspec errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(ProofSpecError):
    """Error in declarative configuration."""

    pass


class UnknownCriterionError(ConfigurationError):
    """A proof type references a criterion that is not configured."""

    def __init__(self, name: str):
        super().__init__(f"Unable to find criterion named {name}", {"name": name})


class UnsupportedFieldTypeError(ConfigurationError):
    """Criteria field type is neither select nor text."""

    def __init__(self, field_type: Any):
        super().__init__(
            f"Unrecognized or unsupported criteria field type: {field_type}",
            {"type": str(field_type)},
        )


class DuplicateCriteriaFieldError(ConfigurationError):
    """A criteria field with the same name is already configured."""

    def __init__(self, name: str):
        super().__init__("A criteria field with that name already exists.", {"name": name})


class DuplicateProofTypeError(ConfigurationError):
    """Same proof type registered by code and by configuration."""

    def __init__(self, proof_type: str):
        super().__init__(f"Duplicate proof type: {proof_type}", {"proof_type": proof_type})


class DefinitionNotFoundError(ConfigurationError):
    """Declarative proof type has no definition to load."""

    def __init__(self, proof_type: str, path: str | None = None):
        super().__init__(
            f"No definition found for proof type: {proof_type}",
            {"proof_type": proof_type, "path": path},
        )


# =============================================================================
# TOKEN ERRORS
# =============================================================================


class TokenError(ProofSpecError):
    """Base error for placeholder resolution."""

    pass


class InvalidTokenError(TokenError):
    """Placeholder could not be resolved to an embeddable value."""

    def __init__(self, token: str):
        super().__init__(f"Invalid token: {token}", {"token": token})
        self.token = token


class TokenRecursionError(InvalidTokenError):
    """Placeholders kept producing placeholders past the pass limit."""

    def __init__(self, token: str, max_passes: int):
        super().__init__(token)
        self.message = f"Token resolution exceeded {max_passes} passes at: {token}"
        self.details["max_passes"] = max_passes
        self.max_passes = max_passes


# =============================================================================
# DATA SOURCE ERRORS
# =============================================================================


class DataSourceError(ProofSpecError):
    """Base error for data source results the engine cannot use."""

    pass


class PendingLookupError(DataSourceError):
    """A proof specification lookup did not complete synchronously."""

    def __init__(self, data_set: str):
        super().__init__(
            f"Pending response received for proof specification lookup data set: {data_set}",
            {"data_set": data_set},
        )


class PendingCriteriaDataError(DataSourceError):
    """A criteria field option fetch did not complete."""

    def __init__(self, data_set: str):
        super().__init__(
            f"Pending response received for criteria field data set: {data_set}",
            {"data_set": data_set},
        )


class InvalidDataSetError(DataSourceError):
    """Data returned for a criteria field is not a sequence."""

    def __init__(self, data_set: str):
        super().__init__(f"Invalid criteria field data set: {data_set}", {"data_set": data_set})


class PaginationLimitError(DataSourceError):
    """Data source kept returning page cursors past the configured limit."""

    def __init__(self, data_set: str, max_pages: int):
        super().__init__(
            f"Data set {data_set} exceeded {max_pages} pages",
            {"data_set": data_set, "max_pages": max_pages},
        )


# =============================================================================
# REQUEST ERRORS
# =============================================================================


class RequestError(ProofSpecError):
    """Client-facing error, recoverable by correcting the request."""

    status_code: int = 400


class UnknownProofTypeError(RequestError):
    """Requested proof type is not registered."""

    def __init__(self, proof_type: str):
        super().__init__(
            f"Unrecognized Hypersync proof type: {proof_type}", {"proof_type": proof_type}
        )


class ProofTypeMismatchError(RequestError):
    """Criteria name a different proof type than the provider serves."""

    def __init__(self, expected: str, received: str):
        super().__init__(
            f"Proof type mismatch, expected: {expected}, received: {received}",
            {"expected": expected, "received": received},
        )
