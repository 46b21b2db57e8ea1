"""Exception handling module."""

from shoal.core.exceptions.base import (
    AuthenticationError,
    ConfigurationError,
    DataValidationError,
    NetworkError,
    ShoalError,
    SnapshotError,
    UpstreamError,
)
from shoal.core.exceptions.codes import ErrorCode
from shoal.core.exceptions.domain import DomainError

__all__ = [
    "ShoalError",
    "UpstreamError",
    "AuthenticationError",
    "NetworkError",
    "DataValidationError",
    "ConfigurationError",
    "SnapshotError",
    "DomainError",
    "ErrorCode",
]
