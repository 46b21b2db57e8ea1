"""Domain-level error hierarchy definitions."""

from __future__ import annotations

from typing import Any, Mapping

from shoal.core.exceptions.base import ShoalError
from shoal.core.exceptions.codes import ErrorCode


class DomainError(ShoalError):
    """Error carrying a standardised code, originating layer and retry hint."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        layer: str,
        retryable: bool = False,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        payload = dict(context or {})
        details = {**payload, "layer": layer, "retryable": retryable}
        super().__init__(message, code.value, details)
        self.code = code
        self.layer = layer
        self.retryable = retryable
        self.context = payload

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {
            "code": self.code.value,
            "message": self.message,
            "layer": self.layer,
            "retryable": self.retryable,
            "context": dict(self.context),
        }

    @classmethod
    def from_error(cls, error: ShoalError, *, layer: str) -> DomainError:
        """Wrap a typed shoal error into its domain category."""

        code = _CODE_BY_TYPE.get(type(error).__name__, ErrorCode.SYSTEM)
        retryable = code is ErrorCode.UPSTREAM and error.error_code == "NETWORK_ERROR"
        return cls(error.message, code, layer=layer, retryable=retryable, context=error.details)


_CODE_BY_TYPE: dict[str, ErrorCode] = {
    "UpstreamError": ErrorCode.UPSTREAM,
    "NetworkError": ErrorCode.UPSTREAM,
    "AuthenticationError": ErrorCode.UPSTREAM,
    "DataValidationError": ErrorCode.VALIDATION,
    "ConfigurationError": ErrorCode.CONFIGURATION,
    "SnapshotError": ErrorCode.STORAGE,
}
