"""Standardised error codes shared across layers."""

from enum import Enum


class ErrorCode(str, Enum):
    """Top level error categories."""

    VALIDATION = "VALIDATION"
    UPSTREAM = "UPSTREAM"
    CONFIGURATION = "CONFIGURATION"
    STORAGE = "STORAGE"
    SYSTEM = "SYSTEM"


__all__ = ["ErrorCode"]
