# sitemeta/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all core-domain exceptions."""


# ---- Validation / construction errors ----
class InvalidSpan(CoreError):
    """Raised when a Span is constructed with invalid bounds."""


class InvalidRecord(CoreError):
    """Raised when a metadata record is constructed with invalid inputs."""


class InvalidRegistry(CoreError):
    """Raised when a registry snapshot is built from invalid record lists."""
