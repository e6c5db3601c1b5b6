"""
Core Module Package.

This package contains the core infrastructure components
that all other modules depend on.

Components:
- exceptions: Custom exception hierarchy
- constants: Indexer-wide constants
"""

from core.exceptions import (
    ChainNotSupportedError,
    ConfigurationError,
    ErrorClassification,
    EventDecodingError,
    IndexerException,
    InvalidConfigError,
    MalformedPayloadError,
    Severity,
)

__all__ = [
    "IndexerException",
    "ConfigurationError",
    "InvalidConfigError",
    "EventDecodingError",
    "ChainNotSupportedError",
    "MalformedPayloadError",
    "Severity",
    "ErrorClassification",
]
