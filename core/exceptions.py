"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the custom exception hierarchy for the indexer.

- Provides clear exception hierarchy
- Supports error categorization for logging
- Includes context for debugging

None of these are fatal to the replay stream: the event
processor catches them, logs, and moves on to the next event.

============================================================
EXCEPTION HIERARCHY
============================================================
IndexerException (base)
├── ConfigurationError
│   └── InvalidConfigError
├── EventDecodingError
├── ChainNotSupportedError
└── MalformedPayloadError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels for logging."""
    
    LOW = "low"
    """Minor issue, informational."""
    
    MEDIUM = "medium"
    """Moderate issue, requires attention."""
    
    HIGH = "high"
    """Serious issue, indexed state may be incomplete."""


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

class ErrorClassification(Enum):
    """Classification of error recoverability."""
    
    RECOVERABLE = "recoverable"
    """Event is skipped, processing continues."""
    
    TRANSIENT = "transient"
    """Temporary error, a later replay may succeed."""
    
    NON_RECOVERABLE = "non_recoverable"
    """Permanent error, requires operator intervention."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class IndexerException(Exception):
    """
    Base exception for all indexer errors.
    
    All exceptions carry:
    - severity: for log level selection
    - context: for debugging
    - classification: for error handling decisions
    - timestamp: when the error occurred
    """
    
    default_severity: Severity = Severity.MEDIUM
    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE
    
    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        
        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.classification = classification or self.default_classification
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)
        
        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)
    
    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }
    
    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        line = f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
        if ctx_str:
            line += f" | {ctx_str}"
        return line


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(IndexerException):
    """Error in configuration."""
    
    default_severity = Severity.HIGH
    default_classification = ErrorClassification.NON_RECOVERABLE
    
    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        
        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]
        
        super().__init__(message, context=context, **kwargs)


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid."""
    
    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for {key}: {reason}",
            config_key=key,
            actual_value=value,
            context={"reason": reason},
        )


# ============================================================
# EVENT / PAYLOAD ERRORS
# ============================================================

class EventDecodingError(IndexerException):
    """A raw event record could not be turned into a typed event."""
    
    def __init__(self, message: str, event_name: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if event_name:
            context["event_name"] = event_name
        super().__init__(message, context=context, **kwargs)


class ChainNotSupportedError(IndexerException):
    """Chain identifier is not in the supported set."""
    
    default_severity = Severity.LOW
    
    def __init__(self, chain_id: int):
        super().__init__(
            message=f"Unsupported chain: {chain_id}",
            context={"chain_id": chain_id},
        )
        self.chain_id = chain_id


class MalformedPayloadError(IndexerException):
    """Off-chain bytes are not a JSON object."""
    
    def __init__(self, file_id: str, reason: str):
        super().__init__(
            message=f"Malformed off-chain payload for {file_id}: {reason}",
            context={"file_id": file_id, "reason": reason},
        )
        self.file_id = file_id
        self.reason = reason
