"""
Off-chain Fetch Exceptions.

Raised by gateway fetchers and caught by the fetch worker; a
failed fetch only means the parsed record never appears.
"""

from datetime import datetime, timezone
from typing import Any, Optional


class OffchainFetchError(Exception):
    """Error while retrieving an off-chain payload."""
    
    def __init__(
        self,
        message: str,
        content_id: Optional[str] = None,
        backend: Optional[str] = None,
        status_code: Optional[int] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.content_id = content_id
        self.backend = backend
        self.status_code = status_code
        self.request_url = request_url
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "content_id": self.content_id,
            "backend": self.backend,
            "status_code": self.status_code,
            "request_url": self.request_url,
            "original_error": str(self.original_error) if self.original_error else None,
            "timestamp": self.timestamp.isoformat(),
        }
    
    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.backend:
            parts.append(f"[backend={self.backend}]")
        if self.content_id:
            parts.append(f"[cid={self.content_id}]")
        if self.status_code:
            parts.append(f"[status={self.status_code}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class PayloadTooLargeError(OffchainFetchError):
    """Payload exceeded the configured size limit."""
