"""
Repository Layer Exceptions.

============================================================
PURPOSE
============================================================
Repository-specific exceptions. All SQLAlchemy errors are
caught inside the repository layer and re-raised as one of
these, with the entity key and operation attached.

The event processor is the only caller that catches them;
handlers let them propagate so the per-event transaction is
rolled back as a whole.

============================================================
"""

from typing import Any, Optional


class RepositoryException(Exception):
    """Base exception for all repository operations."""
    
    def __init__(
        self,
        message: str,
        repository_name: str,
        operation: str,
        details: Optional[dict] = None
    ) -> None:
        self.message = message
        self.repository_name = repository_name
        self.operation = operation
        self.details = details or {}
        super().__init__(self._format_message())
    
    def _format_message(self) -> str:
        return f"[{self.repository_name}] {self.operation}: {self.message}"


class DuplicateRecordError(RepositoryException):
    """Raised when a unique constraint is violated on insert."""
    
    def __init__(self, repository_name: str, record_id: Any) -> None:
        super().__init__(
            message=f"Duplicate record: {record_id} already exists",
            repository_name=repository_name,
            operation="create",
            details={"id": str(record_id)}
        )
        self.record_id = record_id


class ConnectionError(RepositoryException):
    """Raised when the database connection fails."""
    
    def __init__(self, repository_name: str, operation: str, original_error: str) -> None:
        super().__init__(
            message=f"Database connection failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": original_error}
        )


class QueryError(RepositoryException):
    """Raised when statement execution fails for any other reason."""
    
    def __init__(self, repository_name: str, operation: str, original_error: str) -> None:
        super().__init__(
            message=f"Query failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": original_error}
        )


class ImmutableRecordError(RepositoryException):
    """Raised when a write targets a write-once record that already exists."""
    
    def __init__(
        self,
        repository_name: str,
        record_id: Any,
        attempted_operation: str
    ) -> None:
        super().__init__(
            message=f"Cannot {attempted_operation} immutable record {record_id}",
            repository_name=repository_name,
            operation=attempted_operation,
            details={"record_id": str(record_id)}
        )
        self.record_id = record_id
        self.attempted_operation = attempted_operation


class IntegrityError(RepositoryException):
    """Raised when a non-unique integrity constraint is violated."""
    
    def __init__(self, repository_name: str, operation: str, message: str) -> None:
        super().__init__(
            message=f"Integrity constraint violated: {message}",
            repository_name=repository_name,
            operation=operation,
        )
