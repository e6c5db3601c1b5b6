"""
Base Repository Class.

============================================================
PURPOSE
============================================================
Provides the Record Store operations shared by every entity:
load by key, create, save (update) and existence checks.

- Session is injected, never created here
- Every SQLAlchemy error is wrapped in a repository exception
- Every entity is addressed by a deterministic string key

============================================================
USAGE
============================================================
    class AgentRepository(BaseRepository[Agent]):
        def __init__(self, session: Session):
            super().__init__(session, Agent, "AgentRepository")

============================================================
"""

import logging
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.exc import (
    IntegrityError as SQLAlchemyIntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session

from storage.models.base import Base
from storage.repositories.exceptions import (
    ConnectionError,
    DuplicateRecordError,
    IntegrityError,
    QueryError,
)


# Type variable for ORM model
T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Common Record Store operations for one ORM model.
    
    ============================================================
    RESPONSIBILITIES
    ============================================================
    - load / create / save by string key
    - Wraps database errors in repository exceptions
    - Logs every write at debug level
    
    Commit is the caller's responsibility: one event is one
    transaction, owned by the event processor.
    
    ============================================================
    """
    
    def __init__(
        self,
        session: Session,
        model_class: Type[T],
        repository_name: str
    ) -> None:
        """
        Initialize the repository.
        
        Args:
            session: SQLAlchemy session (injected)
            model_class: The ORM model class this repository manages
            repository_name: Name for logging and error messages
        """
        self._session = session
        self._model_class = model_class
        self._repository_name = repository_name
        self._logger = logging.getLogger(f"repository.{repository_name}")
    
    # =========================================================
    # RECORD STORE OPERATIONS
    # =========================================================
    
    def get(self, key: str) -> Optional[T]:
        """
        Load an entity by key.
        
        Returns:
            The entity or None if not found
        """
        try:
            return self._session.get(self._model_class, key)
        except SQLAlchemyError as e:
            self._handle_db_error(e, "get", {"id": key})
            raise
    
    def exists(self, key: str) -> bool:
        return self.get(key) is not None
    
    def add(self, entity: T) -> T:
        """
        Insert a new entity and flush.
        
        Raises:
            DuplicateRecordError: If the key is already taken
        """
        try:
            self._session.add(entity)
            self._session.flush()
            self._logger.debug(f"Added entity: {entity!r}")
            return entity
        except SQLAlchemyError as e:
            self._handle_db_error(e, "add", {"entity": repr(entity)})
            raise
    
    def save(self, entity: T) -> T:
        """Persist changes to a loaded (or new) entity and flush."""
        try:
            self._session.add(entity)
            self._session.flush()
            self._logger.debug(f"Saved entity: {entity!r}")
            return entity
        except SQLAlchemyError as e:
            self._handle_db_error(e, "save", {"entity": repr(entity)})
            raise
    
    # =========================================================
    # PROTECTED HELPER METHODS
    # =========================================================
    
    def _handle_db_error(
        self,
        error: Exception,
        operation: str,
        context: Optional[dict] = None
    ) -> None:
        """
        Wrap a database error in a repository exception.
        
        Raises:
            RepositoryException: Always raises appropriate exception
        """
        context = context or {}
        self._logger.error(
            f"Database error in {operation}: {error}",
            extra={"context": context},
            exc_info=True
        )
        
        if isinstance(error, OperationalError):
            raise ConnectionError(
                repository_name=self._repository_name,
                operation=operation,
                original_error=str(error)
            ) from error
        
        if isinstance(error, SQLAlchemyIntegrityError):
            error_str = str(error).lower()
            if "duplicate" in error_str or "unique" in error_str:
                raise DuplicateRecordError(
                    repository_name=self._repository_name,
                    record_id=context.get("id") or context.get("entity", "unknown"),
                ) from error
            
            raise IntegrityError(
                repository_name=self._repository_name,
                operation=operation,
                message=str(error)
            ) from error
        
        raise QueryError(
            repository_name=self._repository_name,
            operation=operation,
            original_error=str(error)
        ) from error
