"""
Off-chain File Repositories.

============================================================
PURPOSE
============================================================
Write-once storage for parsed off-chain files. Only the
off-chain completion handlers use these; they never touch the
identity or reputation tables.

Looking up a link key whose file never arrived returns None,
which is a normal state, not an error.

============================================================
"""

from typing import Generic, Type, TypeVar, Union

from sqlalchemy.orm import Session

from storage.models.files import AgentRegistrationFile, FeedbackFile
from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import ImmutableRecordError


F = TypeVar("F", AgentRegistrationFile, FeedbackFile)


class _WriteOnceFileRepository(BaseRepository[F], Generic[F]):
    
    def __init__(self, session: Session, model_class: Type[F], repository_name: str):
        super().__init__(session, model_class, repository_name)
    
    def create_once(self, record: F) -> F:
        """
        Insert a parsed file.
        
        Raises:
            ImmutableRecordError: If a file with this key was already stored
        """
        if self.exists(record.id):
            raise ImmutableRecordError(
                repository_name=self._repository_name,
                record_id=record.id,
                attempted_operation="overwrite",
            )
        return self.add(record)


class RegistrationFileRepository(_WriteOnceFileRepository[AgentRegistrationFile]):
    
    def __init__(self, session: Session):
        super().__init__(session, AgentRegistrationFile, "RegistrationFileRepository")


class FeedbackFileRepository(_WriteOnceFileRepository[FeedbackFile]):
    
    def __init__(self, session: Session):
        super().__init__(session, FeedbackFile, "FeedbackFileRepository")


FileRepository = Union[RegistrationFileRepository, FeedbackFileRepository]
