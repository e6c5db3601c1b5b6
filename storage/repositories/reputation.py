"""
Reputation Repositories.

============================================================
REPOSITORIES
============================================================
- FeedbackRepository: Feedback (only revocation state changes)
- FeedbackResponseRepository: Responses (IMMUTABLE)

============================================================
"""

from sqlalchemy.orm import Session

from storage.models.reputation import Feedback, FeedbackResponse
from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import ImmutableRecordError


class FeedbackRepository(BaseRepository[Feedback]):
    """Feedback entries. Never deletes."""
    
    def __init__(self, session: Session):
        super().__init__(session, Feedback, "FeedbackRepository")
    
    def mark_revoked(self, feedback: Feedback, timestamp: int) -> Feedback:
        feedback.is_revoked = True
        feedback.revoked_at = timestamp
        return self.save(feedback)


class FeedbackResponseRepository(BaseRepository[FeedbackResponse]):
    """Feedback responses. Write-once."""
    
    def __init__(self, session: Session):
        super().__init__(session, FeedbackResponse, "FeedbackResponseRepository")
    
    def create_once(self, response: FeedbackResponse) -> FeedbackResponse:
        """
        Insert a response.
        
        Raises:
            ImmutableRecordError: If a response with this key exists
        """
        if self.exists(response.id):
            raise ImmutableRecordError(
                repository_name=self._repository_name,
                record_id=response.id,
                attempted_operation="overwrite",
            )
        return self.add(response)
