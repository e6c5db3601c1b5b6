"""
Repository Layer Package.

============================================================
PURPOSE
============================================================
The Repository Layer is the ONLY gateway to the Record Store.
All database access MUST go through repository classes.

============================================================
ARCHITECTURE PRINCIPLES
============================================================
1. One repository per entity type
2. Session Injection: Sessions are injected, not created internally
3. Deterministic string keys, never generated ids
4. Write-once entities refuse overwrites (ImmutableRecordError)
5. All DB errors wrapped in repository exceptions

============================================================
USAGE
============================================================

    from database.engine import transaction_scope
    from storage.repositories import AgentRepository
    
    with transaction_scope() as session:
        agent = AgentRepository(session).get("11155111:7")

============================================================
"""

from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import (
    ConnectionError,
    DuplicateRecordError,
    ImmutableRecordError,
    IntegrityError,
    QueryError,
    RepositoryException,
)
from storage.repositories.files import FeedbackFileRepository, RegistrationFileRepository
from storage.repositories.identity import AgentMetadataRepository, AgentRepository
from storage.repositories.reputation import FeedbackRepository, FeedbackResponseRepository
from storage.repositories.stats import (
    AgentStatsRepository,
    GlobalStatsRepository,
    ProtocolRepository,
)

__all__ = [
    "RepositoryException",
    "DuplicateRecordError",
    "IntegrityError",
    "ConnectionError",
    "QueryError",
    "ImmutableRecordError",
    "BaseRepository",
    "AgentRepository",
    "AgentMetadataRepository",
    "FeedbackRepository",
    "FeedbackResponseRepository",
    "RegistrationFileRepository",
    "FeedbackFileRepository",
    "AgentStatsRepository",
    "ProtocolRepository",
    "GlobalStatsRepository",
]
