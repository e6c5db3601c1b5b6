"""
Identity Repositories.

============================================================
REPOSITORIES
============================================================
- AgentRepository: Agent identities (updated forward only)
- AgentMetadataRepository: Agent key/value metadata (upsert)

============================================================
"""

from sqlalchemy.orm import Session

from storage.models.identity import Agent, AgentMetadata
from storage.repositories.base import BaseRepository


class AgentRepository(BaseRepository[Agent]):
    """Agent identities. Never deletes."""
    
    def __init__(self, session: Session):
        super().__init__(session, Agent, "AgentRepository")
    
    def create_agent(
        self,
        key: str,
        chain_id: int,
        agent_id: int,
        owner: str,
        timestamp: int,
    ) -> Agent:
        """Build a fresh Agent with zeroed counters and no operators (not yet flushed)."""
        agent = Agent(
            id=key,
            chain_id=chain_id,
            agent_id=agent_id,
            owner=owner,
            agent_uri=None,
            agent_uri_type="unknown",
            operators=[],
            total_feedback=0,
            last_activity=timestamp,
            registration_file=None,
            created_at=timestamp,
            updated_at=timestamp,
        )
        self._logger.debug(f"Creating agent {key}")
        return agent


class AgentMetadataRepository(BaseRepository[AgentMetadata]):
    """Agent metadata attributes. Writing an existing key overwrites it."""
    
    def __init__(self, session: Session):
        super().__init__(session, AgentMetadata, "AgentMetadataRepository")
    
    def upsert(
        self,
        key: str,
        agent_key: str,
        metadata_key: str,
        value: bytes,
        timestamp: int,
    ) -> AgentMetadata:
        metadata = self.get(key)
        if metadata is None:
            metadata = AgentMetadata(id=key, agent_key=agent_key, key=metadata_key)
        metadata.value = value
        metadata.updated_at = timestamp
        return self.save(metadata)
