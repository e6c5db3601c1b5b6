"""
Aggregation Repositories.

============================================================
REPOSITORIES
============================================================
- AgentStatsRepository: per-agent statistics
- ProtocolRepository: per-chain statistics
- GlobalStatsRepository: cross-chain singleton

Singletons and per-chain records live in the store under
well-known keys and are created lazily on first use.

============================================================
"""

from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from core.constants import GLOBAL_STATS_ID
from storage.models.stats import AgentStats, GlobalStats, Protocol, empty_distribution
from storage.repositories.base import BaseRepository


class AgentStatsRepository(BaseRepository[AgentStats]):
    
    def __init__(self, session: Session):
        super().__init__(session, AgentStats, "AgentStatsRepository")
    
    def get_or_create(self, agent_key: str, timestamp: int) -> AgentStats:
        stats = self.get(agent_key)
        if stats is None:
            stats = AgentStats(
                id=agent_key,
                agent_key=agent_key,
                total_feedback=0,
                average_score=Decimal("0"),
                score_distribution=empty_distribution(),
                total_validations=0,
                completed_validations=0,
                average_validation_score=Decimal("0"),
                last_activity=timestamp,
                updated_at=timestamp,
            )
            self._logger.debug(f"Creating stats for agent {agent_key}")
        return stats


class ProtocolRepository(BaseRepository[Protocol]):
    
    def __init__(self, session: Session):
        super().__init__(session, Protocol, "ProtocolRepository")
    
    def get_or_create(
        self,
        chain_id: int,
        name: str,
        identity_registry: Optional[str],
        reputation_registry: Optional[str],
        validation_registry: Optional[str],
    ) -> Tuple[Protocol, bool]:
        """
        Load the chain's Protocol, building it on first sight.
        
        Returns:
            (protocol, created)
        """
        key = str(chain_id)
        protocol = self.get(key)
        if protocol is not None:
            return protocol, False
        
        protocol = Protocol(
            id=key,
            chain_id=chain_id,
            name=name,
            identity_registry=identity_registry,
            reputation_registry=reputation_registry,
            validation_registry=validation_registry,
            total_agents=0,
            total_feedback=0,
            total_validations=0,
            agents=[],
            tags=[],
            updated_at=0,
        )
        self._logger.info(f"Creating protocol record for chain {chain_id} ({name})")
        return protocol, True


class GlobalStatsRepository(BaseRepository[GlobalStats]):
    
    def __init__(self, session: Session):
        super().__init__(session, GlobalStats, "GlobalStatsRepository")
    
    def get_or_create(self) -> GlobalStats:
        stats = self.get(GLOBAL_STATS_ID)
        if stats is None:
            stats = GlobalStats(
                id=GLOBAL_STATS_ID,
                total_agents=0,
                total_feedback=0,
                total_validations=0,
                total_protocols=0,
                agents=[],
                tags=[],
                updated_at=0,
            )
        return stats
