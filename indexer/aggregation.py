"""
Aggregation Engine - Incremental statistics at three scopes.

============================================================
SCOPES (updated in this order)
============================================================
1. Agent: Agent.total_feedback + AgentStats (count, running
   mean, 5-bucket histogram)
2. Protocol: per-chain counters, member agents, tags
3. Global: cross-chain counters, agents, tags

============================================================
RULES
============================================================
- Counters move by exactly 1 per qualifying event
- Running mean: new = (old * (n - 1) + x) / n, n = post-increment count
- Histogram bucket: <=20 -> 0, <=40 -> 1, <=60 -> 2, <=80 -> 3, else 4
- Sets: idempotent exact-match append; the all-zero tag is never stored
- Revocation decrements only the Agent/AgentStats counters; average
  and histogram keep the revoked score, Protocol/Global totals stay
  historical
- The first event seen on a chain creates its Protocol and bumps
  GlobalStats.total_protocols, once
- Unsupported chains skip the Protocol scope only

All state lives in the Record Store; the engine holds none.

============================================================
"""

import logging
from decimal import Decimal, localcontext
from typing import Optional

from sqlalchemy.orm import Session

from core.constants import DECIMAL_PRECISION, SCORE_BUCKET_UPPER_BOUNDS
from core.exceptions import ChainNotSupportedError
from events.models import EventContext
from indexer.chains import ChainRegistry
from storage.models.identity import Agent
from storage.models.stats import GlobalStats, Protocol
from storage.repositories.identity import AgentRepository
from storage.repositories.stats import (
    AgentStatsRepository,
    GlobalStatsRepository,
    ProtocolRepository,
)
from storage.sets import add_unique


logger = logging.getLogger(__name__)


# =============================================================
# PURE HELPERS
# =============================================================


def score_bucket(score: int) -> int:
    """Histogram bucket index for a 0-100 score."""
    for index, upper in enumerate(SCORE_BUCKET_UPPER_BOUNDS):
        if score <= upper:
            return index
    return len(SCORE_BUCKET_UPPER_BOUNDS)


def running_mean(previous_mean: Decimal, count: int, value: int) -> Decimal:
    """
    Fold one value into a mean.
    
    Args:
        previous_mean: mean over count - 1 values
        count: number of values including ``value``
        value: new observation
    """
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        total = previous_mean * Decimal(count - 1) + Decimal(value)
        return total / Decimal(count)


def is_zero_tag(tag: bytes) -> bool:
    return not any(tag)


def tag_hex(tag: bytes) -> str:
    """Set representation of an on-chain tag: 0x-prefixed lowercase hex."""
    return "0x" + tag.hex()


def decode_tag(tag: bytes) -> Optional[str]:
    """Fixed-width tag as text, NUL padding stripped; None when empty."""
    text = tag.rstrip(b"\x00").decode("utf-8", errors="replace")
    return text or None


# =============================================================
# ENGINE
# =============================================================


class AggregationEngine:
    """
    Maintains AgentStats, Protocol and GlobalStats for one session.
    
    Invoked by the event handlers after the primary entity has
    been written.
    """
    
    def __init__(self, session: Session, chains: ChainRegistry) -> None:
        self._chains = chains
        self._agents = AgentRepository(session)
        self._agent_stats = AgentStatsRepository(session)
        self._protocols = ProtocolRepository(session)
        self._global = GlobalStatsRepository(session)
    
    # ---------------------------------------------------------
    # Scope bootstrap
    # ---------------------------------------------------------
    
    def ensure_protocol(
        self,
        chain_id: int,
        timestamp: int,
        identity_registry: Optional[str] = None,
        reputation_registry: Optional[str] = None,
    ) -> Optional[Protocol]:
        """
        Load (or lazily create) the chain's Protocol.
        
        Registry addresses come from the chain configuration. Where
        it has none, the emitting contract of the current event
        fills the gap, on creation or on a later event.
        
        Returns:
            The protocol, or None for an unsupported chain
        """
        try:
            config = self._chains.require(chain_id)
        except ChainNotSupportedError as e:
            logger.warning(e.message)
            return None
        
        protocol, created = self._protocols.get_or_create(
            chain_id=chain_id,
            name=config.name,
            identity_registry=config.identity_registry or identity_registry,
            reputation_registry=config.reputation_registry or reputation_registry,
            validation_registry=config.validation_registry,
        )
        if created:
            protocol.updated_at = timestamp
            self._protocols.add(protocol)
            
            global_stats = self._global.get_or_create()
            global_stats.total_protocols += 1
            global_stats.updated_at = timestamp
            self._global.save(global_stats)
        elif protocol.identity_registry is None and identity_registry is not None:
            protocol.identity_registry = identity_registry
        elif protocol.reputation_registry is None and reputation_registry is not None:
            protocol.reputation_registry = reputation_registry
        
        return protocol
    
    def _global_stats(self) -> GlobalStats:
        return self._global.get_or_create()
    
    # ---------------------------------------------------------
    # Registration
    # ---------------------------------------------------------
    
    def record_agent_registered(self, agent: Agent, context: EventContext) -> None:
        """Count a newly created agent at Protocol and Global scope."""
        timestamp = context.block_timestamp
        
        protocol = self.ensure_protocol(context.chain_id, timestamp, identity_registry=context.address)
        if protocol is not None:
            protocol.total_agents += 1
            protocol.agents = add_unique(protocol.agents, agent.id)
            protocol.updated_at = timestamp
            self._protocols.save(protocol)
        
        global_stats = self._global_stats()
        global_stats.total_agents += 1
        global_stats.agents = add_unique(global_stats.agents, agent.id)
        global_stats.updated_at = timestamp
        self._global.save(global_stats)
    
    # ---------------------------------------------------------
    # Feedback
    # ---------------------------------------------------------
    
    def record_feedback(
        self,
        agent: Agent,
        score: int,
        tag1: bytes,
        tag2: bytes,
        context: EventContext,
    ) -> None:
        """Fold one new feedback into all three scopes."""
        timestamp = context.block_timestamp
        
        self._update_agent_scope(agent, score, timestamp)
        
        protocol = self.ensure_protocol(context.chain_id, timestamp, reputation_registry=context.address)
        if protocol is not None:
            protocol.total_feedback += 1
            protocol.tags = self._with_tags(protocol.tags, tag1, tag2)
            protocol.updated_at = timestamp
            self._protocols.save(protocol)
        
        global_stats = self._global_stats()
        global_stats.total_feedback += 1
        global_stats.tags = self._with_tags(global_stats.tags, tag1, tag2)
        global_stats.updated_at = timestamp
        self._global.save(global_stats)
    
    def _update_agent_scope(self, agent: Agent, score: int, timestamp: int) -> None:
        agent.total_feedback += 1
        agent.last_activity = timestamp
        agent.updated_at = timestamp
        self._agents.save(agent)
        
        stats = self._agent_stats.get_or_create(agent.id, timestamp)
        stats.total_feedback += 1
        
        distribution = list(stats.score_distribution)
        distribution[score_bucket(score)] += 1
        stats.score_distribution = distribution
        
        stats.average_score = running_mean(stats.average_score, stats.total_feedback, score)
        stats.last_activity = timestamp
        stats.updated_at = timestamp
        self._agent_stats.save(stats)
    
    @staticmethod
    def _with_tags(tags: list, tag1: bytes, tag2: bytes) -> list:
        for tag in (tag1, tag2):
            if not is_zero_tag(tag):
                tags = add_unique(tags, tag_hex(tag))
        return list(tags or [])
    
    # ---------------------------------------------------------
    # Revocation
    # ---------------------------------------------------------
    
    def record_revocation(self, agent: Agent, context: EventContext) -> None:
        """
        Decrement the Agent and AgentStats feedback counters.
        
        Average and histogram still include the revoked score;
        Protocol and Global totals are left as historical counts.
        """
        timestamp = context.block_timestamp
        
        agent.total_feedback -= 1
        agent.updated_at = timestamp
        self._agents.save(agent)
        
        stats = self._agent_stats.get(agent.id)
        if stats is not None:
            stats.total_feedback -= 1
            stats.updated_at = timestamp
            self._agent_stats.save(stats)
