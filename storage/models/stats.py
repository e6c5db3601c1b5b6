"""
Aggregation Domain ORM Models.

============================================================
PURPOSE
============================================================
Running statistics at the three aggregation scopes.

============================================================
SCOPES
============================================================
- AgentStats: one per agent, keyed by the agent key
- Protocol: one per supported chain, keyed "<chainId>",
  created lazily on the first qualifying event
- GlobalStats: singleton keyed "global"

All values are maintained forward-only, one event at a time;
nothing is ever recomputed from history.

============================================================
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, DecimalText, JsonList, empty_list


def empty_distribution() -> List[int]:
    return [0, 0, 0, 0, 0]


class AgentStats(Base):
    """
    Per-agent feedback statistics.
    
    score_distribution buckets: [0-20, 21-40, 41-60, 61-80, 81-100]
    """
    
    __tablename__ = "agent_stats"
    
    id: Mapped[str] = mapped_column(String(100), primary_key=True, comment="Agent key")
    
    agent_key: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("agents.id"),
        nullable=False,
        comment="Agent these stats describe"
    )
    
    total_feedback: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0, comment="Feedback count (decremented on revocation)"
    )
    
    average_score: Mapped[Decimal] = mapped_column(
        DecimalText, nullable=False, default=Decimal("0"), comment="Running mean score"
    )
    
    score_distribution: Mapped[List[int]] = mapped_column(
        JsonList, nullable=False, default=empty_distribution, comment="5-bucket score histogram"
    )
    
    total_validations: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0, comment="Validation requests"
    )
    
    completed_validations: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0, comment="Validation responses"
    )
    
    average_validation_score: Mapped[Decimal] = mapped_column(
        DecimalText, nullable=False, default=Decimal("0"), comment="Running mean validation score"
    )
    
    last_activity: Mapped[int] = mapped_column(
        BigInteger, nullable=False, comment="Block timestamp of last feedback"
    )
    
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, comment="Block timestamp of last change"
    )


class Protocol(Base):
    """Per-chain statistics and registry deployment info."""
    
    __tablename__ = "protocols"
    
    id: Mapped[str] = mapped_column(String(32), primary_key=True, comment="<chainId>")
    
    chain_id: Mapped[int] = mapped_column(BigInteger, nullable=False, comment="Chain id")
    
    name: Mapped[str] = mapped_column(String(64), nullable=False, comment="Chain name")
    
    identity_registry: Mapped[Optional[str]] = mapped_column(
        String(42), nullable=True, comment="Identity registry address"
    )
    reputation_registry: Mapped[Optional[str]] = mapped_column(
        String(42), nullable=True, comment="Reputation registry address"
    )
    validation_registry: Mapped[Optional[str]] = mapped_column(
        String(42), nullable=True, comment="Validation registry address"
    )
    
    total_agents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Agents registered")
    total_feedback: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Feedback ever submitted")
    total_validations: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Validations")
    
    agents: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="Member agent keys (set)"
    )
    tags: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="Feedback tags seen, hex (set)"
    )
    
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Block timestamp")


class GlobalStats(Base):
    """Cross-chain statistics singleton."""
    
    __tablename__ = "global_stats"
    
    id: Mapped[str] = mapped_column(String(16), primary_key=True, comment="Always 'global'")
    
    total_agents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Agents registered")
    total_feedback: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Feedback ever submitted")
    total_validations: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Validations")
    total_protocols: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Chains seen")
    
    agents: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="Agent keys (set)"
    )
    tags: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="Feedback tags seen, hex (set)"
    )
    
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, comment="Block timestamp")
