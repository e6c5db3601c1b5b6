"""
Storage Models Package.

This package contains all ORM models for the indexer database.
Models are organized by domain for clarity and maintainability.

============================================================
MODEL ORGANIZATION
============================================================

Domain 1: Identity (identity.py)
- Agent
- AgentMetadata

Domain 2: Reputation (reputation.py)
- Feedback
- FeedbackResponse

Domain 3: Off-chain Files (files.py)
- AgentRegistrationFile
- FeedbackFile

Domain 4: Aggregation (stats.py)
- AgentStats
- Protocol
- GlobalStats

============================================================
"""

from storage.models.base import Base, BigIntText, BlockTimestampMixin, DecimalText, JsonList
from storage.models.files import AgentRegistrationFile, FeedbackFile
from storage.models.identity import Agent, AgentMetadata
from storage.models.reputation import Feedback, FeedbackResponse
from storage.models.stats import AgentStats, GlobalStats, Protocol

__all__ = [
    "Base",
    "BigIntText",
    "BlockTimestampMixin",
    "DecimalText",
    "JsonList",
    "Agent",
    "AgentMetadata",
    "Feedback",
    "FeedbackResponse",
    "AgentRegistrationFile",
    "FeedbackFile",
    "AgentStats",
    "Protocol",
    "GlobalStats",
]
