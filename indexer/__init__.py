"""
Indexer Package - Entity state machine and aggregation.

============================================================
MODULES
============================================================
- identity_registry: Agent lifecycle handlers
- reputation_registry: Feedback handlers
- aggregation: AgentStats / Protocol / GlobalStats maintenance
- offchain_links: link keys and fetch planning
- chains: supported chain lookup
- keys: deterministic entity keys
- processor: one transaction per event

============================================================
"""

from indexer.aggregation import AggregationEngine, running_mean, score_bucket
from indexer.chains import BUILTIN_CHAINS, ChainConfig, ChainRegistry
from indexer.identity_registry import IdentityRegistryHandler
from indexer.models import HandlerOutcome, ProcessingResult
from indexer.offchain_links import PlannedFetch, file_link_key, plan_fetch
from indexer.processor import EventProcessor
from indexer.reputation_registry import ReputationRegistryHandler

__all__ = [
    "AggregationEngine",
    "running_mean",
    "score_bucket",
    "BUILTIN_CHAINS",
    "ChainConfig",
    "ChainRegistry",
    "IdentityRegistryHandler",
    "ReputationRegistryHandler",
    "HandlerOutcome",
    "ProcessingResult",
    "PlannedFetch",
    "file_link_key",
    "plan_fetch",
    "EventProcessor",
]
