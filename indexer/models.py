"""
Indexer Result Models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class HandlerOutcome(Enum):
    """What a handler did with one event."""
    APPLIED = "applied"    # entities written
    SKIPPED = "skipped"    # required parent missing
    IGNORED = "ignored"    # nothing to do (mint transfer, repeat revocation, ...)
    FAILED = "failed"      # store error, transaction rolled back


@dataclass
class ProcessingResult:
    """Outcome of processing one event."""
    event_name: str
    outcome: HandlerOutcome
    chain_id: int
    block_number: int
    fetches_scheduled: int = 0
    error: Optional[str] = None
    
    @property
    def succeeded(self) -> bool:
        return self.outcome != HandlerOutcome.FAILED
