"""
Fetch Scheduler - Outbound side of the off-chain boundary.

The state machine only ever calls schedule(); it never waits for
a result. Whatever happens afterwards (success, failure, nothing)
is the fetch subsystem's business.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, List, Optional

from offchain.models import FetchRequest


logger = logging.getLogger(__name__)


class FetchScheduler(ABC):
    """Accepts fetch requests from event handlers."""
    
    @abstractmethod
    def schedule(self, request: FetchRequest) -> None:
        """Queue a request. Must not block and must not raise."""
        pass


class QueuedFetchScheduler(FetchScheduler):
    """
    In-process FIFO of pending fetch requests.
    
    Requests are never retried or cancelled here; the fetch
    worker pops them once.
    """
    
    def __init__(self, max_pending: Optional[int] = None) -> None:
        self._pending: Deque[FetchRequest] = deque()
        self._max_pending = max_pending
        self._scheduled_total = 0
        self._dropped_total = 0
    
    def schedule(self, request: FetchRequest) -> None:
        if self._max_pending is not None and len(self._pending) >= self._max_pending:
            self._dropped_total += 1
            logger.warning(
                f"Fetch queue full ({self._max_pending}), dropping "
                f"{request.kind.value} fetch for {request.content_id}"
            )
            return
        self._pending.append(request)
        self._scheduled_total += 1
        logger.debug(
            f"Scheduled {request.backend.value} fetch for {request.content_id} "
            f"({request.kind.value})"
        )
    
    def pop(self) -> Optional[FetchRequest]:
        if not self._pending:
            return None
        return self._pending.popleft()
    
    def pending(self) -> List[FetchRequest]:
        return list(self._pending)
    
    def __len__(self) -> int:
        return len(self._pending)
    
    def get_stats(self) -> dict:
        return {
            "pending": len(self._pending),
            "scheduled_total": self._scheduled_total,
            "dropped_total": self._dropped_total,
        }
