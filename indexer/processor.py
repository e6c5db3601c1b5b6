"""
Event Processor - One event, one transaction.

============================================================
FLOW
============================================================
1. Open a transaction (database.engine.transaction_scope)
2. Dispatch the event to its registry handler
3. Commit; on a store error roll back and report FAILED
4. Only after commit, pass buffered fetch requests on to the
   real scheduler, so a rolled-back event never leaves a fetch
   behind

Events must be handed in host order (per chain: block, then
transaction, then log index). The processor never reorders,
retries, or stops the stream.

============================================================
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from database.engine import transaction_scope
from events.decoding import RegistryEvent
from events.models import (
    Approval,
    ApprovalForAll,
    FeedbackRevoked,
    MetadataSet,
    NewFeedback,
    Registered,
    ResponseAppended,
    Transfer,
    UriUpdated,
)
from indexer.chains import ChainRegistry
from indexer.identity_registry import IdentityRegistryHandler
from indexer.models import HandlerOutcome, ProcessingResult
from indexer.reputation_registry import ReputationRegistryHandler
from offchain.models import FetchRequest
from offchain.scheduler import FetchScheduler, QueuedFetchScheduler
from storage.repositories.exceptions import RepositoryException


logger = logging.getLogger(__name__)


class _BufferedScheduler(FetchScheduler):
    """Holds requests until the event's transaction has committed."""
    
    def __init__(self) -> None:
        self.requests: List[FetchRequest] = []
    
    def schedule(self, request: FetchRequest) -> None:
        self.requests.append(request)


HandlerFactory = Callable[[Session, FetchScheduler, ChainRegistry], object]

# event type -> (handler class, method name)
EVENT_ROUTES: Dict[Type, Tuple[HandlerFactory, str]] = {
    Registered: (IdentityRegistryHandler, "handle_registered"),
    MetadataSet: (IdentityRegistryHandler, "handle_metadata_set"),
    UriUpdated: (IdentityRegistryHandler, "handle_uri_updated"),
    Transfer: (IdentityRegistryHandler, "handle_transfer"),
    Approval: (IdentityRegistryHandler, "handle_approval"),
    ApprovalForAll: (IdentityRegistryHandler, "handle_approval_for_all"),
    NewFeedback: (ReputationRegistryHandler, "handle_new_feedback"),
    FeedbackRevoked: (ReputationRegistryHandler, "handle_feedback_revoked"),
    ResponseAppended: (ReputationRegistryHandler, "handle_response_appended"),
}


class EventProcessor:
    """
    Applies registry events to the Record Store in arrival order.
    
    Usage:
        processor = EventProcessor(scheduler=QueuedFetchScheduler())
        result = processor.process(event)
    """
    
    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        scheduler: Optional[FetchScheduler] = None,
        chains: Optional[ChainRegistry] = None,
    ) -> None:
        self._session_factory = session_factory
        self._scheduler = scheduler if scheduler is not None else QueuedFetchScheduler()
        self._chains = chains if chains is not None else ChainRegistry.from_env()
        self._counts: Dict[HandlerOutcome, int] = {outcome: 0 for outcome in HandlerOutcome}
    
    @property
    def scheduler(self) -> FetchScheduler:
        return self._scheduler
    
    def process(self, event: RegistryEvent) -> ProcessingResult:
        """Apply one event. Never raises for store errors."""
        event_name = type(event).__name__
        ctx = event.context
        
        route = EVENT_ROUTES.get(type(event))
        if route is None:
            raise TypeError(f"Unsupported event type: {event_name}")
        handler_class, method_name = route
        
        buffer = _BufferedScheduler()
        try:
            with transaction_scope(self._session_factory) as session:
                handler = handler_class(session, buffer, self._chains)
                outcome = getattr(handler, method_name)(event)
        except (RepositoryException, SQLAlchemyError) as e:
            logger.error(
                f"{event_name} at block {ctx.block_number} tx {ctx.transaction_hash} "
                f"failed and was rolled back: {e}",
                exc_info=True,
            )
            self._counts[HandlerOutcome.FAILED] += 1
            return ProcessingResult(
                event_name=event_name,
                outcome=HandlerOutcome.FAILED,
                chain_id=ctx.chain_id,
                block_number=ctx.block_number,
                error=str(e),
            )
        
        for request in buffer.requests:
            self._scheduler.schedule(request)
        
        self._counts[outcome] += 1
        return ProcessingResult(
            event_name=event_name,
            outcome=outcome,
            chain_id=ctx.chain_id,
            block_number=ctx.block_number,
            fetches_scheduled=len(buffer.requests),
        )
    
    def process_all(self, events: Iterable[RegistryEvent]) -> List[ProcessingResult]:
        return [self.process(event) for event in events]
    
    def get_stats(self) -> Dict[str, int]:
        return {outcome.value: count for outcome, count in self._counts.items()}
