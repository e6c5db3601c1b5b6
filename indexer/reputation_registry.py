"""
Reputation Registry Handlers - Feedback state machine.

============================================================
EVENTS
============================================================
- NewFeedback: create Feedback (sequence = Agent.total_feedback + 1),
  link + schedule the feedback file, update all statistic scopes
- FeedbackRevoked: flip revocation state, decrement agent counters
- ResponseAppended: create an immutable FeedbackResponse

============================================================
KNOWN LIMITATIONS
============================================================
- Revocation leaves average score and histogram untouched
- The sequence number comes from a counter that revocation
  decrements, so a later feedback can land on an existing key;
  the collision is logged and the row is rewritten

============================================================
"""

import logging

from sqlalchemy.orm import Session

from core.constants import CONTEXT_FEEDBACK_ID
from events.models import FeedbackRevoked, NewFeedback, ResponseAppended
from indexer.aggregation import AggregationEngine, decode_tag
from indexer.chains import ChainRegistry
from indexer.keys import agent_key, feedback_key, feedback_response_key
from indexer.models import HandlerOutcome
from indexer.offchain_links import plan_fetch
from offchain.models import FileKind
from offchain.scheduler import FetchScheduler
from offchain.uri import determine_uri_type
from storage.models.reputation import Feedback, FeedbackResponse
from storage.repositories.identity import AgentRepository
from storage.repositories.reputation import FeedbackRepository, FeedbackResponseRepository


logger = logging.getLogger(__name__)


class ReputationRegistryHandler:
    """Applies reputation registry events to the Record Store."""
    
    def __init__(
        self,
        session: Session,
        scheduler: FetchScheduler,
        chains: ChainRegistry,
    ) -> None:
        self._scheduler = scheduler
        self._agents = AgentRepository(session)
        self._feedback = FeedbackRepository(session)
        self._responses = FeedbackResponseRepository(session)
        self._aggregation = AggregationEngine(session, chains)
    
    # =========================================================
    # NEW FEEDBACK
    # =========================================================
    
    def handle_new_feedback(self, event: NewFeedback) -> HandlerOutcome:
        ctx = event.context
        akey = agent_key(ctx.chain_id, event.agent_id)
        
        agent = self._agents.get(akey)
        if agent is None:
            logger.warning(f"Feedback for unknown agent: {akey}")
            return HandlerOutcome.SKIPPED
        
        fkey = feedback_key(akey, event.client_address, agent.total_feedback + 1)
        feedback = self._feedback.get(fkey)
        if feedback is None:
            feedback = Feedback(id=fkey, agent_key=akey)
        else:
            logger.warning(f"Feedback key {fkey} already exists, overwriting previous entry")
        
        tag1 = decode_tag(event.tag1)
        tag2 = decode_tag(event.tag2)
        
        feedback.client_address = event.client_address
        feedback.score = event.score
        feedback.tag1 = tag1
        feedback.tag2 = tag2
        feedback.feedback_uri = event.feedback_uri
        feedback.feedback_uri_type = determine_uri_type(event.feedback_uri)
        feedback.feedback_hash = event.feedback_hash
        feedback.is_revoked = False
        feedback.created_at = ctx.block_timestamp
        feedback.revoked_at = None
        feedback.feedback_file = None
        
        planned = plan_fetch(
            event.feedback_uri,
            kind=FileKind.FEEDBACK,
            entity_key_name=CONTEXT_FEEDBACK_ID,
            entity_key=fkey,
            context=ctx,
            tag1=tag1 or "",
            tag2=tag2 or "",
        )
        if planned is not None:
            feedback.feedback_file = planned.link_key
        self._feedback.save(feedback)
        
        if planned is not None:
            self._scheduler.schedule(planned.request)
            logger.info(f"Set feedbackFile connection for feedback {fkey} to ID: {planned.link_key}")
        
        self._aggregation.record_feedback(agent, event.score, event.tag1, event.tag2, ctx)
        
        logger.info(f"New feedback for agent {akey}: score {event.score} from {event.client_address}")
        return HandlerOutcome.APPLIED
    
    # =========================================================
    # REVOCATION
    # =========================================================
    
    def handle_feedback_revoked(self, event: FeedbackRevoked) -> HandlerOutcome:
        ctx = event.context
        akey = agent_key(ctx.chain_id, event.agent_id)
        fkey = feedback_key(akey, event.client_address, event.feedback_index)
        
        feedback = self._feedback.get(fkey)
        if feedback is None:
            logger.warning(f"Attempted to revoke unknown feedback: {fkey}")
            return HandlerOutcome.SKIPPED
        
        if feedback.is_revoked:
            logger.debug(f"Feedback {fkey} already revoked")
            return HandlerOutcome.IGNORED
        
        self._feedback.mark_revoked(feedback, ctx.block_timestamp)
        
        agent = self._agents.get(akey)
        if agent is not None:
            self._aggregation.record_revocation(agent, ctx)
        
        logger.info(f"Feedback revoked for agent {akey}: {fkey}")
        return HandlerOutcome.APPLIED
    
    # =========================================================
    # RESPONSES
    # =========================================================
    
    def handle_response_appended(self, event: ResponseAppended) -> HandlerOutcome:
        ctx = event.context
        akey = agent_key(ctx.chain_id, event.agent_id)
        fkey = feedback_key(akey, event.client_address, event.feedback_index)
        
        if not self._feedback.exists(fkey):
            logger.warning(f"Response for unknown feedback: {fkey}")
            return HandlerOutcome.SKIPPED
        
        rkey = feedback_response_key(fkey, ctx.block_timestamp)
        if self._responses.exists(rkey):
            logger.debug(f"Response {rkey} already stored")
            return HandlerOutcome.IGNORED
        
        self._responses.create_once(
            FeedbackResponse(
                id=rkey,
                feedback_key=fkey,
                responder=event.responder,
                response_uri=event.response_uri,
                response_hash=event.response_hash,
                created_at=ctx.block_timestamp,
            )
        )
        
        logger.info(f"Response appended to feedback {fkey}: {rkey}")
        return HandlerOutcome.APPLIED
