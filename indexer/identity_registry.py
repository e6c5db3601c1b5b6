"""
Identity Registry Handlers - Agent lifecycle state machine.

============================================================
EVENTS
============================================================
- Registered: load-or-create Agent, classify URI, schedule fetch
- MetadataSet: upsert AgentMetadata, touch Agent
- UriUpdated: new URI, re-run classify-and-fetch
- Transfer: new owner (mint transfers ignored)
- Approval: operator set add / filter
- ApprovalForAll: logged only, not modeled per agent

============================================================
ERROR POLICY
============================================================
A missing Agent is logged and the event skipped; nothing is
fabricated. Store errors propagate to the event processor,
which rolls the event's transaction back.

============================================================
"""

import logging

from sqlalchemy.orm import Session

from core.constants import CONTEXT_AGENT_ID, ZERO_ADDRESS
from events.models import (
    Approval,
    ApprovalForAll,
    EventContext,
    MetadataSet,
    Registered,
    Transfer,
    UriUpdated,
)
from indexer.aggregation import AggregationEngine
from indexer.chains import ChainRegistry
from indexer.keys import agent_key, agent_metadata_key
from indexer.models import HandlerOutcome
from indexer.offchain_links import plan_fetch
from offchain.models import FileKind
from offchain.scheduler import FetchScheduler
from offchain.uri import determine_uri_type
from storage.models.identity import Agent
from storage.repositories.identity import AgentMetadataRepository, AgentRepository
from storage.sets import add_unique, remove_all


logger = logging.getLogger(__name__)


class IdentityRegistryHandler:
    """
    Applies identity registry events to the Record Store.
    
    One instance per event transaction; the session and
    scheduler belong to the caller.
    """
    
    def __init__(
        self,
        session: Session,
        scheduler: FetchScheduler,
        chains: ChainRegistry,
    ) -> None:
        self._scheduler = scheduler
        self._agents = AgentRepository(session)
        self._metadata = AgentMetadataRepository(session)
        self._aggregation = AggregationEngine(session, chains)
    
    # =========================================================
    # REGISTRATION AND URI
    # =========================================================
    
    def handle_registered(self, event: Registered) -> HandlerOutcome:
        ctx = event.context
        key = agent_key(ctx.chain_id, event.agent_id)
        
        agent = self._agents.get(key)
        is_new = agent is None
        if is_new:
            agent = self._agents.create_agent(
                key=key,
                chain_id=ctx.chain_id,
                agent_id=event.agent_id,
                owner=event.owner,
                timestamp=ctx.block_timestamp,
            )
        
        agent.owner = event.owner
        agent.agent_uri = event.token_uri
        agent.agent_uri_type = determine_uri_type(event.token_uri)
        agent.updated_at = ctx.block_timestamp
        self._link_registration_file(agent, event.token_uri, ctx)
        self._agents.save(agent)
        
        if is_new:
            self._aggregation.record_agent_registered(agent, ctx)
        else:
            logger.info(f"Agent {key} re-registered, counters unchanged")
        
        logger.info(f"Agent registered: {event.agent_id} on chain {ctx.chain_id}")
        return HandlerOutcome.APPLIED
    
    def handle_uri_updated(self, event: UriUpdated) -> HandlerOutcome:
        ctx = event.context
        key = agent_key(ctx.chain_id, event.agent_id)
        
        agent = self._agents.get(key)
        if agent is None:
            logger.warning(f"URI updated for unknown agent: {key}")
            return HandlerOutcome.SKIPPED
        
        agent.agent_uri = event.new_uri
        agent.agent_uri_type = determine_uri_type(event.new_uri)
        agent.updated_at = ctx.block_timestamp
        self._link_registration_file(agent, event.new_uri, ctx)
        self._agents.save(agent)
        
        logger.info(f"Agent URI updated for agent {key}: {event.new_uri}")
        return HandlerOutcome.APPLIED
    
    def _link_registration_file(self, agent: Agent, uri: str, ctx: EventContext) -> None:
        # An unsupported URI keeps the previous link.
        planned = plan_fetch(
            uri,
            kind=FileKind.REGISTRATION,
            entity_key_name=CONTEXT_AGENT_ID,
            entity_key=agent.id,
            context=ctx,
        )
        if planned is None:
            return
        
        agent.registration_file = planned.link_key
        self._scheduler.schedule(planned.request)
        logger.info(f"Set registrationFile connection for agent {agent.id} to ID: {planned.link_key}")
    
    # =========================================================
    # METADATA
    # =========================================================
    
    def handle_metadata_set(self, event: MetadataSet) -> HandlerOutcome:
        ctx = event.context
        key = agent_key(ctx.chain_id, event.agent_id)
        
        agent = self._agents.get(key)
        if agent is None:
            logger.warning(f"Metadata set for unknown agent: {key}")
            return HandlerOutcome.SKIPPED
        
        self._metadata.upsert(
            key=agent_metadata_key(key, event.key),
            agent_key=key,
            metadata_key=event.key,
            value=event.value,
            timestamp=ctx.block_timestamp,
        )
        
        agent.updated_at = ctx.block_timestamp
        self._agents.save(agent)
        
        logger.info(f"Metadata set for agent {key}: {event.key} = 0x{event.value.hex()}")
        return HandlerOutcome.APPLIED
    
    # =========================================================
    # OWNERSHIP AND OPERATORS
    # =========================================================
    
    def handle_transfer(self, event: Transfer) -> HandlerOutcome:
        if event.from_address == ZERO_ADDRESS:
            # Mint; the Registered event creates the agent.
            return HandlerOutcome.IGNORED
        
        ctx = event.context
        key = agent_key(ctx.chain_id, event.token_id)
        
        agent = self._agents.get(key)
        if agent is None:
            logger.warning(
                f"Transfer for unknown agent: {key}, from: {event.from_address}, to: {event.to_address}"
            )
            return HandlerOutcome.SKIPPED
        
        agent.owner = event.to_address
        agent.updated_at = ctx.block_timestamp
        self._agents.save(agent)
        
        logger.info(f"Agent {key} transferred from {event.from_address} to {event.to_address}")
        return HandlerOutcome.APPLIED
    
    def handle_approval(self, event: Approval) -> HandlerOutcome:
        """
        Add the approved address to the operator set, or filter it
        out when the approval is the zero address.
        """
        ctx = event.context
        key = agent_key(ctx.chain_id, event.token_id)
        
        agent = self._agents.get(key)
        if agent is None:
            logger.warning(f"Approval for unknown agent: {key}")
            return HandlerOutcome.SKIPPED
        
        if event.approved != ZERO_ADDRESS:
            agent.operators = add_unique(agent.operators, event.approved)
        else:
            agent.operators = remove_all(agent.operators, event.approved)
        agent.updated_at = ctx.block_timestamp
        self._agents.save(agent)
        
        logger.info(f"Approval updated for agent {key}: approved = {event.approved}")
        return HandlerOutcome.APPLIED
    
    def handle_approval_for_all(self, event: ApprovalForAll) -> HandlerOutcome:
        logger.info(
            f"ApprovalForAll event: owner = {event.owner}, operator = {event.operator}, "
            f"approved = {event.approved}"
        )
        return HandlerOutcome.IGNORED
