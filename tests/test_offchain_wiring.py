"""
Tests for the off-chain wiring across the isolation boundary.

============================================================
PURPOSE
============================================================
The scheduling side (indexer.offchain_links) and the completion
side (metadata_parser.handlers) each derive the file key on
their own. These tests pin down that:
1. Both derivations agree
2. The primary entity is linked before any fetch completes
3. A link whose file never arrives reads back as absent
4. Completion stores the file under the linked key and never
   touches the Agent or Feedback

============================================================
"""

import json

import pytest
from sqlalchemy import Text

from database.engine import transaction_scope
from factories import ARWEAVE_TX_ID, IPFS_CID, SEPOLIA, new_feedback, registered, tag
from indexer.offchain_links import file_link_key
from metadata_parser.handlers import file_record_key, handle_completion
from offchain.models import FetchRequest, FileKind, StorageBackend, build_context
from indexer.models import HandlerOutcome
from storage.models import Agent, AgentMetadata, AgentRegistrationFile, Feedback, FeedbackFile
from storage.repositories.files import RegistrationFileRepository


AGENT_KEY = f"{SEPOLIA}:1"
REGISTRATION_JSON = json.dumps({"name": "Indexed Agent", "supportedTrusts": ["reputation"]}).encode()


def complete(session_factory, request, content):
    with transaction_scope(session_factory) as session:
        return handle_completion(session, request, content)


# =============================================================
# TEST: Key agreement
# =============================================================

class TestLinkKeyAgreement:
    """Scheduling-side and completion-side keys are the same pure function."""
    
    @pytest.mark.parametrize("tx_hash,content_id", [
        ("0x" + "ab" * 32, IPFS_CID),
        ("0x" + "01" * 32, ARWEAVE_TX_ID),
        ("0x" + "ff" * 32, f"{IPFS_CID}/agent.json"),
    ])
    def test_both_sides_agree(self, tx_hash, content_id):
        assert file_link_key(tx_hash, content_id) == file_record_key(tx_hash, content_id)
    
    def test_key_from_request_matches_key_on_entity(self, processor, scheduler, load, make_context):
        processor.process(registered(make_context(), uri=f"ipfs://{IPFS_CID}"))
        [request] = scheduler.pending()
        
        linked = load(Agent, AGENT_KEY).registration_file
        assert file_record_key(request.context["txHash"], request.context["cid"]) == linked
    
    def test_resubmission_in_new_transaction_gets_new_key(self, processor, load, make_context):
        processor.process(registered(make_context(), uri=f"ipfs://{IPFS_CID}"))
        first = load(Agent, AGENT_KEY).registration_file
        processor.process(registered(make_context(), uri=f"ipfs://{IPFS_CID}"))
        
        assert load(Agent, AGENT_KEY).registration_file != first


# =============================================================
# TEST: Forward references
# =============================================================

class TestForwardReference:
    
    def test_link_dangles_until_file_arrives(self, processor, session, make_context):
        processor.process(registered(make_context(), uri=f"ipfs://{IPFS_CID}"))
        
        agent = session.get(Agent, AGENT_KEY)
        assert agent.registration_file is not None
        assert RegistrationFileRepository(session).get(agent.registration_file) is None
        assert session.get(AgentRegistrationFile, agent.registration_file) is None
    
    def test_completion_stores_file_under_linked_key(self, processor, scheduler, session_factory, load, make_context):
        processor.process(registered(make_context(), uri=f"ipfs://{IPFS_CID}"))
        agent_before = load(Agent, AGENT_KEY)
        
        record = complete(session_factory, scheduler.pop(), REGISTRATION_JSON)
        
        stored = load(AgentRegistrationFile, agent_before.registration_file)
        assert record is not None
        assert stored.name == "Indexed Agent"
        assert stored.supported_trusts == ["reputation"]
        assert stored.agent_key == AGENT_KEY
        assert stored.cid == IPFS_CID
        
        agent_after = load(Agent, AGENT_KEY)
        assert agent_after.updated_at == agent_before.updated_at
        assert agent_after.registration_file == agent_before.registration_file
    
    def test_completion_without_any_agent(self, session_factory, load):
        request = FetchRequest(
            kind=FileKind.REGISTRATION,
            backend=StorageBackend.ARWEAVE,
            content_id=ARWEAVE_TX_ID,
            context=build_context("agentId", "1:99", ARWEAVE_TX_ID, "0xfeed", 1_700_000_000),
        )
        
        complete(session_factory, request, REGISTRATION_JSON)
        
        assert load(AgentRegistrationFile, f"0xfeed:{ARWEAVE_TX_ID}") is not None
        assert load(Agent, "1:99") is None
    
    def test_redelivery_is_a_no_op(self, processor, scheduler, session_factory, load, make_context):
        processor.process(registered(make_context(), uri=f"ipfs://{IPFS_CID}"))
        request = scheduler.pop()
        
        complete(session_factory, request, REGISTRATION_JSON)
        second = complete(session_factory, request, json.dumps({"name": "Changed"}).encode())
        
        assert second is None
        assert load(AgentRegistrationFile, load(Agent, AGENT_KEY).registration_file).name == "Indexed Agent"
    
    def test_malformed_payload_stores_nothing(self, processor, scheduler, session_factory, load, make_context):
        processor.process(registered(make_context(), uri=f"ipfs://{IPFS_CID}"))
        
        assert complete(session_factory, scheduler.pop(), b"<html>gateway error</html>") is None
        assert load(AgentRegistrationFile, load(Agent, AGENT_KEY).registration_file) is None


class TestLongContentIds:
    """Gateway paths and payload strings have no length bound."""
    
    @pytest.mark.parametrize("column", [
        AgentRegistrationFile.__table__.c.id,
        AgentRegistrationFile.__table__.c.cid,
        AgentRegistrationFile.__table__.c.mcp_version,
        AgentRegistrationFile.__table__.c.a2a_version,
        FeedbackFile.__table__.c.id,
        FeedbackFile.__table__.c.cid,
        Agent.__table__.c.registration_file,
        Feedback.__table__.c.feedback_file,
        AgentMetadata.__table__.c.id,
        AgentMetadata.__table__.c.key,
    ], ids=lambda column: f"{column.table.name}.{column.name}")
    def test_unbounded_text_columns(self, column):
        assert isinstance(column.type, Text)
    
    def test_long_gateway_path_is_linked_and_stored(self, processor, scheduler, session_factory, load, make_context):
        path = "/".join(["nested"] * 60) + "/agent.json"
        uri = f"https://gateway.example/ipfs/{IPFS_CID}/{path}"
        
        result = processor.process(registered(make_context(), uri=uri))
        request = scheduler.pop()
        complete(session_factory, request, REGISTRATION_JSON)
        
        assert result.outcome == HandlerOutcome.APPLIED
        assert len(request.content_id) > 300
        stored = load(AgentRegistrationFile, load(Agent, AGENT_KEY).registration_file)
        assert stored.cid == request.content_id
        assert stored.name == "Indexed Agent"


class TestFeedbackFileWiring:
    
    def test_feedback_file_uses_on_chain_tag_echo(self, processor, scheduler, session_factory, load, make_context):
        processor.process(registered(make_context()))
        processor.process(new_feedback(make_context(), uri=f"ipfs://{IPFS_CID}", tag1=tag("speed")))
        feedback_key = f"{AGENT_KEY}:0x2222222222222222222222222222222222222222:1"
        
        complete(session_factory, scheduler.pop(), json.dumps({"text": "ok", "tag2": "file-tag"}).encode())
        
        feedback = load(Feedback, feedback_key)
        stored = load(FeedbackFile, feedback.feedback_file)
        assert stored.feedback_key == feedback_key
        assert stored.text == "ok"
        assert stored.tag1 == "speed"
        assert stored.tag2 == "file-tag"
        assert load(Feedback, feedback_key).feedback_file == feedback.feedback_file
