"""
Tests for Reputation Registry handlers.

============================================================
PURPOSE
============================================================
1. NewFeedback: sequence keys, tags, file link, aggregation
2. FeedbackRevoked: revocation state and counters
3. ResponseAppended: immutable responses
4. Missing-parent skips

============================================================
"""

from decimal import Decimal

import pytest

from core.constants import GLOBAL_STATS_ID
from factories import (
    ARWEAVE_TX_ID,
    CLIENT,
    IPFS_CID,
    RESPONDER,
    SEPOLIA,
    ZERO_TAG,
    new_feedback,
    registered,
    response,
    revoked,
    tag,
)
from indexer.models import HandlerOutcome
from offchain.models import FileKind, StorageBackend
from storage.models import Agent, AgentStats, Feedback, FeedbackResponse, GlobalStats, Protocol


AGENT_KEY = f"{SEPOLIA}:1"
OTHER_CLIENT = "0x6666666666666666666666666666666666666666"


def feedback_key(sequence, client=CLIENT):
    return f"{AGENT_KEY}:{client}:{sequence}"


@pytest.fixture
def registered_agent(processor, make_context):
    processor.process(registered(make_context()))


# =============================================================
# TEST: New feedback
# =============================================================

class TestNewFeedback:
    """NewFeedback creates Feedback and folds it into the statistics."""
    
    def test_creates_feedback(self, processor, load, make_context, registered_agent):
        ctx = make_context(timestamp=1_700_100_000)
        result = processor.process(new_feedback(ctx, score=87, tag1=tag("speed")))
        
        assert result.outcome == HandlerOutcome.APPLIED
        feedback = load(Feedback, feedback_key(1))
        assert feedback.agent_key == AGENT_KEY
        assert feedback.client_address == CLIENT
        assert feedback.score == 87
        assert feedback.tag1 == "speed"
        assert feedback.tag2 is None
        assert feedback.is_revoked is False
        assert feedback.revoked_at is None
        assert feedback.created_at == 1_700_100_000
        assert feedback.feedback_uri_type == "unknown"
        assert feedback.feedback_file is None
    
    def test_sequence_follows_agent_feedback_count(self, processor, load, make_context, registered_agent):
        processor.process(new_feedback(make_context(), score=10))
        processor.process(new_feedback(make_context(), score=20, client=OTHER_CLIENT))
        processor.process(new_feedback(make_context(), score=30))
        
        assert load(Feedback, feedback_key(1)).score == 10
        assert load(Feedback, feedback_key(2, OTHER_CLIENT)).score == 20
        assert load(Feedback, feedback_key(3)).score == 30
        assert load(Agent, AGENT_KEY).total_feedback == 3
    
    def test_links_feedback_file_with_tag_echo(self, processor, scheduler, load, make_context, registered_agent):
        ctx = make_context()
        processor.process(new_feedback(ctx, uri=f"ipfs://{IPFS_CID}", tag1=tag("speed")))
        
        assert load(Feedback, feedback_key(1)).feedback_file == f"{ctx.transaction_hash}:{IPFS_CID}"
        [request] = scheduler.pending()
        assert request.kind == FileKind.FEEDBACK
        assert request.backend == StorageBackend.IPFS
        assert request.context == {
            "feedbackId": feedback_key(1),
            "cid": IPFS_CID,
            "txHash": ctx.transaction_hash,
            "timestamp": ctx.block_timestamp,
            "tag1OnChain": "speed",
            "tag2OnChain": "",
        }
    
    def test_arweave_feedback_uri(self, processor, scheduler, load, make_context, registered_agent):
        processor.process(new_feedback(make_context(), uri=f"https://arweave.net/{ARWEAVE_TX_ID}"))
        
        feedback = load(Feedback, feedback_key(1))
        assert feedback.feedback_uri_type == "arweave"
        assert scheduler.pending()[-1].backend == StorageBackend.ARWEAVE
    
    def test_updates_all_scopes(self, processor, load, make_context, registered_agent):
        processor.process(new_feedback(make_context(), score=40, tag1=tag("a")))
        processor.process(new_feedback(make_context(), score=90, tag1=tag("a"), tag2=tag("b")))
        
        stats = load(AgentStats, AGENT_KEY)
        assert stats.total_feedback == 2
        assert stats.average_score == Decimal("65")
        assert stats.score_distribution == [0, 1, 0, 0, 1]
        
        protocol = load(Protocol, str(SEPOLIA))
        assert protocol.total_feedback == 2
        assert protocol.tags == ["0x" + tag("a").hex(), "0x" + tag("b").hex()]
        
        assert load(GlobalStats, GLOBAL_STATS_ID).total_feedback == 2
    
    def test_unknown_agent_is_skipped(self, processor, scheduler, load, make_context):
        result = processor.process(new_feedback(make_context(), uri=f"ipfs://{IPFS_CID}"))
        
        assert result.outcome == HandlerOutcome.SKIPPED
        assert load(Feedback, feedback_key(1)) is None
        assert load(GlobalStats, GLOBAL_STATS_ID) is None
        assert len(scheduler) == 0


# =============================================================
# TEST: Revocation
# =============================================================

class TestFeedbackRevoked:
    
    def test_flips_revocation_and_decrements_counters(self, processor, load, make_context, registered_agent):
        processor.process(new_feedback(make_context(), score=20))
        processor.process(new_feedback(make_context(), score=100))
        before = load(AgentStats, AGENT_KEY)
        
        ctx = make_context(timestamp=1_700_200_000)
        result = processor.process(revoked(ctx, index=2))
        
        assert result.outcome == HandlerOutcome.APPLIED
        feedback = load(Feedback, feedback_key(2))
        assert feedback.is_revoked is True
        assert feedback.revoked_at == 1_700_200_000
        
        assert load(Agent, AGENT_KEY).total_feedback == 1
        after = load(AgentStats, AGENT_KEY)
        assert after.total_feedback == 1
        assert after.average_score == before.average_score
        assert after.score_distribution == before.score_distribution
        assert load(GlobalStats, GLOBAL_STATS_ID).total_feedback == 2
    
    def test_second_revocation_is_ignored(self, processor, load, make_context, registered_agent):
        processor.process(new_feedback(make_context()))
        processor.process(revoked(make_context()))
        result = processor.process(revoked(make_context()))
        
        assert result.outcome == HandlerOutcome.IGNORED
        assert load(Agent, AGENT_KEY).total_feedback == 0
    
    def test_unknown_feedback_is_skipped(self, processor, load, make_context, registered_agent):
        result = processor.process(revoked(make_context(), index=42))
        
        assert result.outcome == HandlerOutcome.SKIPPED
        assert load(Agent, AGENT_KEY).total_feedback == 0
    
    def test_resubmission_after_revocation_reuses_key(self, processor, load, make_context, registered_agent):
        processor.process(new_feedback(make_context(), score=10))
        processor.process(revoked(make_context()))
        result = processor.process(new_feedback(make_context(), score=95))
        
        assert result.outcome == HandlerOutcome.APPLIED
        feedback = load(Feedback, feedback_key(1))
        assert feedback.score == 95
        assert feedback.is_revoked is False


# =============================================================
# TEST: Responses
# =============================================================

class TestResponseAppended:
    
    def test_creates_response(self, processor, load, make_context, registered_agent):
        processor.process(new_feedback(make_context()))
        ctx = make_context(timestamp=1_700_300_000)
        result = processor.process(response(ctx))
        
        assert result.outcome == HandlerOutcome.APPLIED
        stored = load(FeedbackResponse, f"{feedback_key(1)}:1700300000")
        assert stored.feedback_key == feedback_key(1)
        assert stored.responder == RESPONDER
        assert stored.created_at == 1_700_300_000
    
    def test_same_key_is_not_overwritten(self, processor, load, make_context, registered_agent):
        processor.process(new_feedback(make_context()))
        processor.process(response(make_context(timestamp=1_700_300_000)))
        result = processor.process(response(make_context(timestamp=1_700_300_000)))
        
        assert result.outcome == HandlerOutcome.IGNORED
    
    def test_unknown_feedback_is_skipped(self, processor, load, make_context, registered_agent):
        result = processor.process(response(make_context()))
        
        assert result.outcome == HandlerOutcome.SKIPPED
