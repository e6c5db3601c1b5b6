"""
Tests for decoding host event records into typed events.
"""

import pytest

from core.exceptions import EventDecodingError
from events.decoding import decode_event
from events.models import ApprovalForAll, NewFeedback, Registered, Transfer


def record(event, args, **overrides):
    base = {
        "event": event,
        "chainId": 11155111,
        "blockNumber": 5_120_001,
        "blockTimestamp": 1_700_000_000,
        "transactionHash": "0xABCDEF",
        "logIndex": 3,
        "args": args,
    }
    base.update(overrides)
    return base


class TestDecodeEvent:
    
    def test_registered(self):
        event = decode_event(record("Registered", {
            "agentId": "7",
            "owner": "0xAbC0000000000000000000000000000000000001",
            "tokenURI": "ipfs://QmX",
        }))
        
        assert isinstance(event, Registered)
        assert event.agent_id == 7
        assert event.owner == "0xabc0000000000000000000000000000000000001"
        assert event.token_uri == "ipfs://QmX"
        assert event.context.chain_id == 11155111
        assert event.context.transaction_hash == "0xabcdef"
        assert event.context.ordering_key == (5_120_001, "0xabcdef", 3)
        assert event.context.address is None
    
    def test_emitting_contract_address(self):
        event = decode_event(record(
            "UriUpdated",
            {"agentId": 1, "newUri": "ipfs://QmY", "updatedBy": "0x1111111111111111111111111111111111111111"},
            address="0x8004A6090CD10A7288092483047B097295FB8847",
        ))
        
        assert event.context.address == "0x8004a6090cd10a7288092483047b097295fb8847"
    
    def test_new_feedback_bytes_and_hex_ints(self):
        event = decode_event(record("NewFeedback", {
            "agentId": "0x0a",
            "clientAddress": "0x2222222222222222222222222222222222222222",
            "score": 95,
            "tag1": "0x" + b"speed".hex().ljust(64, "0"),
            "feedbackHash": "0x" + "00" * 32,
        }))
        
        assert isinstance(event, NewFeedback)
        assert event.agent_id == 10
        assert event.tag1.rstrip(b"\x00") == b"speed"
        assert event.tag2 == b""
        assert event.feedback_uri == ""
    
    def test_transfer_and_log_index_default(self):
        raw = record("Transfer", {
            "from": "0x0000000000000000000000000000000000000000",
            "to": "0x1111111111111111111111111111111111111111",
            "tokenId": 1,
        })
        del raw["logIndex"]
        
        event = decode_event(raw)
        
        assert isinstance(event, Transfer)
        assert event.token_id == 1
        assert event.context.log_index == 0
    
    def test_approval_for_all_bool(self):
        event = decode_event(record("ApprovalForAll", {
            "owner": "0x1111111111111111111111111111111111111111",
            "operator": "0x3333333333333333333333333333333333333333",
            "approved": "true",
        }))
        
        assert isinstance(event, ApprovalForAll)
        assert event.approved is True
    
    def test_unknown_event(self):
        with pytest.raises(EventDecodingError):
            decode_event(record("ValidationRequest", {}))
    
    def test_missing_field(self):
        with pytest.raises(EventDecodingError) as exc_info:
            decode_event(record("Registered", {"owner": "0x1"}))
        
        assert exc_info.value.context["event_name"] == "Registered"
    
    @pytest.mark.parametrize("bad", [{"agentId": True, "owner": "0x1"}, {"agentId": "seven", "owner": "0x1"}])
    def test_bad_integer(self, bad):
        with pytest.raises(EventDecodingError):
            decode_event(record("Registered", bad))
    
    def test_bad_hex(self):
        with pytest.raises(EventDecodingError):
            decode_event(record("MetadataSet", {"agentId": 1, "key": "k", "value": "0xZZ"}))
    
    def test_record_must_be_object(self):
        with pytest.raises(EventDecodingError):
            decode_event(["Registered"])
