"""
Inbound Event Models - Typed registry events as delivered by the host.

Every event carries an EventContext supplied by the host replay
scheduler: the chain it was observed on, the block/transaction/log
position that orders it, the block timestamp, and (optionally) the
registry contract that emitted it.

Addresses are kept as 0x-prefixed lowercase hex strings; fixed-width
values (tags, hashes) as raw bytes.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


def normalize_address(address: str) -> str:
    """Lowercase an address so it can be used inside entity keys."""
    return address.lower()


@dataclass(frozen=True)
class EventContext:
    """Host-supplied position and time of an event."""
    chain_id: int
    block_number: int
    block_timestamp: int
    transaction_hash: str
    log_index: int = 0
    # Emitting contract, when the host delivers it
    address: Optional[str] = None
    
    @property
    def ordering_key(self) -> Tuple[int, str, int]:
        """Block + transaction + log position."""
        return (self.block_number, self.transaction_hash, self.log_index)
    
    @property
    def tx_hash_hex(self) -> str:
        return self.transaction_hash.lower()


# =============================================================
# IDENTITY REGISTRY EVENTS
# =============================================================


@dataclass(frozen=True)
class Registered:
    context: EventContext
    agent_id: int
    owner: str
    token_uri: str


@dataclass(frozen=True)
class MetadataSet:
    context: EventContext
    agent_id: int
    key: str
    value: bytes


@dataclass(frozen=True)
class UriUpdated:
    context: EventContext
    agent_id: int
    new_uri: str
    updated_by: str = ""


@dataclass(frozen=True)
class Transfer:
    context: EventContext
    from_address: str
    to_address: str
    token_id: int


@dataclass(frozen=True)
class Approval:
    context: EventContext
    owner: str
    approved: str
    token_id: int


@dataclass(frozen=True)
class ApprovalForAll:
    context: EventContext
    owner: str
    operator: str
    approved: bool


# =============================================================
# REPUTATION REGISTRY EVENTS
# =============================================================


@dataclass(frozen=True)
class NewFeedback:
    context: EventContext
    agent_id: int
    client_address: str
    score: int
    tag1: bytes
    tag2: bytes
    feedback_uri: str
    feedback_hash: bytes


@dataclass(frozen=True)
class FeedbackRevoked:
    context: EventContext
    agent_id: int
    client_address: str
    feedback_index: int


@dataclass(frozen=True)
class ResponseAppended:
    context: EventContext
    agent_id: int
    client_address: str
    feedback_index: int
    responder: str
    response_uri: str
    response_hash: bytes
