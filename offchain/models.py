"""
Off-chain Fetch Models - Requests handed to the fetch subsystem.

A FetchRequest names one content-addressed payload and carries an
opaque context map with everything the completion handler needs to
rebuild the record key on its own: the primary entity key, the
content id, the originating transaction hash and the block
timestamp (plus the on-chain tags for feedback files).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from core.constants import (
    CONTEXT_CID,
    CONTEXT_TAG1,
    CONTEXT_TAG2,
    CONTEXT_TIMESTAMP,
    CONTEXT_TX_HASH,
)


class FileKind(Enum):
    """Which parser a completed fetch is routed to."""
    REGISTRATION = "registration"
    FEEDBACK = "feedback"


class StorageBackend(Enum):
    """Content-addressed storage the payload lives on."""
    IPFS = "ipfs"
    ARWEAVE = "arweave"


@dataclass(frozen=True)
class FetchRequest:
    """One outstanding off-chain fetch."""
    kind: FileKind
    backend: StorageBackend
    content_id: str
    context: Dict[str, Any] = field(default_factory=dict)
    
    @property
    def tx_hash(self) -> str:
        return self.context.get(CONTEXT_TX_HASH, "")
    
    @property
    def timestamp(self) -> int:
        return int(self.context.get(CONTEXT_TIMESTAMP, 0))
    
    def get_string(self, key: str, default: str = "") -> str:
        value = self.context.get(key)
        return value if isinstance(value, str) else default


def build_context(
    entity_key_name: str,
    entity_key: str,
    content_id: str,
    tx_hash: str,
    timestamp: int,
    tag1: Optional[str] = None,
    tag2: Optional[str] = None,
) -> Dict[str, Any]:
    """Context map for a fetch request; tags are echoed as "" when unset."""
    context: Dict[str, Any] = {
        entity_key_name: entity_key,
        CONTEXT_CID: content_id,
        CONTEXT_TX_HASH: tx_hash,
        CONTEXT_TIMESTAMP: timestamp,
    }
    if tag1 is not None or tag2 is not None:
        context[CONTEXT_TAG1] = tag1 or ""
        context[CONTEXT_TAG2] = tag2 or ""
    return context
