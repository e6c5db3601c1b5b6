"""
Off-chain Links - Scheduling side of the off-chain boundary.

When an event carries a supported URI, the handler:

1. derives the link key "<txHash>:<contentId>",
2. stores it on the primary entity (forward reference),
3. hands one FetchRequest to the scheduler.

The completion handler derives the same key from the request's
context without ever talking to this module. Both sides must stay
pure functions of (transaction hash, content id).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from core.constants import KEY_SEPARATOR, URI_TYPE_IPFS
from events.models import EventContext
from offchain.models import FetchRequest, FileKind, StorageBackend, build_context
from offchain.uri import classify_uri


logger = logging.getLogger(__name__)


def file_link_key(tx_hash: str, content_id: str) -> str:
    """Forward reference from an Agent/Feedback to its parsed file."""
    return KEY_SEPARATOR.join((tx_hash, content_id))


@dataclass(frozen=True)
class PlannedFetch:
    """Link key to store now plus the request to schedule."""
    link_key: str
    request: FetchRequest


def plan_fetch(
    uri: Optional[str],
    kind: FileKind,
    entity_key_name: str,
    entity_key: str,
    context: EventContext,
    tag1: Optional[str] = None,
    tag2: Optional[str] = None,
) -> Optional[PlannedFetch]:
    """
    Decide whether an event's URI leads to an off-chain fetch.
    
    IPFS and Arweave are mutually exclusive: at most one request
    per event.
    
    Returns:
        PlannedFetch, or None for empty/unsupported URIs
    """
    classified = classify_uri(uri)
    if classified is None:
        return None
    
    backend = StorageBackend.IPFS if classified.scheme == URI_TYPE_IPFS else StorageBackend.ARWEAVE
    tx_hash = context.tx_hash_hex
    link_key = file_link_key(tx_hash, classified.content_id)
    
    request = FetchRequest(
        kind=kind,
        backend=backend,
        content_id=classified.content_id,
        context=build_context(
            entity_key_name,
            entity_key,
            content_id=classified.content_id,
            tx_hash=tx_hash,
            timestamp=context.block_timestamp,
            tag1=tag1,
            tag2=tag2,
        ),
    )
    logger.debug(f"Planned {backend.value} {kind.value} fetch {link_key} for {entity_key}")
    return PlannedFetch(link_key=link_key, request=request)
