"""
URI Classification - Map a token/feedback URI to its storage backend.

Pure string-pattern functions, no I/O.

IPFS:
    ipfs://<cid>[/path]
    https://<gateway>/ipfs/<cid>[/path]
    bare CIDv0 (Qm...) or CIDv1 (b...)
Arweave:
    ar://<txid>
    https://arweave.net/<txid>, https://<sub>.arweave.net/<txid>

IPFS is tested first; a URI is never classified as both.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from core.constants import URI_TYPE_ARWEAVE, URI_TYPE_IPFS, URI_TYPE_UNKNOWN


_CID_V0 = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")
_CID_V1 = re.compile(r"^b[a-z2-7]{50,}$")
_ARWEAVE_TX_ID = re.compile(r"^[A-Za-z0-9_-]{43}$")


@dataclass(frozen=True)
class ClassifiedUri:
    """Result of classifying a supported URI."""
    scheme: str
    content_id: str


def _strip_suffix(value: str) -> str:
    for marker in ("?", "#"):
        if marker in value:
            value = value.split(marker, 1)[0]
    return value.rstrip("/")


def extract_ipfs_hash(uri: str) -> str:
    """Content id (CID plus optional path) of an IPFS URI, or "" if not IPFS."""
    uri = uri.strip()
    if uri.lower().startswith("ipfs://"):
        rest = uri[len("ipfs://"):]
        if rest.lower().startswith("ipfs/"):
            rest = rest[len("ipfs/"):]
        return _strip_suffix(rest)
    
    if uri.lower().startswith(("http://", "https://")):
        path = urlsplit(uri).path
        if "/ipfs/" in path:
            return _strip_suffix(path.split("/ipfs/", 1)[1])
        return ""
    
    if _CID_V0.match(uri) or _CID_V1.match(uri):
        return uri
    return ""


def is_ipfs_uri(uri: str) -> bool:
    return bool(uri) and extract_ipfs_hash(uri) != ""


def extract_arweave_tx_id(uri: str) -> str:
    """Transaction id of an Arweave URI, or "" if not Arweave."""
    uri = uri.strip()
    if uri.lower().startswith("ar://"):
        return _strip_suffix(uri[len("ar://"):])
    
    if uri.lower().startswith(("http://", "https://")):
        parts = urlsplit(uri)
        host = (parts.hostname or "").lower()
        if host == "arweave.net" or host.endswith(".arweave.net"):
            tx_id = _strip_suffix(parts.path.lstrip("/"))
            if tx_id and _ARWEAVE_TX_ID.match(tx_id.split("/", 1)[0]):
                return tx_id
    return ""


def is_arweave_uri(uri: str) -> bool:
    return bool(uri) and extract_arweave_tx_id(uri) != ""


def classify_uri(uri: Optional[str]) -> Optional[ClassifiedUri]:
    """Classify a URI; None for unknown or empty."""
    if not uri:
        return None
    
    ipfs_hash = extract_ipfs_hash(uri)
    if ipfs_hash:
        return ClassifiedUri(scheme=URI_TYPE_IPFS, content_id=ipfs_hash)
    
    arweave_tx_id = extract_arweave_tx_id(uri)
    if arweave_tx_id:
        return ClassifiedUri(scheme=URI_TYPE_ARWEAVE, content_id=arweave_tx_id)
    
    return None


def determine_uri_type(uri: Optional[str]) -> str:
    """ipfs | arweave | unknown"""
    classified = classify_uri(uri)
    return classified.scheme if classified else URI_TYPE_UNKNOWN
