"""
Off-chain Package - The boundary to content-addressed storage.

Features:
- URI classification (IPFS / Arweave, mutually exclusive)
- Fetch requests carrying the context needed to rebuild record keys
- In-process fetch queue
- aiohttp gateway fetchers (single attempt, no retries)
- Fetch worker that runs the isolated completion handlers

Quick Start:
    scheduler = QueuedFetchScheduler()
    processor = EventProcessor(scheduler=scheduler)
    processor.process(event)
    
    worker = OffchainFetchWorker(scheduler)
    await worker.drain()
"""

from offchain.exceptions import OffchainFetchError, PayloadTooLargeError
from offchain.fetchers import ArweaveGatewayFetcher, BaseGatewayFetcher, IpfsGatewayFetcher
from offchain.models import FetchRequest, FileKind, StorageBackend, build_context
from offchain.scheduler import FetchScheduler, QueuedFetchScheduler
from offchain.uri import (
    ClassifiedUri,
    classify_uri,
    determine_uri_type,
    extract_arweave_tx_id,
    extract_ipfs_hash,
    is_arweave_uri,
    is_ipfs_uri,
)

__all__ = [
    "ClassifiedUri",
    "classify_uri",
    "determine_uri_type",
    "extract_ipfs_hash",
    "extract_arweave_tx_id",
    "is_ipfs_uri",
    "is_arweave_uri",
    "FetchRequest",
    "FileKind",
    "StorageBackend",
    "build_context",
    "FetchScheduler",
    "QueuedFetchScheduler",
    "BaseGatewayFetcher",
    "IpfsGatewayFetcher",
    "ArweaveGatewayFetcher",
    "OffchainFetchError",
    "PayloadTooLargeError",
]
