"""
Off-chain Fetch Worker - Host-side stand-in for the fetch subsystem.

Drains the QueuedFetchScheduler: fetch each payload through the
gateway for its backend, then hand the bytes to the completion
handler inside its own transaction.

Runs out of band from event processing. A failed fetch is logged
and dropped; the primary entity keeps pointing at a record that
will not exist.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy.orm import sessionmaker

from database.engine import transaction_scope
from metadata_parser.handlers import handle_completion
from offchain.exceptions import OffchainFetchError
from offchain.fetchers import ArweaveGatewayFetcher, BaseGatewayFetcher, IpfsGatewayFetcher
from offchain.models import FetchRequest, StorageBackend
from offchain.scheduler import QueuedFetchScheduler
from storage.repositories.exceptions import RepositoryException


logger = logging.getLogger(__name__)


@dataclass
class DrainReport:
    """Outcome counts of one drain() call."""
    stored: int = 0
    not_stored: int = 0
    fetch_failed: int = 0
    store_failed: int = 0
    
    @property
    def processed(self) -> int:
        return self.stored + self.not_stored + self.fetch_failed + self.store_failed


class OffchainFetchWorker:
    """
    Pops fetch requests and runs their completion handlers.
    
    Usage:
        worker = OffchainFetchWorker(scheduler)
        report = await worker.drain()
        await worker.close()
    """
    
    def __init__(
        self,
        scheduler: QueuedFetchScheduler,
        fetchers: Optional[Dict[StorageBackend, BaseGatewayFetcher]] = None,
        session_factory: Optional[sessionmaker] = None,
    ) -> None:
        self._scheduler = scheduler
        if fetchers is None:
            fetchers = {
                StorageBackend.IPFS: IpfsGatewayFetcher(),
                StorageBackend.ARWEAVE: ArweaveGatewayFetcher(),
            }
        self._fetchers = fetchers
        self._session_factory = session_factory
    
    async def drain(self, limit: Optional[int] = None) -> DrainReport:
        """Process pending requests, at most ``limit`` of them."""
        report = DrainReport()
        while limit is None or report.processed < limit:
            request = self._scheduler.pop()
            if request is None:
                break
            await self._process(request, report)
        
        logger.info(
            f"Fetch drain complete: stored={report.stored} not_stored={report.not_stored} "
            f"fetch_failed={report.fetch_failed} store_failed={report.store_failed}"
        )
        return report
    
    async def _process(self, request: FetchRequest, report: DrainReport) -> None:
        fetcher = self._fetchers.get(request.backend)
        if fetcher is None:
            logger.warning(f"No fetcher for backend {request.backend.value}, dropping {request.content_id}")
            report.fetch_failed += 1
            return
        
        try:
            content = await fetcher.fetch(request.content_id)
        except OffchainFetchError as e:
            logger.warning(
                f"Fetch failed, {request.kind.value} file will stay absent: {e}",
                extra={"fetch_error": e.to_dict()},
            )
            report.fetch_failed += 1
            return
        
        try:
            with transaction_scope(self._session_factory) as session:
                record = handle_completion(session, request, content)
        except RepositoryException as e:
            logger.error(f"Storing {request.kind.value} file failed: {e}", exc_info=True)
            report.store_failed += 1
            return
        
        if record is None:
            report.not_stored += 1
        else:
            report.stored += 1
    
    async def close(self) -> None:
        for fetcher in self._fetchers.values():
            await fetcher.close()
