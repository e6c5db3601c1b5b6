"""
Gateway Fetchers - Retrieve off-chain payloads over HTTP.

One GET per request through a public or private gateway:
- IpfsGatewayFetcher:    <IPFS_GATEWAY_URL><cid>
- ArweaveGatewayFetcher: <ARWEAVE_GATEWAY_URL><txid>

No retries and no backoff: a failure raises OffchainFetchError
and the fetch worker drops the request.
"""

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Optional

import aiohttp

from offchain.exceptions import OffchainFetchError, PayloadTooLargeError
from offchain.models import StorageBackend


logger = logging.getLogger(__name__)


class BaseGatewayFetcher(ABC):
    """
    Abstract base class for HTTP gateway fetchers.
    
    Subclasses only decide the gateway URL; session handling,
    timeouts, status checks and the size limit live here.
    """
    
    DEFAULT_TIMEOUT = 30.0
    MAX_PAYLOAD_BYTES = 1024 * 1024
    
    def __init__(
        self,
        gateway_url: str,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
        max_payload_bytes: int = MAX_PAYLOAD_BYTES,
    ) -> None:
        self._gateway_url = gateway_url if gateway_url.endswith("/") else gateway_url + "/"
        if timeout is None:
            timeout = float(os.getenv("OFFCHAIN_FETCH_TIMEOUT", self.DEFAULT_TIMEOUT))
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._max_payload_bytes = max_payload_bytes
        self._requests_total = 0
        self._failures_total = 0
        self._last_latency_ms: Optional[float] = None
    
    @property
    @abstractmethod
    def backend(self) -> StorageBackend:
        """Storage backend served by this fetcher."""
        pass
    
    def url_for(self, content_id: str) -> str:
        return f"{self._gateway_url}{content_id}"
    
    async def fetch(self, content_id: str) -> bytes:
        """
        Retrieve the raw payload.
        
        Raises:
            OffchainFetchError: timeout, transport error, HTTP status >= 400
            PayloadTooLargeError: payload above the size limit
        """
        url = self.url_for(content_id)
        session = await self._get_session()
        self._requests_total += 1
        start_time = time.time()
        
        try:
            async with session.get(url) as response:
                self._last_latency_ms = (time.time() - start_time) * 1000
                
                if response.status >= 400:
                    raise OffchainFetchError(
                        message=f"Gateway returned HTTP {response.status}",
                        content_id=content_id,
                        backend=self.backend.value,
                        status_code=response.status,
                        request_url=url,
                    )
                
                body = await response.content.read(self._max_payload_bytes + 1)
                if len(body) > self._max_payload_bytes:
                    raise PayloadTooLargeError(
                        message=f"Payload exceeds {self._max_payload_bytes} bytes",
                        content_id=content_id,
                        backend=self.backend.value,
                        request_url=url,
                    )
                
                logger.debug(
                    f"[{self.backend.value}] Fetched {len(body)} bytes for {content_id} "
                    f"in {self._last_latency_ms:.0f}ms"
                )
                return body
        
        except OffchainFetchError:
            self._failures_total += 1
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._failures_total += 1
            raise OffchainFetchError(
                message=f"Transport error: {e}",
                content_id=content_id,
                backend=self.backend.value,
                request_url=url,
                original_error=e,
            ) from e
    
    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"Accept": "application/json, */*"},
            )
            self._owns_session = True
        return self._session
    
    async def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
    
    def get_stats(self) -> dict:
        return {
            "backend": self.backend.value,
            "requests_total": self._requests_total,
            "failures_total": self._failures_total,
            "last_latency_ms": self._last_latency_ms,
        }


class IpfsGatewayFetcher(BaseGatewayFetcher):
    """Fetch IPFS content through an HTTP gateway."""
    
    DEFAULT_GATEWAY = "https://ipfs.io/ipfs/"
    
    def __init__(self, gateway_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(
            gateway_url or os.getenv("IPFS_GATEWAY_URL", self.DEFAULT_GATEWAY),
            **kwargs,
        )
    
    @property
    def backend(self) -> StorageBackend:
        return StorageBackend.IPFS


class ArweaveGatewayFetcher(BaseGatewayFetcher):
    """Fetch Arweave transaction data through an HTTP gateway."""
    
    DEFAULT_GATEWAY = "https://arweave.net/"
    
    def __init__(self, gateway_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(
            gateway_url or os.getenv("ARWEAVE_GATEWAY_URL", self.DEFAULT_GATEWAY),
            **kwargs,
        )
    
    @property
    def backend(self) -> StorageBackend:
        return StorageBackend.ARWEAVE
