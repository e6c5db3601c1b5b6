"""
Chain Configuration Lookup.

Answers, for a chain id: is it supported, what is it called, and
where are the registry contracts deployed.

The built-in table lists the supported chains. Registry addresses
are deployment specific and come from the JSON file named by
CHAIN_CONFIG_PATH:

    {
        "11155111": {
            "name": "sepolia",
            "identityRegistry": "0x...",
            "reputationRegistry": "0x...",
            "validationRegistry": "0x..."
        }
    }

Entries in the file override or extend the built-in table.
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterator, Optional

from dotenv import load_dotenv

from core.exceptions import ChainNotSupportedError, InvalidConfigError


load_dotenv()

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainConfig:
    """Static configuration of one supported chain."""
    chain_id: int
    name: str
    identity_registry: Optional[str] = None
    reputation_registry: Optional[str] = None
    validation_registry: Optional[str] = None


BUILTIN_CHAINS: Dict[int, str] = {
    1: "mainnet",
    11155111: "sepolia",
    8453: "base",
    84532: "base-sepolia",
    137: "polygon",
    80002: "polygon-amoy",
    59144: "linea",
    59141: "linea-sepolia",
}


class ChainRegistry:
    """Lookup table of supported chains."""
    
    def __init__(self, chains: Optional[Dict[int, ChainConfig]] = None) -> None:
        if chains is None:
            chains = {
                chain_id: ChainConfig(chain_id=chain_id, name=name)
                for chain_id, name in BUILTIN_CHAINS.items()
            }
        self._chains = dict(chains)
    
    @classmethod
    def from_env(cls) -> "ChainRegistry":
        """Built-in chains, overlaid with CHAIN_CONFIG_PATH if set."""
        registry = cls()
        path = os.getenv("CHAIN_CONFIG_PATH")
        if path:
            registry.load_file(Path(path))
        return registry
    
    def load_file(self, path: Path) -> None:
        """
        Overlay chain entries from a JSON file.
        
        Raises:
            InvalidConfigError: unreadable file or malformed entry
        """
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            raise InvalidConfigError("CHAIN_CONFIG_PATH", str(path), str(e)) from e
        
        if not isinstance(data, dict):
            raise InvalidConfigError("CHAIN_CONFIG_PATH", str(path), "top level must be an object")
        
        for raw_id, entry in data.items():
            try:
                chain_id = int(raw_id)
            except ValueError as e:
                raise InvalidConfigError("chainId", raw_id, "not an integer") from e
            if not isinstance(entry, dict):
                raise InvalidConfigError(f"chains.{raw_id}", entry, "entry must be an object")
            
            base = self._chains.get(chain_id) or ChainConfig(
                chain_id=chain_id, name=BUILTIN_CHAINS.get(chain_id, str(chain_id))
            )
            self._chains[chain_id] = replace(
                base,
                name=entry.get("name", base.name),
                identity_registry=_address(entry.get("identityRegistry"), base.identity_registry),
                reputation_registry=_address(entry.get("reputationRegistry"), base.reputation_registry),
                validation_registry=_address(entry.get("validationRegistry"), base.validation_registry),
            )
        
        logger.info(f"Loaded chain configuration from {path} ({len(data)} entries)")
    
    def get(self, chain_id: int) -> Optional[ChainConfig]:
        return self._chains.get(chain_id)
    
    def require(self, chain_id: int) -> ChainConfig:
        """
        Raises:
            ChainNotSupportedError: chain is not in the table
        """
        config = self._chains.get(chain_id)
        if config is None:
            raise ChainNotSupportedError(chain_id)
        return config
    
    def is_supported(self, chain_id: int) -> bool:
        return chain_id in self._chains
    
    def __iter__(self) -> Iterator[ChainConfig]:
        return iter(self._chains.values())
    
    def __len__(self) -> int:
        return len(self._chains)


def _address(value: Optional[str], default: Optional[str]) -> Optional[str]:
    if value is None:
        return default
    return value.lower()
