"""
Tests for the supported-chain lookup.
"""

import json

import pytest

from core.exceptions import ChainNotSupportedError, InvalidConfigError
from indexer.chains import BUILTIN_CHAINS, ChainRegistry


class TestBuiltinChains:
    
    def test_builtin_table(self):
        registry = ChainRegistry()
        
        assert len(registry) == len(BUILTIN_CHAINS)
        assert registry.get(11155111).name == "sepolia"
        assert registry.get(8453).name == "base"
        assert registry.get(11155111).identity_registry is None
    
    def test_unsupported(self):
        registry = ChainRegistry()
        
        assert registry.get(424242) is None
        assert not registry.is_supported(424242)
        with pytest.raises(ChainNotSupportedError) as exc_info:
            registry.require(424242)
        assert exc_info.value.to_dict()["context"] == {"chain_id": 424242}
        assert exc_info.value.to_dict()["type"] == "ChainNotSupportedError"


class TestChainConfigFile:
    
    def test_file_adds_addresses(self, tmp_path, monkeypatch):
        path = tmp_path / "chains.json"
        path.write_text(json.dumps({
            "11155111": {
                "identityRegistry": "0x8004A6090Cd10A7288092483047B097295Fb8847",
                "reputationRegistry": "0x8004B8FD1A363aa02fDC07635C0c5F94f6Af5B7E",
            },
            "31337": {"name": "anvil"},
        }))
        monkeypatch.setenv("CHAIN_CONFIG_PATH", str(path))
        
        registry = ChainRegistry.from_env()
        
        sepolia = registry.require(11155111)
        assert sepolia.name == "sepolia"
        assert sepolia.identity_registry == "0x8004a6090cd10a7288092483047b097295fb8847"
        assert sepolia.validation_registry is None
        assert registry.require(31337).name == "anvil"
    
    def test_no_file_configured(self, monkeypatch):
        monkeypatch.delenv("CHAIN_CONFIG_PATH", raising=False)
        
        assert len(ChainRegistry.from_env()) == len(BUILTIN_CHAINS)
    
    @pytest.mark.parametrize("content", ["not json", "[]", '{"abc": {}}', '{"1": "mainnet"}'])
    def test_invalid_file(self, tmp_path, content):
        path = tmp_path / "chains.json"
        path.write_text(content)
        
        with pytest.raises(InvalidConfigError):
            ChainRegistry().load_file(path)
    
    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            ChainRegistry().load_file(tmp_path / "absent.json")
