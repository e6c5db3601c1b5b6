"""
Tests for URI classification.
"""

import pytest

from factories import ARWEAVE_TX_ID, IPFS_CID
from offchain.uri import (
    classify_uri,
    determine_uri_type,
    extract_arweave_tx_id,
    extract_ipfs_hash,
    is_arweave_uri,
    is_ipfs_uri,
)


CID_V1 = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"


class TestIpfs:
    
    @pytest.mark.parametrize("uri,expected", [
        (f"ipfs://{IPFS_CID}", IPFS_CID),
        (f"ipfs://ipfs/{IPFS_CID}", IPFS_CID),
        (f"ipfs://{CID_V1}/agent.json", f"{CID_V1}/agent.json"),
        (f"https://ipfs.io/ipfs/{IPFS_CID}", IPFS_CID),
        (f"https://gateway.pinata.cloud/ipfs/{IPFS_CID}?filename=a.json", IPFS_CID),
        (IPFS_CID, IPFS_CID),
        (CID_V1, CID_V1),
    ])
    def test_extracts_content_id(self, uri, expected):
        assert extract_ipfs_hash(uri) == expected
        assert is_ipfs_uri(uri)
    
    @pytest.mark.parametrize("uri", ["", "https://example.com/agent.json", "Qm123", f"ar://{ARWEAVE_TX_ID}"])
    def test_not_ipfs(self, uri):
        assert extract_ipfs_hash(uri) == ""
        assert not is_ipfs_uri(uri)


class TestArweave:
    
    @pytest.mark.parametrize("uri,expected", [
        (f"ar://{ARWEAVE_TX_ID}", ARWEAVE_TX_ID),
        (f"https://arweave.net/{ARWEAVE_TX_ID}", ARWEAVE_TX_ID),
        (f"https://gw.arweave.net/{ARWEAVE_TX_ID}#meta", ARWEAVE_TX_ID),
    ])
    def test_extracts_tx_id(self, uri, expected):
        assert extract_arweave_tx_id(uri) == expected
        assert is_arweave_uri(uri)
    
    @pytest.mark.parametrize("uri", ["", "https://arweave.net/short", "https://notarweave.net.evil.com/x"])
    def test_not_arweave(self, uri):
        assert not is_arweave_uri(uri)


class TestClassify:
    """Classification is mutually exclusive, IPFS first."""
    
    def test_ipfs(self):
        classified = classify_uri(f"ipfs://{IPFS_CID}")
        
        assert classified.scheme == "ipfs"
        assert classified.content_id == IPFS_CID
    
    def test_arweave(self):
        classified = classify_uri(f"ar://{ARWEAVE_TX_ID}")
        
        assert classified.scheme == "arweave"
        assert classified.content_id == ARWEAVE_TX_ID
    
    def test_arweave_gateway_path_is_not_ipfs(self):
        assert classify_uri(f"https://arweave.net/{ARWEAVE_TX_ID}").scheme == "arweave"
    
    @pytest.mark.parametrize("uri", [None, "", "data:application/json;base64,e30=", "https://example.com"])
    def test_unknown(self, uri):
        assert classify_uri(uri) is None
        assert determine_uri_type(uri) == "unknown"
