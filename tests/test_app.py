"""
Tests for the replay command line.
"""

import json
from unittest.mock import AsyncMock

import pytest

import app
from database.engine import reset_engine
from factories import IPFS_CID
from offchain.fetchers import IpfsGatewayFetcher


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'replay.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.delenv("CHAIN_CONFIG_PATH", raising=False)
    yield url
    reset_engine()


def write_events(path, records):
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n\n")


def event(name, args, block):
    return {
        "event": name,
        "chainId": 11155111,
        "blockNumber": block,
        "blockTimestamp": 1_700_000_000 + block,
        "transactionHash": "0x" + f"{block:064x}",
        "args": args,
    }


class TestReplayCommand:
    
    def test_replay_file(self, tmp_path, database_url, capsys):
        events_file = tmp_path / "events.jsonl"
        write_events(events_file, [
            event("Registered", {"agentId": 1, "owner": "0x1111111111111111111111111111111111111111", "tokenURI": ""}, 1),
            event("NewFeedback", {
                "agentId": 1,
                "clientAddress": "0x2222222222222222222222222222222222222222",
                "score": 90,
                "feedbackHash": "0x" + "00" * 32,
            }, 2),
        ])
        
        exit_code = app.main(["--database-url", database_url, "replay", str(events_file)])
        
        assert exit_code == 0
        output = capsys.readouterr().out
        assert "Events:     2" in output
        assert "Applied     2" in output
    
    def test_bad_lines_are_skipped(self, tmp_path, database_url, capsys):
        events_file = tmp_path / "events.jsonl"
        events_file.write_text(
            "{broken\n"
            + json.dumps({"event": "Nope"}) + "\n"
            + json.dumps(event("Registered", {"agentId": 1, "owner": "0x1111111111111111111111111111111111111111"}, 1))
            + "\n"
        )
        
        exit_code = app.main(["--database-url", database_url, "replay", str(events_file)])
        
        assert exit_code == 0
        assert "Events:     1" in capsys.readouterr().out
    
    def test_counts(self, database_url, capsys):
        app.main(["--database-url", database_url, "init-db"])
        exit_code = app.main(["--database-url", database_url, "counts"])
        
        assert exit_code == 0
        assert "agents" in capsys.readouterr().out
    
    def test_replay_with_fetch_drains_scheduled_files(self, tmp_path, database_url, monkeypatch, capsys):
        fetch = AsyncMock(return_value=json.dumps({"name": "Replayed Agent"}).encode())
        monkeypatch.setattr(IpfsGatewayFetcher, "fetch", fetch)
        events_file = tmp_path / "events.jsonl"
        write_events(events_file, [
            event("Registered", {
                "agentId": 1,
                "owner": "0x1111111111111111111111111111111111111111",
                "tokenURI": f"ipfs://{IPFS_CID}",
            }, 1),
        ])
        
        exit_code = app.main(["--database-url", database_url, "replay", str(events_file), "--fetch"])
        
        assert exit_code == 0
        fetch.assert_awaited_once_with(IPFS_CID)
        output = capsys.readouterr().out
        assert "Fetches:    1 pending" in output
        assert "Stored:     1" in output
