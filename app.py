#!/usr/bin/env python3
"""
Agent Registry Indexer - Command Line Entry Point.

============================================================
COMMANDS
============================================================
replay   Apply a JSON-lines file of host events, in file order
init-db  Create all tables
counts   Print row counts per table

============================================================
USAGE
============================================================
    python app.py replay events.jsonl
    python app.py replay events.jsonl --fetch
    python app.py --database-url sqlite:///indexer.db counts

Each line of the replay file is one event record:

    {"event": "Registered", "chainId": 11155111, "blockNumber": 1,
     "blockTimestamp": 1700000000, "transactionHash": "0x...",
     "logIndex": 0, "args": {"agentId": 1, "owner": "0x...",
     "tokenURI": "ipfs://Qm..."}}

============================================================
ENVIRONMENT
============================================================
DATABASE_URL, DATABASE_ECHO, CHAIN_CONFIG_PATH, LOG_LEVEL,
IPFS_GATEWAY_URL, ARWEAVE_GATEWAY_URL, OFFCHAIN_FETCH_TIMEOUT

============================================================
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Iterator, List, Optional

from dotenv import load_dotenv

from core.exceptions import EventDecodingError, IndexerException
from database.engine import create_all_tables, get_session_factory, get_table_row_counts, reset_engine
from events.decoding import RegistryEvent, decode_event
from indexer.chains import ChainRegistry
from indexer.processor import EventProcessor
from offchain.scheduler import QueuedFetchScheduler
from offchain.worker import OffchainFetchWorker


load_dotenv()

logger = logging.getLogger("app")


# ============================================================
# LOGGING
# ============================================================

def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="agent-registry-indexer",
        description="Agent identity and reputation registry indexer",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy database URL (default: $DATABASE_URL)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )
    
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    replay = subparsers.add_parser("replay", help="Replay a JSON-lines event file")
    replay.add_argument("events_file", type=Path, help="Path to the .jsonl event file")
    replay.add_argument(
        "--fetch",
        action="store_true",
        help="Fetch and parse scheduled off-chain files after the replay",
    )
    replay.add_argument(
        "--fetch-limit",
        type=int,
        default=None,
        metavar="N",
        help="Process at most N fetch requests",
    )
    
    subparsers.add_parser("init-db", help="Create all tables")
    subparsers.add_parser("counts", help="Print row counts per table")
    
    return parser


# ============================================================
# REPLAY
# ============================================================

def read_events(path: Path) -> Iterator[RegistryEvent]:
    """
    Decode events from a JSON-lines file.
    
    Blank lines are skipped. A line that does not decode is
    logged and skipped; the rest of the file still replays.
    """
    with path.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, 1):
            line = line.strip()
            if not line:
                continue
            try:
                yield decode_event(json.loads(line))
            except json.JSONDecodeError as e:
                logger.error(f"{path}:{line_number}: invalid JSON: {e}")
            except EventDecodingError as e:
                logger.error(f"{path}:{line_number}: {e}")


def run_replay(args: argparse.Namespace) -> int:
    create_all_tables()
    
    scheduler = QueuedFetchScheduler()
    processor = EventProcessor(
        session_factory=get_session_factory(),
        scheduler=scheduler,
        chains=ChainRegistry.from_env(),
    )
    
    results = processor.process_all(read_events(args.events_file))
    
    print()
    print("=" * 60)
    print("  REPLAY SUMMARY")
    print("=" * 60)
    print(f"  Events:     {len(results)}")
    for outcome, count in processor.get_stats().items():
        print(f"  {outcome.capitalize():11s} {count}")
    print(f"  Fetches:    {len(scheduler)} pending")
    print("=" * 60)
    
    if args.fetch and len(scheduler):
        report = asyncio.run(_drain(scheduler, args.fetch_limit))
        print(f"  Stored:     {report.stored}")
        print(f"  Not stored: {report.not_stored}")
        print(f"  Failed:     {report.fetch_failed + report.store_failed}")
        print("=" * 60)
    
    failed = [result for result in results if not result.succeeded]
    return 1 if failed else 0


async def _drain(scheduler: QueuedFetchScheduler, limit: Optional[int]):
    worker = OffchainFetchWorker(scheduler, session_factory=get_session_factory())
    try:
        return await worker.drain(limit=limit)
    finally:
        await worker.close()


# ============================================================
# TABLES
# ============================================================

def run_init_db(args: argparse.Namespace) -> int:
    create_all_tables()
    print("Tables created")
    return 0


def run_counts(args: argparse.Namespace) -> int:
    for table, count in get_table_row_counts().items():
        print(f"{table:30s} {count}")
    return 0


COMMANDS = {
    "replay": run_replay,
    "init-db": run_init_db,
    "counts": run_counts,
}


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.
    
    Args:
        argv: Command line arguments (default: sys.argv[1:])
        
    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    
    setup_logging(args.log_level)
    
    if args.database_url:
        os.environ["DATABASE_URL"] = args.database_url
        reset_engine()
    
    try:
        return COMMANDS[args.command](args)
    except IndexerException as e:
        logger.error(f"Fatal error: {e}", extra={"error": e.to_dict()})
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
