"""
Shared fixtures for indexer tests.

============================================================
FIXTURES
============================================================
- engine / session_factory: in-memory SQLite Record Store
- session: a session for reading results back
- scheduler: queue that records every scheduled fetch
- chains: one supported chain (SEPOLIA) with registry addresses
- processor: EventProcessor wired to all of the above
- make_context: EventContext builder with sensible defaults

============================================================
"""

import itertools

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from events.models import EventContext
from factories import IDENTITY_REGISTRY, REPUTATION_REGISTRY, SEPOLIA, VALIDATION_REGISTRY
from indexer.chains import ChainConfig, ChainRegistry
from indexer.processor import EventProcessor
from offchain.scheduler import QueuedFetchScheduler
from storage.models import Base


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across sessions."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    
    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
    
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def scheduler():
    return QueuedFetchScheduler()


@pytest.fixture
def chains():
    return ChainRegistry({
        SEPOLIA: ChainConfig(
            chain_id=SEPOLIA,
            name="sepolia",
            identity_registry=IDENTITY_REGISTRY,
            reputation_registry=REPUTATION_REGISTRY,
            validation_registry=VALIDATION_REGISTRY,
        ),
    })


@pytest.fixture
def processor(session_factory, scheduler, chains):
    return EventProcessor(session_factory=session_factory, scheduler=scheduler, chains=chains)


@pytest.fixture
def make_context():
    """Build EventContexts with increasing block numbers and unique tx hashes."""
    counter = itertools.count(1)
    
    def _make(chain_id=SEPOLIA, timestamp=None, tx_hash=None):
        n = next(counter)
        return EventContext(
            chain_id=chain_id,
            block_number=n,
            block_timestamp=timestamp if timestamp is not None else 1_700_000_000 + n,
            transaction_hash=tx_hash or "0x" + f"{n:064x}",
        )
    
    return _make


@pytest.fixture
def load(session_factory):
    """Read one entity back through a fresh session."""
    def _load(model, key):
        with session_factory() as session:
            return session.get(model, key)
    
    return _load
