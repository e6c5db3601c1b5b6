"""
Identity Registry Domain ORM Models.

============================================================
PURPOSE
============================================================
Models derived from identity registry events: the agent
identity token and its on-chain metadata attributes.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Source: Registered, MetadataSet, UriUpdated, Transfer, Approval
- Mutability: UPDATED FORWARD ONLY, never deleted
- Off-chain file processing never writes these tables

============================================================
MODELS
============================================================
- Agent: One identity token, keyed "<chainId>:<tokenId>"
- AgentMetadata: One on-chain key/value attribute of an agent

============================================================
"""

from typing import List, Optional

from sqlalchemy import BigInteger, ForeignKey, Index, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, BigIntText, BlockTimestampMixin, JsonList, empty_list


class Agent(Base, BlockTimestampMixin):
    """
    Agent identity.
    
    ============================================================
    KEY
    ============================================================
    "<chainId>:<tokenId>"
    
    ============================================================
    OFF-CHAIN LINK
    ============================================================
    registration_file holds the key the parsed registration
    file WILL be stored under. It is set before the fetch is
    requested and may point at a record that never appears;
    it is a plain lookup key, not a foreign key.
    
    ============================================================
    """
    
    __tablename__ = "agents"
    
    id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        comment="<chainId>:<tokenId>"
    )
    
    chain_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Chain the identity registry lives on"
    )
    
    agent_id: Mapped[int] = mapped_column(
        BigIntText,
        nullable=False,
        comment="ERC-721 token id"
    )
    
    owner: Mapped[str] = mapped_column(
        String(42),
        nullable=False,
        comment="Current token owner (lowercase hex)"
    )
    
    agent_uri: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Token URI pointing at the registration file"
    )
    
    agent_uri_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="unknown",
        comment="ipfs | arweave | unknown"
    )
    
    operators: Mapped[List[str]] = mapped_column(
        JsonList,
        nullable=False,
        default=empty_list,
        comment="Approved operator addresses (set)"
    )
    
    total_feedback: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        comment="Feedback count, decremented on revocation"
    )
    
    last_activity: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block timestamp of last registration or feedback"
    )
    
    registration_file: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Link key <txHash>:<cid> of the parsed registration file"
    )
    
    __table_args__ = (
        Index("idx_agents_chain", "chain_id"),
        Index("idx_agents_owner", "owner"),
    )
    
    def __repr__(self) -> str:
        return f"<Agent {self.id} owner={self.owner}>"


class AgentMetadata(Base):
    """
    On-chain metadata attribute of an agent.
    
    Keyed "<agentKey>:<metadataKey>"; setting the same key again
    overwrites the value.
    """
    
    __tablename__ = "agent_metadata"
    
    id: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
        comment="<agentKey>:<metadataKey>"
    )
    
    agent_key: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("agents.id"),
        nullable=False,
        comment="Owning agent"
    )
    
    key: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Metadata key as emitted on-chain"
    )
    
    value: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
        comment="Raw metadata value bytes"
    )
    
    updated_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block timestamp of last write"
    )
    
    __table_args__ = (
        Index("idx_agent_metadata_agent", "agent_key"),
    )
