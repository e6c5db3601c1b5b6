"""
Off-chain File Domain ORM Models.

============================================================
PURPOSE
============================================================
Parsed content of off-chain registration and feedback files.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Source: off-chain fetch completion (IPFS or Arweave)
- Mutability: IMMUTABLE, written once by the parser
- May never exist: the fetch can fail or never resolve
- Key: "<originatingTxHash>:<contentId>", recomputed by the
  completion handler from the fetch context

The agent/feedback columns here are plain strings copied from
the fetch context; file processing never reads or writes the
primary entities.

============================================================
"""

from typing import List, Optional

from sqlalchemy import BigInteger, Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, BigIntText, JsonList, empty_list


class AgentRegistrationFile(Base):
    """Parsed agent registration file."""
    
    __tablename__ = "agent_registration_files"
    
    id: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
        comment="<txHash>:<cid>"
    )
    
    cid: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="IPFS CID or Arweave transaction id"
    )
    
    agent_key: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Agent key echoed from the fetch context"
    )
    
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block timestamp of the event that requested the fetch"
    )
    
    # Scalar fields, each independently optional
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Agent name")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Agent description")
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Image URI")
    active: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, comment="Active flag")
    x402support: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, comment="x402 payments flag")
    
    supported_trusts: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="Trust models"
    )
    
    # MCP endpoint
    mcp_endpoint: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="MCP endpoint URL")
    mcp_version: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="MCP version")
    mcp_tools: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="MCP tool names"
    )
    mcp_prompts: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="MCP prompt names"
    )
    mcp_resources: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="MCP resource names"
    )
    
    # A2A endpoint
    a2a_endpoint: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="A2A endpoint URL")
    a2a_version: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="A2A version")
    a2a_skills: Mapped[List[str]] = mapped_column(
        JsonList, nullable=False, default=empty_list, comment="A2A skill names"
    )
    
    # Linked identifiers
    agent_wallet: Mapped[Optional[str]] = mapped_column(
        String(42), nullable=True, comment="Agent wallet address"
    )
    agent_wallet_chain_id: Mapped[Optional[int]] = mapped_column(
        BigIntText, nullable=True, comment="EIP-155 chain id of the wallet"
    )
    ens: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="ENS name")
    did: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Decentralized identifier")
    
    __table_args__ = (
        Index("idx_registration_files_agent", "agent_key"),
        Index("idx_registration_files_cid", "cid"),
    )
    
    def __repr__(self) -> str:
        return f"<AgentRegistrationFile {self.id} name={self.name!r}>"


class FeedbackFile(Base):
    """Parsed off-chain feedback file."""
    
    __tablename__ = "feedback_files"
    
    id: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
        comment="<txHash>:<cid>"
    )
    
    cid: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="IPFS CID or Arweave transaction id"
    )
    
    feedback_key: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Feedback key echoed from the fetch context"
    )
    
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block timestamp of the feedback event"
    )
    
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Free-form feedback text")
    capability: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Capability rated")
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Tool/prompt/resource name")
    skill: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="A2A skill rated")
    task: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Task reference")
    context: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Context as JSON text")
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Score stated in the file")
    
    tag1: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="File tag1 or on-chain echo")
    tag2: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="File tag2 or on-chain echo")
    
    proof_of_payment_from: Mapped[Optional[str]] = mapped_column(
        String(42), nullable=True, comment="Payer address"
    )
    proof_of_payment_to: Mapped[Optional[str]] = mapped_column(
        String(42), nullable=True, comment="Payee address"
    )
    proof_of_payment_chain_id: Mapped[Optional[int]] = mapped_column(
        BigIntText, nullable=True, comment="Chain of the payment"
    )
    proof_of_payment_tx_hash: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Payment transaction hash"
    )
    
    __table_args__ = (
        Index("idx_feedback_files_feedback", "feedback_key"),
    )
