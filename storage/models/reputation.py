"""
Reputation Registry Domain ORM Models.

============================================================
PURPOSE
============================================================
Models derived from reputation registry events.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Feedback: created on NewFeedback, only the revocation
  fields ever change afterwards
- FeedbackResponse: IMMUTABLE once created

============================================================
"""

from typing import Optional

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base


class Feedback(Base):
    """
    A client's feedback on an agent.
    
    Keyed "<agentKey>:<clientAddress>:<sequence>" where sequence
    is the agent's feedback counter + 1 at submission time.
    """
    
    __tablename__ = "feedback"
    
    id: Mapped[str] = mapped_column(
        String(200),
        primary_key=True,
        comment="<agentKey>:<client>:<sequence>"
    )
    
    agent_key: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("agents.id"),
        nullable=False,
        comment="Agent the feedback is about"
    )
    
    client_address: Mapped[str] = mapped_column(
        String(42),
        nullable=False,
        comment="Submitting client (lowercase hex)"
    )
    
    score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Score 0-100"
    )
    
    tag1: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="First on-chain tag, decoded"
    )
    
    tag2: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Second on-chain tag, decoded"
    )
    
    feedback_uri: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="URI of the off-chain feedback file"
    )
    
    feedback_uri_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="unknown",
        comment="ipfs | arweave | unknown"
    )
    
    feedback_hash: Mapped[Optional[bytes]] = mapped_column(
        LargeBinary,
        nullable=True,
        comment="Hash committed on-chain for the feedback file"
    )
    
    is_revoked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Set once by FeedbackRevoked"
    )
    
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block timestamp of submission"
    )
    
    revoked_at: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        comment="Block timestamp of revocation"
    )
    
    feedback_file: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Link key <txHash>:<cid> of the parsed feedback file"
    )
    
    __table_args__ = (
        Index("idx_feedback_agent", "agent_key"),
        Index("idx_feedback_client", "client_address"),
    )
    
    def __repr__(self) -> str:
        return f"<Feedback {self.id} score={self.score} revoked={self.is_revoked}>"


class FeedbackResponse(Base):
    """Response appended to a feedback, keyed "<feedbackKey>:<timestamp>"."""
    
    __tablename__ = "feedback_responses"
    
    id: Mapped[str] = mapped_column(
        String(240),
        primary_key=True,
        comment="<feedbackKey>:<blockTimestamp>"
    )
    
    feedback_key: Mapped[str] = mapped_column(
        String(200),
        ForeignKey("feedback.id"),
        nullable=False,
        comment="Parent feedback"
    )
    
    responder: Mapped[str] = mapped_column(
        String(42),
        nullable=False,
        comment="Responding address"
    )
    
    response_uri: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="URI of the response payload"
    )
    
    response_hash: Mapped[Optional[bytes]] = mapped_column(
        LargeBinary,
        nullable=True,
        comment="Hash committed on-chain for the response"
    )
    
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block timestamp"
    )
    
    __table_args__ = (
        Index("idx_feedback_responses_feedback", "feedback_key"),
    )
