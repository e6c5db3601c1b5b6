"""
Test data builders for registry events.
"""

from events.models import (
    Approval,
    EventContext,
    FeedbackRevoked,
    NewFeedback,
    Registered,
    ResponseAppended,
)


SEPOLIA = 11155111
UNSUPPORTED_CHAIN = 424242

IDENTITY_REGISTRY = "0x8004a6090cd10a7288092483047b097295fb8847"
REPUTATION_REGISTRY = "0x8004b8fd1a363aa02fdc07635c0c5f94f6af5b7e"
VALIDATION_REGISTRY = "0x8004cb39f29c09145f24ad9dde2a108c1a2cdfc5"

OWNER = "0x1111111111111111111111111111111111111111"
CLIENT = "0x2222222222222222222222222222222222222222"
OPERATOR = "0x3333333333333333333333333333333333333333"
RESPONDER = "0x4444444444444444444444444444444444444444"

IPFS_CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"
ARWEAVE_TX_ID = "bNbA3TEQVL60xlgCcqdz4ZPHFZ711cZ3hmkpGttDt_U"

ZERO_TAG = bytes(32)


def tag(text: str) -> bytes:
    """Right-pad text to a 32-byte on-chain tag."""
    return text.encode("utf-8").ljust(32, b"\x00")


def registered(ctx: EventContext, agent_id: int = 1, uri: str = "", owner: str = OWNER) -> Registered:
    return Registered(context=ctx, agent_id=agent_id, owner=owner, token_uri=uri)


def new_feedback(
    ctx: EventContext,
    agent_id: int = 1,
    score: int = 80,
    tag1: bytes = ZERO_TAG,
    tag2: bytes = ZERO_TAG,
    uri: str = "",
    client: str = CLIENT,
) -> NewFeedback:
    return NewFeedback(
        context=ctx,
        agent_id=agent_id,
        client_address=client,
        score=score,
        tag1=tag1,
        tag2=tag2,
        feedback_uri=uri,
        feedback_hash=bytes(32),
    )


def revoked(ctx: EventContext, agent_id: int = 1, index: int = 1, client: str = CLIENT) -> FeedbackRevoked:
    return FeedbackRevoked(context=ctx, agent_id=agent_id, client_address=client, feedback_index=index)


def response(ctx: EventContext, agent_id: int = 1, index: int = 1, client: str = CLIENT) -> ResponseAppended:
    return ResponseAppended(
        context=ctx,
        agent_id=agent_id,
        client_address=client,
        feedback_index=index,
        responder=RESPONDER,
        response_uri="ipfs://" + IPFS_CID,
        response_hash=bytes(32),
    )


def approval(ctx: EventContext, approved: str, token_id: int = 1) -> Approval:
    return Approval(context=ctx, owner=OWNER, approved=approved, token_id=token_id)
