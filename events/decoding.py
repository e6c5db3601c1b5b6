"""
Event Decoding - Turn host event records (plain dicts) into typed events.

Record shape:

    {
        "event": "NewFeedback",
        "chainId": 11155111,
        "blockNumber": 5120001,
        "blockTimestamp": 1700000000,
        "transactionHash": "0xabc...",
        "logIndex": 3,
        "args": {"agentId": 7, "clientAddress": "0x...", ...}
    }

Integers may be given as JSON numbers or decimal/0x strings; bytes
values as 0x-prefixed hex strings.
"""

import logging
from typing import Any, Callable, Dict, Optional, Union

from core.exceptions import EventDecodingError
from events.models import (
    Approval,
    ApprovalForAll,
    EventContext,
    FeedbackRevoked,
    MetadataSet,
    NewFeedback,
    Registered,
    ResponseAppended,
    Transfer,
    UriUpdated,
    normalize_address,
)


logger = logging.getLogger(__name__)


RegistryEvent = Union[
    Registered,
    MetadataSet,
    UriUpdated,
    Transfer,
    Approval,
    ApprovalForAll,
    NewFeedback,
    FeedbackRevoked,
    ResponseAppended,
]


def _int(args: Dict[str, Any], name: str, event_name: str) -> int:
    value = _require(args, name, event_name)
    if isinstance(value, bool):
        raise EventDecodingError(f"Field {name} must be an integer", event_name)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError as e:
            raise EventDecodingError(
                f"Field {name} is not an integer: {value!r}", event_name, cause=e
            ) from e
    raise EventDecodingError(f"Field {name} must be an integer", event_name)


def _str(
    args: Dict[str, Any], name: str, event_name: str, default: Optional[str] = None
) -> str:
    if default is not None and name not in args:
        return default
    value = _require(args, name, event_name)
    if not isinstance(value, str):
        raise EventDecodingError(f"Field {name} must be a string", event_name)
    return value


def _address(args: Dict[str, Any], name: str, event_name: str) -> str:
    return normalize_address(_str(args, name, event_name))


def _bytes(args: Dict[str, Any], name: str, event_name: str) -> bytes:
    value = _str(args, name, event_name, default="0x")
    hex_part = value[2:] if value.lower().startswith("0x") else value
    try:
        return bytes.fromhex(hex_part)
    except ValueError as e:
        raise EventDecodingError(
            f"Field {name} is not hex: {value!r}", event_name, cause=e
        ) from e


def _bool(args: Dict[str, Any], name: str, event_name: str) -> bool:
    value = _require(args, name, event_name)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise EventDecodingError(f"Field {name} must be a boolean", event_name)


def _require(args: Dict[str, Any], name: str, event_name: str) -> Any:
    if name not in args or args[name] is None:
        raise EventDecodingError(f"Missing field: {name}", event_name)
    return args[name]


def _decode_registered(ctx: EventContext, a: Dict[str, Any]) -> Registered:
    n = "Registered"
    return Registered(
        context=ctx,
        agent_id=_int(a, "agentId", n),
        owner=_address(a, "owner", n),
        token_uri=_str(a, "tokenURI", n, default=""),
    )


def _decode_metadata_set(ctx: EventContext, a: Dict[str, Any]) -> MetadataSet:
    n = "MetadataSet"
    return MetadataSet(
        context=ctx,
        agent_id=_int(a, "agentId", n),
        key=_str(a, "key", n),
        value=_bytes(a, "value", n),
    )


def _decode_uri_updated(ctx: EventContext, a: Dict[str, Any]) -> UriUpdated:
    n = "UriUpdated"
    return UriUpdated(
        context=ctx,
        agent_id=_int(a, "agentId", n),
        new_uri=_str(a, "newUri", n, default=""),
        updated_by=normalize_address(_str(a, "updatedBy", n, default="")),
    )


def _decode_transfer(ctx: EventContext, a: Dict[str, Any]) -> Transfer:
    n = "Transfer"
    return Transfer(
        context=ctx,
        from_address=_address(a, "from", n),
        to_address=_address(a, "to", n),
        token_id=_int(a, "tokenId", n),
    )


def _decode_approval(ctx: EventContext, a: Dict[str, Any]) -> Approval:
    n = "Approval"
    return Approval(
        context=ctx,
        owner=_address(a, "owner", n),
        approved=_address(a, "approved", n),
        token_id=_int(a, "tokenId", n),
    )


def _decode_approval_for_all(ctx: EventContext, a: Dict[str, Any]) -> ApprovalForAll:
    n = "ApprovalForAll"
    return ApprovalForAll(
        context=ctx,
        owner=_address(a, "owner", n),
        operator=_address(a, "operator", n),
        approved=_bool(a, "approved", n),
    )


def _decode_new_feedback(ctx: EventContext, a: Dict[str, Any]) -> NewFeedback:
    n = "NewFeedback"
    return NewFeedback(
        context=ctx,
        agent_id=_int(a, "agentId", n),
        client_address=_address(a, "clientAddress", n),
        score=_int(a, "score", n),
        tag1=_bytes(a, "tag1", n),
        tag2=_bytes(a, "tag2", n),
        feedback_uri=_str(a, "feedbackUri", n, default=""),
        feedback_hash=_bytes(a, "feedbackHash", n),
    )


def _decode_feedback_revoked(ctx: EventContext, a: Dict[str, Any]) -> FeedbackRevoked:
    n = "FeedbackRevoked"
    return FeedbackRevoked(
        context=ctx,
        agent_id=_int(a, "agentId", n),
        client_address=_address(a, "clientAddress", n),
        feedback_index=_int(a, "feedbackIndex", n),
    )


def _decode_response_appended(ctx: EventContext, a: Dict[str, Any]) -> ResponseAppended:
    n = "ResponseAppended"
    return ResponseAppended(
        context=ctx,
        agent_id=_int(a, "agentId", n),
        client_address=_address(a, "clientAddress", n),
        feedback_index=_int(a, "feedbackIndex", n),
        responder=_address(a, "responder", n),
        response_uri=_str(a, "responseUri", n, default=""),
        response_hash=_bytes(a, "responseHash", n),
    )


DECODERS: Dict[str, Callable[[EventContext, Dict[str, Any]], RegistryEvent]] = {
    "Registered": _decode_registered,
    "MetadataSet": _decode_metadata_set,
    "UriUpdated": _decode_uri_updated,
    "Transfer": _decode_transfer,
    "Approval": _decode_approval,
    "ApprovalForAll": _decode_approval_for_all,
    "NewFeedback": _decode_new_feedback,
    "FeedbackRevoked": _decode_feedback_revoked,
    "ResponseAppended": _decode_response_appended,
}


def decode_event(record: Dict[str, Any]) -> RegistryEvent:
    """
    Decode one host event record.
    
    Raises:
        EventDecodingError: unknown event name, missing or mistyped field
    """
    if not isinstance(record, dict):
        raise EventDecodingError("Event record must be an object")
    
    name = record.get("event")
    decoder = DECODERS.get(name)
    if decoder is None:
        raise EventDecodingError(f"Unknown event: {name!r}", event_name=str(name))
    
    context = EventContext(
        chain_id=_int(record, "chainId", name),
        block_number=_int(record, "blockNumber", name),
        block_timestamp=_int(record, "blockTimestamp", name),
        transaction_hash=_str(record, "transactionHash", name).lower(),
        log_index=_int(record, "logIndex", name) if "logIndex" in record else 0,
        address=_address(record, "address", name) if record.get("address") is not None else None,
    )
    
    args = record.get("args") or {}
    if not isinstance(args, dict):
        raise EventDecodingError("Event args must be an object", event_name=name)
    
    return decoder(context, args)
