"""
Events Package - Typed inbound registry events.

Identity registry: Registered, MetadataSet, UriUpdated, Transfer,
Approval, ApprovalForAll.
Reputation registry: NewFeedback, FeedbackRevoked, ResponseAppended.
"""

from events.decoding import RegistryEvent, decode_event
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

__all__ = [
    "EventContext",
    "Registered",
    "MetadataSet",
    "UriUpdated",
    "Transfer",
    "Approval",
    "ApprovalForAll",
    "NewFeedback",
    "FeedbackRevoked",
    "ResponseAppended",
    "RegistryEvent",
    "decode_event",
    "normalize_address",
]
