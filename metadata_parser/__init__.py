"""
Metadata Parser Package - Off-chain file decoding and storage.

Parsers are tolerant: any JSON object yields a (possibly nearly
empty) record; anything else yields None. Completion handlers
store parsed records under a key they derive themselves and
never touch on-chain entities.
"""

from metadata_parser.feedback import parse_feedback_json
from metadata_parser.handlers import (
    file_record_key,
    handle_completion,
    handle_feedback_file,
    handle_registration_file,
)
from metadata_parser.registration import parse_registration_json, parse_wallet_endpoint

__all__ = [
    "parse_registration_json",
    "parse_feedback_json",
    "parse_wallet_endpoint",
    "file_record_key",
    "handle_completion",
    "handle_registration_file",
    "handle_feedback_file",
]
