"""
Off-chain Completion Handlers.

Invoked (out of band, in any order relative to on-chain events)
when a scheduled fetch delivers its payload. A handler:

1. recomputes the record key from the fetch request alone,
2. parses the payload,
3. stores the record once.

It never loads, creates or updates an Agent or a Feedback. The
primary entity already points at the key computed in step 1,
because the event handler derived the same key from the same
transaction hash and content id when it scheduled the fetch.
"""

import logging
from typing import Callable, Dict, Optional, Union

from sqlalchemy.orm import Session

from core.constants import (
    CONTEXT_AGENT_ID,
    CONTEXT_FEEDBACK_ID,
    CONTEXT_TAG1,
    CONTEXT_TAG2,
    KEY_SEPARATOR,
)
from metadata_parser.feedback import parse_feedback_json
from metadata_parser.registration import parse_registration_json
from offchain.models import FetchRequest, FileKind
from storage.models.files import AgentRegistrationFile, FeedbackFile
from storage.repositories.files import FeedbackFileRepository, RegistrationFileRepository


logger = logging.getLogger(__name__)


ParsedFile = Union[AgentRegistrationFile, FeedbackFile]


def file_record_key(tx_hash: str, content_id: str) -> str:
    """Key a parsed file is stored under: "<txHash>:<contentId>"."""
    return f"{tx_hash}{KEY_SEPARATOR}{content_id}"


def handle_registration_file(
    session: Session,
    request: FetchRequest,
    content: bytes,
) -> Optional[AgentRegistrationFile]:
    """Parse and store a registration file; None if nothing was stored."""
    file_id = file_record_key(request.tx_hash, request.content_id)
    logger.info(f"Processing registration file: {file_id}")
    
    repository = RegistrationFileRepository(session)
    if repository.exists(file_id):
        logger.debug(f"Registration file already stored, ignoring redelivery: {file_id}")
        return None
    
    record = parse_registration_json(
        content,
        file_id=file_id,
        agent_key=request.get_string(CONTEXT_AGENT_ID),
        cid=request.content_id,
        timestamp=request.timestamp,
    )
    if record is None:
        logger.error(f"Failed to parse registration file: {file_id}")
        return None
    
    repository.create_once(record)
    logger.info(f"Successfully saved registration file: {file_id}")
    return record


def handle_feedback_file(
    session: Session,
    request: FetchRequest,
    content: bytes,
) -> Optional[FeedbackFile]:
    """Parse and store a feedback file; None if nothing was stored."""
    file_id = file_record_key(request.tx_hash, request.content_id)
    logger.info(f"Processing feedback file: {file_id}")
    
    repository = FeedbackFileRepository(session)
    if repository.exists(file_id):
        logger.debug(f"Feedback file already stored, ignoring redelivery: {file_id}")
        return None
    
    record = parse_feedback_json(
        content,
        file_id=file_id,
        feedback_key=request.get_string(CONTEXT_FEEDBACK_ID),
        cid=request.content_id,
        timestamp=request.timestamp,
        tag1_on_chain=request.get_string(CONTEXT_TAG1),
        tag2_on_chain=request.get_string(CONTEXT_TAG2),
    )
    if record is None:
        logger.error(f"Failed to parse feedback file: {file_id}")
        return None
    
    repository.create_once(record)
    logger.info(f"Successfully saved feedback file: {file_id}")
    return record


COMPLETION_HANDLERS: Dict[FileKind, Callable[[Session, FetchRequest, bytes], Optional[ParsedFile]]] = {
    FileKind.REGISTRATION: handle_registration_file,
    FileKind.FEEDBACK: handle_feedback_file,
}


def handle_completion(
    session: Session,
    request: FetchRequest,
    content: bytes,
) -> Optional[ParsedFile]:
    """Route a completed fetch to the handler for its file kind."""
    return COMPLETION_HANDLERS[request.kind](session, request, content)
