"""
Feedback File Parser.

Same tolerance rules as the registration parser. The tags stated
in the file win; when the file has none, the on-chain tags echoed
through the fetch context are used.
"""

import logging
from typing import Optional, Union

from core.constants import ADDRESS_HEX_LENGTH, MAX_SCORE, MIN_SCORE
from core.exceptions import MalformedPayloadError
from metadata_parser.json_fields import decode_object, get_int, get_object, get_string
from storage.models.base import canonical_json
from storage.models.files import FeedbackFile


logger = logging.getLogger(__name__)


def _address(value: Optional[str]) -> Optional[str]:
    if value and value.startswith("0x") and len(value) == ADDRESS_HEX_LENGTH:
        return value.lower()
    return None


def parse_feedback_json(
    content: Union[bytes, str],
    file_id: str,
    feedback_key: str,
    cid: str,
    timestamp: int,
    tag1_on_chain: str = "",
    tag2_on_chain: str = "",
) -> Optional[FeedbackFile]:
    """
    Parse a feedback file into an (unsaved) record keyed ``file_id``.
    
    Returns:
        The record, or None if the payload is not a JSON object
    """
    logger.info(f"Parsing feedback file: fileId={file_id}, feedbackId={feedback_key}, cid={cid}")
    
    try:
        obj = decode_object(content, file_id)
    except MalformedPayloadError as e:
        logger.error(e.to_log_format())
        return None
    
    record = FeedbackFile(
        id=file_id,
        cid=cid,
        feedback_key=feedback_key,
        created_at=timestamp,
    )
    
    record.text = get_string(obj, "text")
    record.capability = get_string(obj, "capability")
    record.name = get_string(obj, "name")
    record.skill = get_string(obj, "skill")
    record.task = get_string(obj, "task")
    
    context = obj.get("context")
    if isinstance(context, str):
        record.context = context
    elif isinstance(context, (dict, list)):
        record.context = canonical_json(context)
    
    score = obj.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        if float(score).is_integer() and MIN_SCORE <= score <= MAX_SCORE:
            record.score = int(score)
    
    record.tag1 = get_string(obj, "tag1") or tag1_on_chain or None
    record.tag2 = get_string(obj, "tag2") or tag2_on_chain or None
    
    payment = get_object(obj, "proofOfPayment")
    if payment is not None:
        record.proof_of_payment_from = _address(get_string(payment, "fromAddress"))
        record.proof_of_payment_to = _address(get_string(payment, "toAddress"))
        record.proof_of_payment_chain_id = get_int(payment, "chainId")
        record.proof_of_payment_tx_hash = get_string(payment, "txHash")
    
    return record
