"""
Registration File Parser.

Turns raw registration-file bytes (from IPFS or Arweave) into an
AgentRegistrationFile record. Best-effort and additive:

- not JSON / not a JSON object   -> None, nothing is persisted
- any JSON object                -> a record, even with no field set
- absent, null or wrong-kind field -> attribute left unset
- unknown endpoint names         -> ignored

Endpoint kinds (by "name"):
    MCP          endpoint, version, mcpTools, mcpPrompts, mcpResources
    A2A          endpoint, version, a2aSkills
    agentWallet  "0x<40 hex>" or "eip155:<chainId>:0x<40 hex>"
    ENS          endpoint
    DID          endpoint
"""

import logging
import re
from typing import Optional, Tuple, Union

from core.exceptions import MalformedPayloadError
from metadata_parser.json_fields import (
    JsonObject,
    decode_object,
    get_array,
    get_bool,
    get_string,
    get_string_list,
)
from storage.models.files import AgentRegistrationFile


logger = logging.getLogger(__name__)


_HEX_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")
_DECIMAL = re.compile(r"^[0-9]+$")

EIP155_PREFIX = "eip155"


def parse_wallet_endpoint(value: str) -> Tuple[Optional[str], Optional[int]]:
    """
    Parse an agentWallet endpoint.
    
    Returns:
        (address, chain_id); (None, None) when malformed. A bare
        address, or an empty or non-decimal chain part, has no
        chain id.
    """
    if value.startswith(EIP155_PREFIX + ":"):
        parts = value.split(":")
        if len(parts) != 3:
            return None, None
        _, chain_part, address_part = parts
        if not _HEX_ADDRESS.fullmatch(address_part):
            return None, None
        chain_id = int(chain_part) if _DECIMAL.fullmatch(chain_part) else None
        return address_part.lower(), chain_id
    
    if _HEX_ADDRESS.fullmatch(value):
        return value.lower(), None
    return None, None


def _apply_mcp(record: AgentRegistrationFile, endpoint: JsonObject) -> None:
    url = get_string(endpoint, "endpoint")
    if url is not None:
        record.mcp_endpoint = url
    version = get_string(endpoint, "version")
    if version is not None:
        record.mcp_version = version
    if get_array(endpoint, "mcpTools") is not None:
        record.mcp_tools = get_string_list(endpoint, "mcpTools")
    if get_array(endpoint, "mcpPrompts") is not None:
        record.mcp_prompts = get_string_list(endpoint, "mcpPrompts")
    if get_array(endpoint, "mcpResources") is not None:
        record.mcp_resources = get_string_list(endpoint, "mcpResources")


def _apply_a2a(record: AgentRegistrationFile, endpoint: JsonObject) -> None:
    url = get_string(endpoint, "endpoint")
    if url is not None:
        record.a2a_endpoint = url
    version = get_string(endpoint, "version")
    if version is not None:
        record.a2a_version = version
    if get_array(endpoint, "a2aSkills") is not None:
        record.a2a_skills = get_string_list(endpoint, "a2aSkills")


def _apply_wallet(record: AgentRegistrationFile, endpoint: JsonObject) -> None:
    value = get_string(endpoint, "endpoint")
    if value is None:
        return
    address, chain_id = parse_wallet_endpoint(value)
    if address is None:
        return
    record.agent_wallet = address
    if chain_id is not None:
        record.agent_wallet_chain_id = chain_id


def _apply_ens(record: AgentRegistrationFile, endpoint: JsonObject) -> None:
    value = get_string(endpoint, "endpoint")
    if value is not None:
        record.ens = value


def _apply_did(record: AgentRegistrationFile, endpoint: JsonObject) -> None:
    value = get_string(endpoint, "endpoint")
    if value is not None:
        record.did = value


ENDPOINT_HANDLERS = {
    "MCP": _apply_mcp,
    "A2A": _apply_a2a,
    "agentWallet": _apply_wallet,
    "ENS": _apply_ens,
    "DID": _apply_did,
}


def parse_registration_json(
    content: Union[bytes, str],
    file_id: str,
    agent_key: str,
    cid: str,
    timestamp: int,
) -> Optional[AgentRegistrationFile]:
    """
    Parse a registration file into an (unsaved) record keyed ``file_id``.
    
    Returns:
        The record, or None if the payload is not a JSON object
    """
    logger.info(f"Parsing registration file: fileId={file_id}, agentId={agent_key}, cid={cid}")
    
    try:
        obj = decode_object(content, file_id)
    except MalformedPayloadError as e:
        logger.error(e.to_log_format())
        return None
    
    record = AgentRegistrationFile(
        id=file_id,
        cid=cid,
        agent_key=agent_key,
        created_at=timestamp,
        supported_trusts=[],
        mcp_tools=[],
        mcp_prompts=[],
        mcp_resources=[],
        a2a_skills=[],
    )
    
    record.name = get_string(obj, "name")
    record.description = get_string(obj, "description")
    record.image = get_string(obj, "image")
    record.active = get_bool(obj, "active")
    record.x402support = get_bool(obj, "x402support")
    
    record.supported_trusts = get_string_list(obj, "supportedTrusts", "supportedTrust")
    
    for endpoint in get_array(obj, "endpoints") or []:
        if not isinstance(endpoint, dict):
            continue
        handler = ENDPOINT_HANDLERS.get(get_string(endpoint, "name"))
        if handler is not None:
            handler(record, endpoint)
    
    return record
