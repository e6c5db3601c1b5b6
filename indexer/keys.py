"""
Entity Key Derivation.

Every key is a pure function of event data: no randomness, no
counters owned by the process. Replaying the same events always
addresses the same entities.
"""

from core.constants import KEY_SEPARATOR


def agent_key(chain_id: int, agent_id: int) -> str:
    """Key "<chainId>:<tokenId>"."""
    return f"{chain_id}{KEY_SEPARATOR}{agent_id}"


def agent_metadata_key(agent_entity_key: str, metadata_key: str) -> str:
    """Key "<agentKey>:<metadataKey>"."""
    return f"{agent_entity_key}{KEY_SEPARATOR}{metadata_key}"


def feedback_key(agent_entity_key: str, client_address: str, sequence: int) -> str:
    """Key "<agentKey>:<client>:<sequence>"."""
    return f"{agent_entity_key}{KEY_SEPARATOR}{client_address.lower()}{KEY_SEPARATOR}{sequence}"


def feedback_response_key(feedback_entity_key: str, timestamp: int) -> str:
    """Key "<feedbackKey>:<blockTimestamp>"."""
    return f"{feedback_entity_key}{KEY_SEPARATOR}{timestamp}"
