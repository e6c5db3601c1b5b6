"""
Kind-checked accessors over a decoded JSON object.

Every accessor returns None (or an empty list) when the key is
absent, null, or holds a value of the wrong JSON kind. Nothing
here logs; only decode_object raises.
"""

import json
from typing import Any, Dict, List, Optional, Union

from core.exceptions import MalformedPayloadError
from storage.sets import unique_strings


JsonObject = Dict[str, Any]


def decode_object(content: Union[bytes, str], file_id: str = "") -> JsonObject:
    """
    Decode a payload whose top level must be a JSON object.
    
    Raises:
        MalformedPayloadError: not UTF-8, not JSON (or nested too deep), or not an object
    """
    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig")
        value = json.loads(content)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise MalformedPayloadError(file_id, str(e)) from e
    if not isinstance(value, dict):
        raise MalformedPayloadError(file_id, f"top level is {type(value).__name__}, not an object")
    return value


def get_string(obj: JsonObject, key: str) -> Optional[str]:
    value = obj.get(key)
    return value if isinstance(value, str) else None


def get_bool(obj: JsonObject, key: str) -> Optional[bool]:
    value = obj.get(key)
    return value if isinstance(value, bool) else None


def get_object(obj: JsonObject, key: str) -> Optional[JsonObject]:
    value = obj.get(key)
    return value if isinstance(value, dict) else None


def get_array(obj: JsonObject, key: str) -> Optional[List[Any]]:
    value = obj.get(key)
    return value if isinstance(value, list) else None


def get_int(obj: JsonObject, key: str) -> Optional[int]:
    """Integer from a JSON number without fractional part, or a decimal string."""
    value = obj.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        return int(value.strip())
    return None


def string_elements(values: List[Any]) -> List[str]:
    """Keep string elements only, de-duplicated, first-seen order."""
    return unique_strings(v for v in values if isinstance(v, str))


def get_string_list(obj: JsonObject, *keys: str) -> List[str]:
    """
    String elements of the first key holding a non-empty array.
    
    Several keys cover legacy spellings of the same field.
    """
    for key in keys:
        values = get_array(obj, key)
        if values:
            return string_elements(values)
    return []
