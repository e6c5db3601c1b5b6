"""
Set semantics over JSON list columns.

List columns are reassigned, never mutated in place, so the
ORM sees every change. Matching is exact and case-sensitive.
"""

from typing import Iterable, List, Optional


def add_unique(values: Optional[List[str]], item: str) -> List[str]:
    """Return a copy of ``values`` with ``item`` appended if absent."""
    current = list(values or [])
    if item not in current:
        current.append(item)
    return current


def remove_all(values: Optional[List[str]], item: str) -> List[str]:
    """Return a copy of ``values`` without any occurrence of ``item``."""
    return [value for value in (values or []) if value != item]


def unique_strings(items: Iterable[str]) -> List[str]:
    """De-duplicate while keeping first-seen order."""
    current: List[str] = []
    for item in items:
        if item not in current:
            current.append(item)
    return current
