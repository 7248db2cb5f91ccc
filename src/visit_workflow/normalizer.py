"""
Response Normalizer.

The backend does not use one envelope for list responses: some endpoints
return a bare list, some wrap it under "results" or "data", some nest it
deeper. extract_records turns any of those into a plain list so no other
component has to sniff payload shapes.
"""

from typing import Any, Optional


ENVELOPE_KEYS = ("results", "data")


def _first_list_value(mapping: dict) -> Optional[list]:
    for value in mapping.values():
        if isinstance(value, list):
            return value
    return None


def extract_records(payload: Any) -> list:
    """
    Extract the record list from an arbitrarily shaped payload.

    Tried in order, first match wins:
        1. payload is a list
        2. payload["results"] is a list
        3. payload["data"] is a list
        4. first list-valued entry at depth 1, then at depth 2
        5. empty list

    Never raises.
    """
    if isinstance(payload, list):
        return payload

    if not isinstance(payload, dict):
        return []

    for key in ENVELOPE_KEYS:
        if isinstance(payload.get(key), list):
            return payload[key]

    found = _first_list_value(payload)
    if found is not None:
        return found

    for value in payload.values():
        if isinstance(value, dict):
            found = _first_list_value(value)
            if found is not None:
                return found

    return []
