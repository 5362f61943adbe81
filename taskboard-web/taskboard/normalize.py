"""Envelope normalization for API responses.

Collection endpoints do not agree on where the list lives. Observed shapes::

    {"success": true, "data": {"projects": [...], "pagination": {...}}}
    {"success": true, "data": {"items": [...]}}
    {"success": true, "items": [...]}

``normalize_collection`` resolves them in that order and always returns a
list. Malformed payloads produce ``[]`` instead of an error.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .models import Pagination


def _lookup(container: Any, key: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(key)
    return None


def normalize_collection(envelope: Any, key: Optional[str] = None) -> List[Any]:
    """Flatten an API envelope into a list of entity dicts.

    Resolution order: ``data.<key>`` -> ``data.items`` -> ``items``. The first
    candidate that is present (not ``None``) wins; if it is not a list the
    result is empty. An envelope with ``success: false`` yields ``[]``. A list
    passed in is returned unchanged.
    """
    if isinstance(envelope, list):
        return envelope
    if not isinstance(envelope, Mapping):
        return []
    if envelope.get("success") is False:
        return []

    data = envelope.get("data")
    candidates = []
    if key:
        candidates.append(_lookup(data, key))
    candidates.append(_lookup(data, "items"))
    candidates.append(envelope.get("items"))

    for candidate in candidates:
        if candidate is None:
            continue
        return candidate if isinstance(candidate, list) else []
    return []


def extract_entity(envelope: Any, key: str) -> Optional[Dict[str, Any]]:
    """Single entity from ``data.<key>`` (or ``data`` itself when it carries an ``_id``)."""
    if not isinstance(envelope, Mapping) or envelope.get("success") is False:
        return None
    data = envelope.get("data")
    entity = _lookup(data, key)
    if isinstance(entity, Mapping):
        return dict(entity)
    if isinstance(data, Mapping) and "_id" in data:
        return dict(data)
    return None


def extract_data(envelope: Any) -> Optional[Dict[str, Any]]:
    """The ``data`` mapping of a successful envelope, else ``None``."""
    if not isinstance(envelope, Mapping) or envelope.get("success") is False:
        return None
    data = envelope.get("data")
    return dict(data) if isinstance(data, Mapping) else None


def extract_pagination(envelope: Any) -> Pagination:
    data = _lookup(envelope, "data")
    return Pagination.from_dict(_lookup(data, "pagination"))


def envelope_message(envelope: Any, default: str = "An error occurred") -> str:
    """User facing message of an envelope (``message``, ``error`` or the first of ``errors``)."""
    if isinstance(envelope, Mapping):
        for key in ("message", "error"):
            value = envelope.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        errors = envelope.get("errors")
        if isinstance(errors, list) and errors:
            return str(errors[0])
    return default
