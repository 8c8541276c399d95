"""
Response envelope handling.

The content API has wrapped its payloads differently over time: lists come
bare or as ``{"data": [...]}``, single records bare or as ``{"data": {...}}``,
paged lists as ``{"content": [...]}``. These helpers unwrap any of them and
fall back to an empty result instead of raising.
"""

import logging
from typing import Any, Dict, List, Optional


def extract_list(payload: Any) -> List[Any]:
    """
    Extract a list from a response body.

    The payload itself if it is a list, else ``payload["data"]`` if that is a
    list, else an empty list.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    if payload not in (None, {}):
        logging.warning(f"Unexpected list envelope: {type(payload).__name__}")
    return []


def extract_item(payload: Any) -> Optional[Dict[str, Any]]:
    """
    Extract a single record from a response body.

    ``payload["data"]`` if the payload carries a ``data`` key, else the
    payload itself if it is an object. An envelope whose ``data`` is not an
    object (``{"data": null}``) yields None.
    """
    if isinstance(payload, dict):
        if "data" in payload:
            data = payload["data"]
            return data if isinstance(data, dict) else None
        return payload or None
    if payload is not None:
        logging.warning(f"Unexpected item envelope: {type(payload).__name__}")
    return None


def extract_page(payload: Any) -> List[Any]:
    """
    Extract the rows of a paged list.

    Rows sit under ``content`` or ``items``, possibly inside a ``data``
    envelope; anything else falls back to extract_list.
    """
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        payload = payload["data"]
    if isinstance(payload, dict):
        for key in ("content", "items"):
            if isinstance(payload.get(key), list):
                return payload[key]
    return extract_list(payload)
