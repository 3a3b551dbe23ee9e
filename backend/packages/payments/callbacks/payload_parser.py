"""
Tolerant parsing of gateway callback bodies.

Paylink and the 3DS ACS post JSON, form-encoded or loosely formatted text,
sometimes with a content type that does not match the body. Parsing never
raises; an unreadable body is just an empty payload.
"""

import json
import re
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, unquote_plus

from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

_LOOSE_SEPARATORS = re.compile(r"[&;\n\r]+")
_LOOSE_ONLY = re.compile(r"[;\n\r]")


def _parse_json(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _parse_form(text: str) -> Optional[Dict[str, Any]]:
    # JSON objects and ";"/newline separated bodies are left to the other parsers
    if "=" not in text or text.startswith("{") or _LOOSE_ONLY.search(text):
        return None
    pairs = parse_qsl(text, keep_blank_values=True)
    return dict(pairs) if pairs else None


def _parse_loose(text: str) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for chunk in _LOOSE_SEPARATORS.split(text):
        key, sep, value = chunk.partition("=")
        key = key.strip()
        if sep and key:
            data[key] = unquote_plus(value.strip())
    return data


def parse_callback_body(content_type: Optional[str], raw: bytes) -> Dict[str, Any]:
    """
    Parse a callback body by its declared type, falling back to every other shape.

    Order after the declared type: form decoding, JSON, then ``key=value``
    splitting on ``&``, ``;`` and newlines.
    """
    if not raw:
        return {}
    text = raw.decode("utf-8", errors="replace").strip()
    if not text:
        return {}

    declared = (content_type or "").lower()
    if "json" in declared:
        parsed = _parse_json(text)
        if parsed is not None:
            return parsed
    elif "x-www-form-urlencoded" in declared:
        parsed = _parse_form(text)
        if parsed is not None:
            return parsed

    for parser in (_parse_form, _parse_json):
        parsed = parser(text)
        if parsed is not None:
            return parsed

    parsed = _parse_loose(text)
    if not parsed:
        logger.warning(
            f"Unparseable callback body ({len(raw)} bytes, content-type={content_type!r})"
        )
    return parsed


def merge_payload(
    body: Mapping[str, Any], query: Optional[Mapping[str, Any]] = None
) -> Dict[str, Any]:
    """Merge query parameters under body fields; body values win."""
    merged: Dict[str, Any] = dict(query or {})
    merged.update(body)
    return merged
