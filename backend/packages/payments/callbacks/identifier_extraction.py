"""
Identifier extraction from gateway callbacks.

Callbacks identify the payment inconsistently: a direct field, an ``MD``
value that may be Base64-encoded JSON, the invoice id, or only the URL we
handed the gateway. Each way of finding an identifier is a small pure function;
``EXTRACTION_STRATEGIES`` fixes the order they are consulted in.
"""

import base64
import binascii
import json
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

# Explicit reference fields, most specific first
EXPLICIT_FIELDS = (
    "transactionNo",
    "orderNumber",
    "txn_id",
    "transaction_id",
    "transactionId",
    "reference",
)
INVOICE_FIELDS = ("invoiceId", "invoice_id", "id")
MD_REFERENCE_FIELDS = ("transactionNo", "orderNumber", "txn_id", "transactionId")
URL_ALIAS_PARAMS = (
    "txn_id",
    "transactionNo",
    "transaction_no",
    "orderNumber",
    "order_number",
    "transactionId",
    "transaction_id",
    "invoiceId",
    "invoice_id",
)

REFERENCE_PATTERN = re.compile(r"\b((?:SUB|TXN|WP)-[A-Za-z0-9-]+)")
_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/=_-]+$")


def _clean(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def decode_md(md: Any) -> Optional[str]:
    """
    Pull a reference out of an ``MD`` value.

    Tries Base64 then JSON, then plain JSON, then treats the value as the
    reference itself.
    """
    md = _clean(md)
    if md is None:
        return None

    candidates = [md]
    if _BASE64_PATTERN.match(md):
        try:
            padded = md + "=" * (-len(md) % 4)
            decoded = base64.b64decode(padded, altchars=b"-_", validate=False)
            candidates.insert(0, decoded.decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, ValueError):
            pass

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            for field in MD_REFERENCE_FIELDS:
                value = _clean(data.get(field))
                if value:
                    return value

    return md


def from_explicit_fields(payload: Mapping[str, Any]) -> Optional[str]:
    for field in EXPLICIT_FIELDS:
        value = _clean(payload.get(field))
        if value:
            return value
    return None


def from_md(payload: Mapping[str, Any]) -> Optional[str]:
    return decode_md(payload.get("MD") or payload.get("md"))


def from_invoice_fields(payload: Mapping[str, Any]) -> Optional[str]:
    for field in INVOICE_FIELDS:
        value = _clean(payload.get(field))
        if value:
            return value
    return None


def from_url(payload: Mapping[str, Any]) -> Optional[str]:
    """Reference embedded in the callback URL (``_url`` key)."""
    url = _clean(payload.get("_url"))
    if not url:
        return None
    parts = urlsplit(url)
    query = parse_qs(parts.query)
    for param in URL_ALIAS_PARAMS:
        values = query.get(param)
        if values and _clean(values[0]):
            return _clean(values[0])
    match = REFERENCE_PATTERN.search(parts.path) or REFERENCE_PATTERN.search(url)
    return match.group(1) if match else None


Strategy = Callable[[Mapping[str, Any]], Optional[str]]

EXTRACTION_STRATEGIES: Tuple[Strategy, ...] = (
    from_explicit_fields,
    from_md,
    from_invoice_fields,
    from_url,
)


def collect_identifiers(
    payload: Mapping[str, Any], url: Optional[str] = None
) -> List[str]:
    """
    Every candidate identifier in the payload, in strategy order, de-duplicated.

    Explicit fields contribute all their values (not only the first), because a
    callback often carries both our reference and the gateway's number.
    """
    data: Dict[str, Any] = dict(payload)
    if url:
        data.setdefault("_url", url)

    found: List[str] = []

    def add(value: Optional[str]) -> None:
        if value and value not in found:
            found.append(value)

    for strategy in EXTRACTION_STRATEGIES:
        if strategy is from_explicit_fields:
            for field in EXPLICIT_FIELDS:
                add(_clean(data.get(field)))
        elif strategy is from_invoice_fields:
            for field in INVOICE_FIELDS:
                add(_clean(data.get(field)))
        else:
            add(strategy(data))
    return found
