"""
3-D Secure helpers: failure detection and the browser bounce form.
"""

import base64
import binascii
import html
import re
from typing import Any, Mapping, Optional, Tuple

from packages.payments.models.domain.gateway import FAILED_STATUSES

# PaRes transaction status values (EMV 3DS / 3DS1) meaning "not authenticated"
_PARES_FAILED = re.compile(
    r"""(?:<TX>.*?<status>|transStatus"?\s*[:=]\s*"?)\s*([NRU])\b""",
    re.IGNORECASE | re.DOTALL,
)
_ERROR_CODE_FIELDS = ("errorCode", "error_code", "code", "eci_error")
_FAILURE_WORDS = FAILED_STATUSES | {"error", "declined", "not_authenticated"}


def _decode_pares(pares: str) -> str:
    try:
        decoded = base64.b64decode(pares + "=" * (-len(pares) % 4), validate=False)
        return decoded.decode("utf-8", errors="ignore")
    except (binascii.Error, ValueError):
        return pares


def _gateway_code(payload: Mapping[str, Any]) -> Optional[str]:
    for field in _ERROR_CODE_FIELDS:
        value = payload.get(field)
        if value not in (None, "", 0, "0"):
            return str(value)
    return None


def detect_authentication_failure(
    payload: Mapping[str, Any],
) -> Tuple[bool, Optional[str]]:
    """
    Whether the 3DS step reports a failed authentication, and its code if any.

    Only a hint: the final outcome is always decided by a gateway lookup.
    """
    code = _gateway_code(payload)
    status = str(payload.get("status") or "").strip().lower()
    if status in _FAILURE_WORDS:
        return True, code

    pares = payload.get("PaRes") or payload.get("pares")
    if pares:
        match = _PARES_FAILED.search(_decode_pares(str(pares)))
        if match:
            return True, code or match.group(1).upper()

    return code is not None, code


def has_bounce_fields(params: Mapping[str, Any]) -> bool:
    """A browser GET carrying PaRes plus something that identifies the payment."""
    if not params.get("PaRes"):
        return False
    return bool(
        params.get("MD")
        or params.get("orderNumber")
        or params.get("transactionNo")
        or params.get("txn_id")
    )


def build_auto_submit_form(action_url: str, params: Mapping[str, Any]) -> str:
    """HTML page that immediately re-POSTs the 3DS result to ``action_url``."""
    order_number = (
        params.get("orderNumber") or params.get("transactionNo") or params.get("txn_id")
    )
    fields = {
        "PaRes": params.get("PaRes"),
        "MD": params.get("MD"),
        "orderNumber": order_number,
    }
    inputs = "\n".join(
        f'      <input type="hidden" name="{name}" value="{html.escape(str(value), quote=True)}">'
        for name, value in fields.items()
        if value
    )
    return f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>Completing payment</title></head>
  <body onload="document.forms[0].submit()">
    <form method="POST" action="{html.escape(action_url, quote=True)}">
{inputs}
      <noscript><button type="submit">Continue</button></noscript>
    </form>
  </body>
</html>
"""
