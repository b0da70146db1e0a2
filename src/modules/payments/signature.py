"""Gateway notification signatures.

``signature_key = sha512(order_id + status_code + gross_amount + server_key)``
as lowercase hex, computed over the strings exactly as received.
"""

from __future__ import annotations

import hashlib
import hmac


def compute_signature(
    order_id: str, status_code: str, gross_amount: str, server_key: str
) -> str:
    message = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(message.encode("utf-8")).hexdigest()


def verify_signature(
    order_id: str,
    status_code: str,
    gross_amount: str,
    signature_key: str,
    server_key: str,
) -> bool:
    expected = compute_signature(order_id, status_code, gross_amount, server_key)
    received = (signature_key or "").lower().encode("utf-8")
    return hmac.compare_digest(expected.encode("ascii"), received)
