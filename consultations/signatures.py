"""Cal.com webhook signature verification.

Cal.com signs each delivery with HMAC-SHA256 over the raw request body and
sends the hex digest in ``x-cal-signature-256``. The digest must be computed
over the bytes exactly as received: re-serialized JSON is not guaranteed to
be byte-identical.

Behavior matrix:
  secret set + matching header     → accept
  secret set + wrong/missing header → InvalidSignatureError (401)
  secret empty                      → ConfigurationError (500)
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Optional

from consultations.errors import ConfigurationError, InvalidSignatureError

log = logging.getLogger("consultations.signatures")

CALCOM_SIGNATURE_HEADER = "x-cal-signature-256"


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of ``raw_body`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_calcom_signature(raw_body: bytes, signature: Optional[str], secret: str) -> None:
    """Raise unless ``signature`` is the HMAC of ``raw_body`` under ``secret``."""
    if not secret:
        raise ConfigurationError("CALCOM_WEBHOOK_SECRET is not configured")

    if not signature:
        log.warning("Cal.com webhook without %s header", CALCOM_SIGNATURE_HEADER)
        raise InvalidSignatureError("missing signature header")

    expected = compute_signature(raw_body, secret)
    received = signature.strip().lower().encode("utf-8")
    if not hmac.compare_digest(expected.encode("ascii"), received):
        log.warning("Cal.com webhook signature mismatch")
        raise InvalidSignatureError("signature mismatch")
