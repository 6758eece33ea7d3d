"""Shared pieces of the webhook handlers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WebhookResult:
    """Status and message returned to the calling provider."""

    status_code: int
    message: str


ACKNOWLEDGED = WebhookResult(200, "Webhook received")


def redact_pii(value: str) -> str:
    """Mask PII for logging: show first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]
