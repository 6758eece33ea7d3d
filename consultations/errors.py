"""Webhook error hierarchy.

Each error carries the HTTP status and the client-safe message the webhook
responds with. Internal details stay in the exception chain and the logs.
"""


class WebhookError(Exception):
    """Base exception for all webhook processing failures."""

    status_code = 500
    message = "Internal error"

    def __init__(self, detail: str = "", message: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail
        if message is not None:
            self.message = message


class InvalidSignatureError(WebhookError):
    """Signature header missing or not matching the raw body."""

    status_code = 401
    message = "Invalid signature"


class ConfigurationError(WebhookError):
    """Operator misconfiguration, e.g. no Stripe price for an event type."""

    status_code = 500
    message = "Internal error"


class MalformedEventError(WebhookError):
    """Event is missing fields this service relies on."""

    status_code = 400
    message = "Invalid payload"


class UpstreamError(WebhookError):
    """A call to Cal.com, Stripe or Resend failed."""

    status_code = 500
    message = "Upstream error"

    def __init__(self, provider: str, detail: str = "") -> None:
        super().__init__(f"{provider}: {detail}" if detail else provider)
        self.provider = provider
