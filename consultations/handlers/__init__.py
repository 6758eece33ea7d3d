"""Webhook handlers for the booking-to-payment flow."""

from .base import ACKNOWLEDGED, WebhookResult, redact_pii
from .booking_request import CHECKOUT_TTL_SECONDS, BookingRequestHandler
from .payment_confirmation import PaymentConfirmationHandler

__all__ = [
    "ACKNOWLEDGED",
    "BookingRequestHandler",
    "CHECKOUT_TTL_SECONDS",
    "PaymentConfirmationHandler",
    "WebhookResult",
    "redact_pii",
]
