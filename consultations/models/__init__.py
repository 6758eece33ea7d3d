"""Data models for the booking-to-payment flow."""

from .booking import (
    BookingEvent,
    BookingId,
    BookingRequest,
    Organizer,
    TriggerEvent,
    quantity_for,
)
from .notification import EmailNotification
from .payment import (
    CheckoutSession,
    Customer,
    PaymentEvent,
    PriceQuote,
    booking_id_from_metadata,
    checkout_metadata,
)

__all__ = [
    "BookingEvent",
    "BookingId",
    "BookingRequest",
    "CheckoutSession",
    "Customer",
    "EmailNotification",
    "Organizer",
    "PaymentEvent",
    "PriceQuote",
    "TriggerEvent",
    "booking_id_from_metadata",
    "checkout_metadata",
    "quantity_for",
]
