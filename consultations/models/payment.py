"""Stripe-side records, reduced to the fields the handlers use."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .booking import BookingId

CHECKOUT_COMPLETED = "checkout.session.completed"

# Checkout metadata contract, version 1: "bookingId" is always present,
# "type" and "length" are informational. "uid" is the pre-v1 key.
METADATA_BOOKING_ID = "bookingId"
LEGACY_METADATA_BOOKING_ID = "uid"


@dataclass
class PriceQuote:
    """A Stripe price resolved by lookup key."""

    price_id: str
    lookup_key: str
    quantity_length: int  # minutes per billable unit


@dataclass
class Customer:
    id: str
    email: str


@dataclass
class CheckoutSession:
    id: str
    url: str = ""
    amount_total: Optional[int] = None  # minor currency units
    metadata: dict[str, str] = field(default_factory=dict)
    expires_at: Optional[int] = None

    @property
    def total(self) -> float:
        """Session total in major currency units, 0 when Stripe omits it."""
        return (self.amount_total or 0) / 100


@dataclass
class PaymentEvent:
    """A verified Stripe webhook event."""

    id: str
    type: str
    session: Optional[CheckoutSession] = None

    @property
    def is_checkout_completed(self) -> bool:
        return self.type == CHECKOUT_COMPLETED


def checkout_metadata(booking_id: BookingId, event_type: str = "", length: int | None = None) -> dict[str, str]:
    """Build checkout session metadata. Stripe metadata values are strings."""
    metadata = {METADATA_BOOKING_ID: str(booking_id)}
    if event_type:
        metadata["type"] = event_type
    if length is not None:
        metadata["length"] = str(length)
    return metadata


def booking_id_from_metadata(metadata: dict[str, str]) -> Optional[BookingId]:
    value = metadata.get(METADATA_BOOKING_ID) or metadata.get(LEGACY_METADATA_BOOKING_ID)
    return BookingId(value) if value else None
