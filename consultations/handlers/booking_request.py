"""BOOKING_REQUESTED → Stripe checkout session → checkout email.

Cal.com holds a requested booking until it is confirmed. This handler
prices the request, makes sure the organizer has a Stripe customer, opens a
one-hour checkout session carrying the booking id in its metadata, and
emails the checkout link. Confirmation happens later, in
``PaymentConfirmationHandler``, once Stripe reports the session as paid.

Steps run strictly in order and stop at the first failure. Nothing is rolled
back: a session created before a failed email send simply expires.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from pydantic import ValidationError

from consultations.emails import build_checkout_notification
from consultations.errors import ConfigurationError, MalformedEventError
from consultations.models import (
    BookingEvent,
    BookingRequest,
    checkout_metadata,
    quantity_for,
)
from consultations.providers.base import EmailProvider, PaymentProvider

from .base import ACKNOWLEDGED, WebhookResult, redact_pii

logger = logging.getLogger(__name__)

CHECKOUT_TTL_SECONDS = 3600


class BookingRequestHandler:
    """Turn a requested Cal.com booking into a pending Stripe payment."""

    def __init__(
        self,
        payments: PaymentProvider,
        email: EmailProvider,
        success_url: str,
        cancel_url: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._payments = payments
        self._email = email
        self._success_url = success_url
        self._cancel_url = cancel_url
        self._clock = clock

    async def handle(self, event: BookingEvent) -> WebhookResult:
        if not event.is_requested:
            logger.info("Ignoring Cal.com trigger %s", event.trigger_event)
            return ACKNOWLEDGED

        try:
            request = BookingRequest.model_validate(event.payload)
        except ValidationError as exc:
            raise MalformedEventError(f"BOOKING_REQUESTED payload: {exc}") from exc

        price = await self._payments.find_price(request.type)
        if price is None:
            raise ConfigurationError(f"no Stripe price with lookup key {request.type!r}")

        quantity = quantity_for(request.length, price.quantity_length)

        customer = await self._payments.get_or_create_customer(
            request.organizer.email, request.organizer.name
        )

        expires_at = int(self._clock()) + CHECKOUT_TTL_SECONDS
        session = await self._payments.create_checkout_session(
            customer_id=customer.id,
            price_id=price.price_id,
            quantity=quantity,
            success_url=self._success_url,
            cancel_url=self._cancel_url,
            metadata=checkout_metadata(request.booking_id, request.type, request.length),
            expires_at=expires_at,
        )
        logger.info(
            "Checkout session %s for booking %s (%s x%d, customer %s)",
            session.id,
            request.booking_id,
            price.price_id,
            quantity,
            customer.id,
        )

        notification = build_checkout_notification(
            recipient=request.organizer.email,
            name=request.display_name,
            length=request.length,
            price=session.total,
            checkout_url=session.url,
        )
        await self._email.send(notification)
        logger.info("Checkout email sent to %s", redact_pii(request.organizer.email))

        return WebhookResult(200, "Checkout session created")
