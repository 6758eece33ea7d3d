"""checkout.session.completed → confirm the Cal.com booking."""

from __future__ import annotations

import logging

from consultations.errors import MalformedEventError
from consultations.models import PaymentEvent, booking_id_from_metadata
from consultations.providers.base import SchedulingProvider

from .base import ACKNOWLEDGED, WebhookResult

logger = logging.getLogger(__name__)


class PaymentConfirmationHandler:
    """Confirm the booking a paid checkout session was opened for.

    Redelivery of the same event is safe: Cal.com treats confirming an
    already confirmed booking as a no-op.
    """

    def __init__(self, scheduling: SchedulingProvider) -> None:
        self._scheduling = scheduling

    async def handle(self, event: PaymentEvent) -> WebhookResult:
        if not event.is_checkout_completed:
            logger.info("Ignoring Stripe event %s (%s)", event.type, event.id)
            return ACKNOWLEDGED

        session = event.session
        booking_id = booking_id_from_metadata(session.metadata) if session else None
        if booking_id is None:
            raise MalformedEventError(f"event {event.id} has no bookingId in session metadata")

        await self._scheduling.confirm_booking(booking_id)
        logger.info("Booking confirmed: %s", booking_id)
        return WebhookResult(200, "Booking confirmed")
