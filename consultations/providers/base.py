"""Abstract base classes for the external providers.

The webhook handlers receive these as constructor arguments, so tests can
swap in fakes and no handler touches a module-level client.
"""

from abc import ABC, abstractmethod
from typing import Optional

from consultations.models import (
    BookingId,
    CheckoutSession,
    Customer,
    EmailNotification,
    PaymentEvent,
    PriceQuote,
)


class SchedulingProvider(ABC):
    """Booking backend (Cal.com)."""

    @abstractmethod
    async def confirm_booking(self, booking_id: BookingId) -> None:
        """Confirm a booking that is waiting for payment.

        Raises:
            UpstreamError: The provider did not accept the confirmation.
        """

    @abstractmethod
    async def list_event_types(self) -> list[dict]:
        """Return the event types (bookable services) of the account."""


class PaymentProvider(ABC):
    """Payment backend (Stripe)."""

    @abstractmethod
    async def find_price(self, lookup_key: str) -> Optional[PriceQuote]:
        """Return the price registered under ``lookup_key``, or None.

        Raises:
            ConfigurationError: The price exists but its ``quantityLength``
                metadata is missing or not an integer.
        """

    @abstractmethod
    async def find_customer(self, email: str) -> Optional[Customer]:
        """Return the first customer with this email, or None."""

    @abstractmethod
    async def create_customer(self, email: str, name: Optional[str] = None) -> Customer:
        """Create a customer."""

    @abstractmethod
    async def create_checkout_session(
        self,
        *,
        customer_id: str,
        price_id: str,
        quantity: int,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        expires_at: int,
    ) -> CheckoutSession:
        """Create a one-time payment checkout session."""

    @abstractmethod
    async def construct_event(self, raw_body: bytes, signature: Optional[str]) -> PaymentEvent:
        """Verify a webhook delivery and parse it.

        Raises:
            InvalidSignatureError: Header missing or not matching ``raw_body``.
            MalformedEventError: Body verified but is not a usable event.
        """

    async def get_or_create_customer(self, email: str, name: Optional[str] = None) -> Customer:
        """Look up a customer by email, creating one only if none exists.

        Existing customers are returned untouched. Two concurrent first-time
        calls for the same email can both create a customer; Stripe is the
        system of record and has no conditional create.
        """
        customer = await self.find_customer(email)
        if customer is not None:
            return customer
        return await self.create_customer(email, name)


class EmailProvider(ABC):
    """Transactional email backend (Resend)."""

    @abstractmethod
    async def send(self, notification: EmailNotification) -> str:
        """Send an email and return the provider message id."""
