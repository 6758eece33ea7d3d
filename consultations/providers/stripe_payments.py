"""Stripe payment provider.

Uses the synchronous ``stripe`` SDK with a per-call ``api_key`` (the SDK's
module-level key is never touched), running each call in the default
thread pool so the event loop stays free.
"""

from __future__ import annotations

import asyncio
import json
import logging
from functools import partial
from typing import Any, Optional

import stripe

from consultations.errors import (
    ConfigurationError,
    InvalidSignatureError,
    MalformedEventError,
    UpstreamError,
)
from consultations.models import CheckoutSession, Customer, PaymentEvent, PriceQuote

from .base import PaymentProvider

logger = logging.getLogger(__name__)

QUANTITY_LENGTH_KEY = "quantityLength"
DEFAULT_TOLERANCE_SECONDS = 300


def _to_dict(obj: Any) -> dict:
    """Shallow dict view of a StripeObject (or a plain mapping)."""
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


def _session_from_object(obj: Any) -> CheckoutSession:
    data = _to_dict(obj)
    metadata = {str(k): str(v) for k, v in _to_dict(data.get("metadata")).items()}
    return CheckoutSession(
        id=data.get("id", ""),
        url=data.get("url") or "",
        amount_total=data.get("amount_total"),
        metadata=metadata,
        expires_at=data.get("expires_at"),
    )


class StripeProvider(PaymentProvider):
    """PaymentProvider backed by the Stripe API."""

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        stripe_sdk: Any | None = None,
        tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    ) -> None:
        if not secret_key:
            raise ValueError("Stripe secret key must be provided (STRIPE_SECRET_KEY).")
        if not webhook_secret:
            raise ValueError("Stripe webhook secret must be provided (STRIPE_WEBHOOK_SECRET).")
        self._stripe = stripe_sdk if stripe_sdk is not None else stripe
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._tolerance = tolerance

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_in_executor(self, func, *args, **kwargs) -> Any:
        """Run a synchronous Stripe SDK call in the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def _call(self, action: str, func, **kwargs) -> Any:
        try:
            return await self._run_in_executor(func, api_key=self._secret_key, **kwargs)
        except stripe.StripeError as exc:
            raise UpstreamError("stripe", f"{action}: {exc}") from exc

    # ------------------------------------------------------------------
    # PaymentProvider interface
    # ------------------------------------------------------------------

    async def find_price(self, lookup_key: str) -> Optional[PriceQuote]:
        prices = await self._call(
            "list prices", self._stripe.Price.list, lookup_keys=[lookup_key], limit=1
        )
        data = _to_dict(prices).get("data") or []
        if not data:
            return None

        price = _to_dict(data[0])
        raw_length = _to_dict(price.get("metadata")).get(QUANTITY_LENGTH_KEY)
        try:
            quantity_length = int(raw_length)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"price {price.get('id')} ({lookup_key}) has invalid "
                f"{QUANTITY_LENGTH_KEY} metadata: {raw_length!r}"
            ) from None

        return PriceQuote(
            price_id=price["id"],
            lookup_key=lookup_key,
            quantity_length=quantity_length,
        )

    async def find_customer(self, email: str) -> Optional[Customer]:
        customers = await self._call(
            "list customers", self._stripe.Customer.list, email=email, limit=1
        )
        data = _to_dict(customers).get("data") or []
        if not data:
            return None
        customer = _to_dict(data[0])
        return Customer(id=customer["id"], email=customer.get("email") or email)

    async def create_customer(self, email: str, name: Optional[str] = None) -> Customer:
        params: dict[str, Any] = {"email": email}
        if name:
            params["name"] = name
        customer = _to_dict(
            await self._call("create customer", self._stripe.Customer.create, **params)
        )
        logger.info("Created Stripe customer %s", customer["id"])
        return Customer(id=customer["id"], email=email)

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
        session = await self._call(
            "create checkout session",
            self._stripe.checkout.Session.create,
            customer=customer_id,
            line_items=[{"price": price_id, "quantity": quantity}],
            mode="payment",
            success_url=success_url,
            cancel_url=cancel_url,
            allow_promotion_codes=True,
            invoice_creation={"enabled": True},
            metadata=metadata,
            expires_at=expires_at,
        )
        return _session_from_object(session)

    async def construct_event(self, raw_body: bytes, signature: Optional[str]) -> PaymentEvent:
        """Verify the ``stripe-signature`` header, then parse the raw body.

        Verification goes through ``stripe.WebhookSignature.verify_header``
        on the exact bytes received; parsing happens only afterwards.
        """
        if not signature:
            raise InvalidSignatureError("missing stripe-signature header")

        try:
            payload = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedEventError("body is not UTF-8") from exc

        try:
            await self._run_in_executor(
                self._stripe.WebhookSignature.verify_header,
                payload,
                signature,
                self._webhook_secret,
                self._tolerance,
            )
        except stripe.SignatureVerificationError as exc:
            raise InvalidSignatureError(str(exc)) from exc

        try:
            event = json.loads(payload)
            event_type = str(event["type"])
            obj = (event.get("data") or {}).get("object")
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise MalformedEventError(f"unparseable Stripe event: {exc}") from exc

        session = None
        if event_type.startswith("checkout.session.") and isinstance(obj, dict):
            session = _session_from_object(obj)

        return PaymentEvent(id=event.get("id", ""), type=event_type, session=session)
