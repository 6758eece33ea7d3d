"""Shared fixtures: settings and in-memory fakes for the three providers."""

import json
import os
import sys
from typing import Optional

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from consultations.config import Settings
from consultations.errors import InvalidSignatureError, UpstreamError
from consultations.models import (
    BookingId,
    CheckoutSession,
    Customer,
    EmailNotification,
    PaymentEvent,
    PriceQuote,
)
from consultations.providers.base import EmailProvider, PaymentProvider, SchedulingProvider

CALCOM_SECRET = "cal-webhook-secret"
FAKE_STRIPE_SIGNATURE = "t=1,v1=fake"


def make_settings(**overrides) -> Settings:
    values = dict(
        calcom_webhook_secret=CALCOM_SECRET,
        cal_api_key="cal_live_key",
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_test",
        resend_api_key="re_123",
        email_from="consultations@example.com",
        site_url="https://example.com",
        admin_api_key="admin-secret",
        debug=False,
    )
    values.update(overrides)
    return Settings(**values)


class FakeSchedulingProvider(SchedulingProvider):
    def __init__(self, fail: bool = False) -> None:
        self.calls: list[tuple] = []
        self.fail = fail
        self.event_types: list[dict] = []

    async def confirm_booking(self, booking_id: BookingId) -> None:
        self.calls.append(("confirm_booking", booking_id))
        if self.fail:
            raise UpstreamError("calcom", "confirm returned 500")

    async def list_event_types(self) -> list[dict]:
        self.calls.append(("list_event_types",))
        return self.event_types


class FakePaymentProvider(PaymentProvider):
    """Stripe stand-in keeping prices and customers in memory."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.prices: dict[str, PriceQuote] = {}
        self.customers: dict[str, Customer] = {}
        self.sessions: list[dict] = []
        self.amount_total: Optional[int] = 10000

    def add_price(self, lookup_key: str, price_id: str, quantity_length: int) -> None:
        self.prices[lookup_key] = PriceQuote(price_id, lookup_key, quantity_length)

    async def find_price(self, lookup_key: str) -> Optional[PriceQuote]:
        self.calls.append(("find_price", lookup_key))
        return self.prices.get(lookup_key)

    async def find_customer(self, email: str) -> Optional[Customer]:
        self.calls.append(("find_customer", email))
        return self.customers.get(email)

    async def create_customer(self, email: str, name: Optional[str] = None) -> Customer:
        self.calls.append(("create_customer", email))
        customer = Customer(id=f"cus_{len(self.customers) + 1}", email=email)
        self.customers[email] = customer
        return customer

    async def create_checkout_session(self, **kwargs) -> CheckoutSession:
        self.calls.append(("create_checkout_session", kwargs["customer_id"]))
        self.sessions.append(kwargs)
        return CheckoutSession(
            id=f"cs_test_{len(self.sessions)}",
            url=f"https://checkout.stripe.com/c/pay/cs_test_{len(self.sessions)}",
            amount_total=self.amount_total,
            metadata=kwargs["metadata"],
            expires_at=kwargs["expires_at"],
        )

    async def construct_event(self, raw_body: bytes, signature: Optional[str]) -> PaymentEvent:
        if signature != FAKE_STRIPE_SIGNATURE:
            raise InvalidSignatureError("bad signature")
        data = json.loads(raw_body)
        obj = data["data"]["object"]
        session = CheckoutSession(
            id=obj.get("id", ""),
            amount_total=obj.get("amount_total"),
            metadata=obj.get("metadata") or {},
        )
        return PaymentEvent(id=data["id"], type=data["type"], session=session)


class FakeEmailProvider(EmailProvider):
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[EmailNotification] = []
        self.fail = fail

    async def send(self, notification: EmailNotification) -> str:
        if self.fail:
            raise UpstreamError("resend", "send failed")
        self.sent.append(notification)
        return f"email_{len(self.sent)}"


def booking_payload(trigger: str = "BOOKING_REQUESTED", **payload_overrides) -> dict:
    payload = {
        "uid": "bk_8f2a",
        "type": "mock-interview",
        "title": "Mock Interview between Igor and Ada",
        "length": 60,
        "organizer": {"email": "ada@example.com", "name": "Ada"},
    }
    payload.update(payload_overrides)
    return {"triggerEvent": trigger, "createdAt": "2026-10-19T10:00:00Z", "payload": payload}


def stripe_event(event_type: str = "checkout.session.completed", metadata: Optional[dict] = None) -> dict:
    return {
        "id": "evt_1",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": "cs_test_1",
                "object": "checkout.session",
                "amount_total": 10000,
                "metadata": {"bookingId": "bk_8f2a"} if metadata is None else metadata,
            }
        },
    }


@pytest.fixture
def config() -> Settings:
    return make_settings()


@pytest.fixture
def scheduling() -> FakeSchedulingProvider:
    return FakeSchedulingProvider()


@pytest.fixture
def payments() -> FakePaymentProvider:
    provider = FakePaymentProvider()
    provider.add_price("mock-interview", "price_mock", 60)
    return provider


@pytest.fixture
def email() -> FakeEmailProvider:
    return FakeEmailProvider()
