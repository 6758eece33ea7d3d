"""Tests for BookingRequestHandler: pricing, customer, checkout, email."""

import pytest

from conftest import FakeEmailProvider, booking_payload

from consultations.errors import ConfigurationError, MalformedEventError, UpstreamError
from consultations.handlers import ACKNOWLEDGED, CHECKOUT_TTL_SECONDS, BookingRequestHandler
from consultations.models import BookingEvent

NOW = 1_790_000_000.75


def _handler(payments, email, clock=lambda: NOW):
    return BookingRequestHandler(
        payments=payments,
        email=email,
        success_url="https://example.com/consultations/thank-you",
        cancel_url="https://example.com/consultations/payment-cancelled",
        clock=clock,
    )


def _event(trigger="BOOKING_REQUESTED", **overrides) -> BookingEvent:
    return BookingEvent.model_validate(booking_payload(trigger, **overrides))


class TestIgnoredTriggers:
    @pytest.mark.parametrize(
        "trigger",
        ["BOOKING_CREATED", "BOOKING_CANCELLED", "BOOKING_REJECTED", "MEETING_ENDED"],
    )
    async def test_no_external_calls(self, payments, email, trigger):
        result = await _handler(payments, email).handle(_event(trigger))
        assert result == ACKNOWLEDGED
        assert payments.calls == []
        assert email.sent == []


class TestRequestedBooking:
    async def test_mock_interview_end_to_end(self, payments, email):
        result = await _handler(payments, email).handle(_event())

        assert result.status_code == 200
        session = payments.sessions[0]
        assert session["price_id"] == "price_mock"
        assert session["quantity"] == 1
        assert session["metadata"]["bookingId"] == "bk_8f2a"
        assert session["success_url"] == "https://example.com/consultations/thank-you"
        assert session["cancel_url"] == "https://example.com/consultations/payment-cancelled"

        assert len(email.sent) == 1
        sent = email.sent[0]
        assert sent.recipient == "ada@example.com"
        assert sent.subject == "Consultation Payment"
        assert "$100.00" in sent.text  # amount_total 10000 / 100
        assert "60 minutes" in sent.text
        assert "https://checkout.stripe.com/c/pay/cs_test_1" in sent.text

    async def test_call_order(self, payments, email):
        await _handler(payments, email).handle(_event())
        assert [c[0] for c in payments.calls] == [
            "find_price",
            "find_customer",
            "create_customer",
            "create_checkout_session",
        ]

    async def test_expiry_is_one_hour_after_creation(self, payments, email):
        await _handler(payments, email).handle(_event(length=240))
        assert payments.sessions[0]["expires_at"] == int(NOW) + CHECKOUT_TTL_SECONDS
        assert CHECKOUT_TTL_SECONDS == 3600

    async def test_quantity_rounds_up(self, payments, email):
        await _handler(payments, email).handle(_event(length=61))
        assert payments.sessions[0]["quantity"] == 2

    async def test_zero_length_bills_one_unit(self, payments, email):
        await _handler(payments, email).handle(_event(length=0))
        assert payments.sessions[0]["quantity"] == 1

    async def test_existing_customer_reused(self, payments, email):
        handler = _handler(payments, email)
        await handler.handle(_event())
        await handler.handle(_event(uid="bk_second"))

        assert [c[0] for c in payments.calls].count("create_customer") == 1
        assert payments.sessions[0]["customer_id"] == payments.sessions[1]["customer_id"]

    async def test_name_falls_back_to_email(self, payments, email):
        await _handler(payments, email).handle(
            _event(organizer={"email": "noname@example.com"})
        )
        assert "Hello, noname@example.com!" in email.sent[0].text

    async def test_missing_total_shows_zero(self, payments, email):
        payments.amount_total = None
        await _handler(payments, email).handle(_event())
        assert "$0.00" in email.sent[0].text


class TestFailures:
    async def test_missing_price_is_configuration_error(self, payments, email):
        with pytest.raises(ConfigurationError):
            await _handler(payments, email).handle(_event(type="unpriced-service"))
        assert [c[0] for c in payments.calls] == ["find_price"]
        assert email.sent == []

    async def test_incomplete_payload_is_malformed(self, payments, email):
        event = BookingEvent.model_validate(
            {"triggerEvent": "BOOKING_REQUESTED", "payload": {"uid": "bk_1"}}
        )
        with pytest.raises(MalformedEventError):
            await _handler(payments, email).handle(event)
        assert payments.calls == []

    async def test_email_failure_propagates(self, payments):
        with pytest.raises(UpstreamError):
            await _handler(payments, FakeEmailProvider(fail=True)).handle(_event())
        # Session is not rolled back.
        assert len(payments.sessions) == 1
