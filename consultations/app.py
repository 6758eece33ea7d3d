"""FastAPI application: webhook endpoints for paid consultation bookings.

Endpoints:

  POST /api/webhook/calcom   Cal.com webhook: BOOKING_REQUESTED → Stripe checkout + email
  POST /api/webhook/stripe   Stripe webhook: checkout.session.completed → confirm booking
  GET  /api/event-types      Cal.com event types (check slugs against price lookup keys)
  GET  /health               Health check

The booking flow:
  1. A client books a consultation on Cal.com; the booking requires confirmation
  2. Cal.com posts BOOKING_REQUESTED to /api/webhook/calcom
  3. We create a Stripe checkout session and email its link to the organizer
  4. The client pays; Stripe posts checkout.session.completed to /api/webhook/stripe
  5. We confirm the booking through the Cal.com API

Run with ``uvicorn --factory consultations.app:create_app``.
"""

from __future__ import annotations

from dotenv import load_dotenv
load_dotenv()

import logging
import time
from typing import Optional

# Configure root logger early so all app loggers have a handler and are
# visible when run via uvicorn.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-20s %(levelname)-7s %(message)s",
)

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from consultations.auth import admin_token_guard
from consultations.config import Settings, settings
from consultations.errors import UpstreamError, WebhookError
from consultations.handlers import BookingRequestHandler, PaymentConfirmationHandler
from consultations.models import BookingEvent
from consultations.providers import build_providers
from consultations.providers.base import EmailProvider, PaymentProvider, SchedulingProvider
from consultations.signatures import CALCOM_SIGNATURE_HEADER, verify_calcom_signature

log = logging.getLogger("consultations.app")

STRIPE_SIGNATURE_HEADER = "stripe-signature"

_START_TIME = time.time()


def _message(message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def _summarize_event_type(event_type: dict, web_url: str) -> dict:
    slug = event_type.get("slug")
    owner = event_type.get("ownerUsername") or ""
    return {
        "id": event_type.get("id"),
        "slug": slug,
        "title": event_type.get("title"),
        "length": event_type.get("lengthInMinutes", event_type.get("length")),
        "bookingUrl": f"{web_url.rstrip('/')}/{owner}/{slug}" if owner and slug else None,
    }


def create_app(
    config: Optional[Settings] = None,
    scheduling: Optional[SchedulingProvider] = None,
    payments: Optional[PaymentProvider] = None,
    email: Optional[EmailProvider] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Providers not passed in are built from ``config``. Configuration is
    validated here, so a process with missing secrets never starts serving.
    """
    config = config or settings
    for warning in config.validate_startup():
        log.warning(warning)

    if scheduling is None or payments is None or email is None:
        live_scheduling, live_payments, live_email = build_providers(config)
        scheduling = scheduling or live_scheduling
        payments = payments or live_payments
        email = email or live_email

    booking_handler = BookingRequestHandler(
        payments=payments,
        email=email,
        success_url=config.success_url,
        cancel_url=config.cancel_url,
    )
    payment_handler = PaymentConfirmationHandler(scheduling=scheduling)

    app = FastAPI(
        title="Consultation Webhooks",
        description="Cal.com booking requests paid through Stripe checkout",
        version="0.1.0",
    )

    # ── Health check ───────────────────────────────────────────

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health check, confirms the event loop is responsive."""
        uptime = round(time.time() - _START_TIME, 1)
        return JSONResponse({"status": "ok", "uptime": uptime})

    # ── Cal.com webhook ────────────────────────────────────────

    @app.post("/api/webhook/calcom")
    async def calcom_webhook(request: Request) -> JSONResponse:
        """Cal.com booking lifecycle webhook.

        The signature is checked against the raw body before anything is
        parsed. Failures surface as non-2xx so Cal.com redelivers.
        """
        raw_body = await request.body()
        signature = request.headers.get(CALCOM_SIGNATURE_HEADER)

        try:
            verify_calcom_signature(raw_body, signature, config.calcom_webhook_secret)
        except WebhookError as exc:
            return _message(exc.message, exc.status_code)

        try:
            event = BookingEvent.model_validate_json(raw_body)
        except ValidationError as e:
            log.warning("Unparseable Cal.com webhook: %s", e)
            return _message("Invalid payload", 400)

        try:
            result = await booking_handler.handle(event)
        except UpstreamError as exc:
            log.error("Cal.com webhook failed upstream (%s): %s", exc.provider, exc, exc_info=True)
            return _message(exc.message, exc.status_code)
        except WebhookError as exc:
            log.error("Cal.com webhook rejected: %s", exc)
            return _message(exc.message, exc.status_code)
        except Exception as e:
            log.error("Cal.com webhook error: %s", e, exc_info=True)
            return _message("Internal error", 500)

        return _message(result.message, result.status_code)

    # ── Stripe webhook ─────────────────────────────────────────

    @app.post("/api/webhook/stripe")
    async def stripe_webhook(request: Request) -> JSONResponse:
        """Stripe payment webhook.

        Every failure, including a bad signature, answers 400 so Stripe
        keeps retrying with its own backoff.
        """
        raw_body = await request.body()
        signature = request.headers.get(STRIPE_SIGNATURE_HEADER)

        try:
            event = await payments.construct_event(raw_body, signature)
            result = await payment_handler.handle(event)
        except Exception as e:
            log.error("Stripe webhook error: %s", e, exc_info=True)
            return _message("Webhook error", 400)

        return _message(result.message, result.status_code)

    # ── Cal.com event types ────────────────────────────────────

    @app.get("/api/event-types", dependencies=[Depends(admin_token_guard(config))])
    async def event_types() -> JSONResponse:
        """List Cal.com event types with the slugs used as price lookup keys."""
        try:
            types = await scheduling.list_event_types()
        except UpstreamError as exc:
            log.error("Listing event types failed: %s", exc)
            return _message(exc.message, 502)

        return JSONResponse(
            {"eventTypes": [_summarize_event_type(t, config.calcom_web_url) for t in types]}
        )

    return app


if __name__ == "__main__":
    import uvicorn

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "consultations.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=log_config,
    )
