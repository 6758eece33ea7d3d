"""Cal.com API v2 client.

Only two endpoints are used: confirming a booking once it has been paid
for, and listing event types so operators can check that every event slug
has a matching Stripe price lookup key.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from consultations.errors import UpstreamError
from consultations.models import BookingId

from .base import SchedulingProvider

logger = logging.getLogger(__name__)

EVENT_TYPES_API_VERSION = "2024-06-14"


class CalcomProvider(SchedulingProvider):
    """SchedulingProvider backed by the Cal.com REST API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.cal.com/v2",
        api_version: str = "2024-08-13",
        timeout: float = 15,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("Cal.com API key must be provided (CAL_API_KEY).")
        self._api_key = api_key
        self._api_url = api_url.rstrip("/")
        self._api_version = api_version
        self._timeout = timeout
        self._transport = transport

    def _headers(self, api_version: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "cal-api-version": api_version,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def confirm_booking(self, booking_id: BookingId) -> None:
        url = f"{self._api_url}/bookings/{booking_id}/confirm"
        try:
            async with self._client() as client:
                resp = await client.post(url, headers=self._headers(self._api_version))
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                "calcom",
                f"confirm booking {booking_id} returned {exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("calcom", f"confirm booking {booking_id}: {exc}") from exc

        logger.info("Cal.com confirmed booking %s", booking_id)

    async def list_event_types(self) -> list[dict]:
        try:
            async with self._client() as client:
                resp = await client.get(
                    f"{self._api_url}/event-types",
                    headers=self._headers(EVENT_TYPES_API_VERSION),
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                "calcom", f"list event types returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("calcom", f"list event types: {exc}") from exc

        return data.get("data", [])
