"""Pydantic models for Cal.com booking webhook events."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, NewType, Optional

from pydantic import BaseModel, Field, field_validator

from consultations.errors import ConfigurationError

# Opaque id assigned by Cal.com; the only key joining the two webhooks.
BookingId = NewType("BookingId", str)


class TriggerEvent(str, Enum):
    CREATED = "BOOKING_CREATED"
    CANCELLED = "BOOKING_CANCELLED"
    REJECTED = "BOOKING_REJECTED"
    REQUESTED = "BOOKING_REQUESTED"


class BookingEvent(BaseModel):
    """Envelope of a Cal.com webhook delivery.

    ``trigger_event`` is kept as a plain string: Cal.com sends many more
    trigger types than we act on and all of them must be acknowledged.
    """

    trigger_event: str = Field(alias="triggerEvent")
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    @field_validator("payload", mode="before")
    @classmethod
    def _null_payload(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def is_requested(self) -> bool:
        return self.trigger_event == TriggerEvent.REQUESTED.value


class Organizer(BaseModel):
    email: str
    name: Optional[str] = None


class BookingRequest(BaseModel):
    """Fields of a BOOKING_REQUESTED payload needed to start checkout."""

    uid: str = Field(min_length=1)
    type: str = Field(min_length=1)  # event type slug, doubles as price lookup key
    length: int = Field(ge=0)  # minutes
    organizer: Organizer
    title: str = ""

    @property
    def booking_id(self) -> BookingId:
        return BookingId(self.uid)

    @property
    def display_name(self) -> str:
        return self.organizer.name or self.organizer.email


def quantity_for(requested_length: int, unit_length: int) -> int:
    """Billable units for a booking: partial units round up, never below one."""
    if unit_length <= 0:
        raise ConfigurationError(f"quantity length must be positive, got {unit_length}")
    return max(math.ceil(requested_length / unit_length), 1)
