"""Resend transactional email provider."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any

import resend

from consultations.errors import UpstreamError
from consultations.models import EmailNotification

from .base import EmailProvider

logger = logging.getLogger(__name__)


class ResendProvider(EmailProvider):
    """EmailProvider backed by the Resend API.

    The Resend SDK only reads its key from the module attribute, so
    constructing a provider sets the process-wide ``resend.api_key``.
    """

    def __init__(self, api_key: str, sender: str, resend_sdk: Any | None = None) -> None:
        if not api_key:
            raise ValueError("Resend API key must be provided (RESEND_API_KEY).")
        if not sender:
            raise ValueError("Sender address must be provided (EMAIL_FROM).")
        self._resend = resend_sdk if resend_sdk is not None else resend
        self._resend.api_key = api_key
        self._sender = sender

    async def send(self, notification: EmailNotification) -> str:
        params = {
            "from": self._sender,
            "to": [notification.recipient],
            "subject": notification.subject,
            "html": notification.html,
            "text": notification.text,
        }
        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(
                None, partial(self._resend.Emails.send, params)
            )
        except Exception as exc:
            raise UpstreamError("resend", f"send email: {exc}") from exc

        message_id = ""
        if isinstance(response, dict):
            message_id = response.get("id", "")
        logger.info("Sent '%s' email via Resend (id=%s)", notification.subject, message_id)
        return message_id
