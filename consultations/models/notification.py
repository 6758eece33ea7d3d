"""Outbound email record."""

from dataclasses import dataclass


@dataclass
class EmailNotification:
    recipient: str
    subject: str
    html: str
    text: str
