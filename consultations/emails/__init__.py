"""Email templates."""

from .checkout import CHECKOUT_SUBJECT, build_checkout_notification, render_checkout_email

__all__ = ["CHECKOUT_SUBJECT", "build_checkout_notification", "render_checkout_email"]
