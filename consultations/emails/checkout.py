"""Checkout email sent after a consultation is requested.

Rendered both as HTML and as plain text; Resend sends them as one
multipart message.
"""

from __future__ import annotations

from html import escape

from consultations.models import EmailNotification

CHECKOUT_SUBJECT = "Consultation Payment"

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>Consultation payment</title></head>
  <body style="margin:auto;background:#ffffff;padding:0 8px;font-family:sans-serif;">
    <div style="margin:40px auto;max-width:600px;border:1px solid #eaeaea;border-radius:4px;padding:20px;">
      <h1 style="margin:30px 0;font-size:24px;font-weight:normal;color:#000;">Hello, {name}!</h1>
      <p style="font-size:14px;line-height:24px;color:#000;">
        Thank you for booking a consultation. To confirm your booking, please proceed with the payment.
      </p>
      <p style="font-size:14px;line-height:24px;color:#000;">
        <b>Duration:</b> {length} minutes<br>
        <b>Price:</b> {price}
      </p>
      <a href="{checkout_url}" style="background-color:#000;color:#fff;padding:12px 24px;border-radius:6px;text-decoration:none;display:inline-block;margin:24px 0;font-weight:600;font-size:16px;">Proceed to payment</a>
      <p style="font-size:14px;line-height:24px;color:#000;">
        If you have any questions, simply reply to this email.
      </p>
    </div>
  </body>
</html>
"""

_TEXT_TEMPLATE = """\
Hello, {name}!

Thank you for booking a consultation. To confirm your booking, please proceed with the payment.

Duration: {length} minutes
Price: {price}

Proceed to payment: {checkout_url}

If you have any questions, simply reply to this email.
"""


def format_usd(amount: float) -> str:
    return f"${amount:,.2f}"


def render_checkout_email(name: str, length: int, price: float, checkout_url: str) -> tuple[str, str]:
    """Return ``(html, text)`` bodies for the checkout email."""
    price_str = format_usd(price)
    html = _HTML_TEMPLATE.format(
        name=escape(name),
        length=length,
        price=escape(price_str),
        checkout_url=escape(checkout_url, quote=True),
    )
    text = _TEXT_TEMPLATE.format(
        name=name, length=length, price=price_str, checkout_url=checkout_url
    )
    return html, text


def build_checkout_notification(
    recipient: str, name: str, length: int, price: float, checkout_url: str
) -> EmailNotification:
    html, text = render_checkout_email(name, length, price, checkout_url)
    return EmailNotification(recipient=recipient, subject=CHECKOUT_SUBJECT, html=html, text=text)
