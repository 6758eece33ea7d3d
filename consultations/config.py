"""Application configuration via environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings

log = logging.getLogger("consultations.config")


class Settings(BaseSettings):
    # Cal.com
    calcom_webhook_secret: str = ""
    cal_api_key: str = ""
    calcom_api_url: str = "https://api.cal.com/v2"
    calcom_api_version: str = "2024-08-13"
    calcom_web_url: str = "https://cal.com"

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # Resend
    resend_api_key: str = ""
    email_from: str = ""

    # Public site, used to build checkout redirect URLs
    site_url: str = ""

    # Admin auth
    admin_api_key: str = ""

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def success_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/consultations/thank-you"

    @property
    def cancel_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/consultations/payment-cancelled"

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        required = {
            "CALCOM_WEBHOOK_SECRET": self.calcom_webhook_secret,
            "STRIPE_WEBHOOK_SECRET": self.stripe_webhook_secret,
            "STRIPE_SECRET_KEY": self.stripe_secret_key,
            "CAL_API_KEY": self.cal_api_key,
            "RESEND_API_KEY": self.resend_api_key,
            "EMAIL_FROM": self.email_from,
            "SITE_URL": self.site_url,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Set them in the environment or .env."
            )

        warnings: list[str] = []
        if not self.site_url.startswith("https://"):
            warnings.append(
                f"SITE_URL is not https ({self.site_url}); Stripe rejects "
                "non-https redirect URLs in live mode."
            )
        if self.stripe_secret_key.startswith("sk_test_") and not self.debug:
            warnings.append("STRIPE_SECRET_KEY is a test key but DEBUG is off.")
        if not self.admin_api_key:
            warnings.append(
                "ADMIN_API_KEY not set. Admin APIs are "
                + ("open (DEBUG=true)." if self.debug else "locked in production.")
            )
        return warnings


settings = Settings()
