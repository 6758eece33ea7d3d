"""External provider abstractions and implementations."""

from .base import EmailProvider, PaymentProvider, SchedulingProvider

__all__ = ["EmailProvider", "PaymentProvider", "SchedulingProvider", "build_providers"]


def build_providers(config):
    """Construct the live Cal.com, Stripe and Resend clients from settings."""
    from .calcom import CalcomProvider
    from .resend_email import ResendProvider
    from .stripe_payments import StripeProvider

    scheduling = CalcomProvider(
        api_key=config.cal_api_key,
        api_url=config.calcom_api_url,
        api_version=config.calcom_api_version,
    )
    payments = StripeProvider(
        secret_key=config.stripe_secret_key,
        webhook_secret=config.stripe_webhook_secret,
    )
    email = ResendProvider(api_key=config.resend_api_key, sender=config.email_from)
    return scheduling, payments, email
