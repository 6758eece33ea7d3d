"""Consultation booking webhooks: Cal.com booking requests to Stripe checkout and back."""
