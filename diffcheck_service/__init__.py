"""Webhook service that inspects pushed commits for sensitive content."""

__version__ = "0.1.0"
