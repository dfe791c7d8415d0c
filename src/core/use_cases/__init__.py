"""Use case layer for business logic (Clean Architecture)."""

from .process_webhook_event import MissingCredentialsError, ProcessWebhookEventUseCase

__all__ = [
    "MissingCredentialsError",
    "ProcessWebhookEventUseCase",
]
