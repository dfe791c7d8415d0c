"""
Dependency Injection Container.

Builds the immutable configuration and account registry once and hands them
to services and use cases explicitly, so request handlers never reach for
module-level mutable state.
"""

from dependency_injector import containers, providers

from .config import settings as app_settings
from .models.account import AccountRegistry

# Services
from .services.email_service import EmailNotificationService
from .services.graph_api_service import GraphAPIService
from .services.mention_extractor import MentionExtractor

# Use cases
from .use_cases.process_webhook_event import ProcessWebhookEventUseCase


class Container(containers.DeclarativeContainer):
    """
    Application DI container.

    Registry and extractor are singletons (read-only after startup); services
    and use cases are factories (new instance per request).
    """

    settings = providers.Object(app_settings)

    # Read-only after startup - Singleton
    account_registry = providers.Singleton(
        AccountRegistry.from_settings,
        meta_settings=settings.provided.meta,
    )

    mention_extractor = providers.Singleton(
        MentionExtractor,
        registry=account_registry,
    )

    # Services - Factory (each owns its own HTTP session / SMTP connection)
    graph_api_service = providers.Factory(
        GraphAPIService,
        base_url=settings.provided.meta.graph_base_url,
        timeout_seconds=settings.provided.meta.request_timeout_seconds,
    )

    email_service = providers.Factory(
        EmailNotificationService,
        email_settings=settings.provided.email,
    )

    # Use Cases - Factory (new instance per request)
    process_webhook_event_use_case = providers.Factory(
        ProcessWebhookEventUseCase,
        registry=account_registry,
        extractor=mention_extractor,
        graph_service=graph_api_service,
        email_service=email_service,
    )


# Global container instance
container = Container()


def get_container() -> Container:
    """
    Get the global container instance.

    Used as a FastAPI dependency:
        container: Container = Depends(get_container)
    """
    return container


def reset_container():
    """
    Reset container for testing.

    Clears all singletons and allows fresh initialization.
    """
    container.reset_singletons()
