"""
Pytest configuration and shared fixtures for all tests.

This file provides:
- Test environment (pages, verify token, app secret, SMTP) set before app import
- Account registry and mock service fixtures
- Webhook payload factories
- FastAPI test clients with the DI container overridden
"""

import hashlib
import hmac
import json
import os
import sys
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

# Settings are built at import time, so the environment must be in place first
TEST_ENV = {
    "META_APP_ID": "test_app_id",
    "META_APP_SECRET": "test_secret",
    "META_VERIFY_TOKEN": "verify_token",
    "PAGE_ID_1": "111",
    "PAGE_NAME_1": "Acme Corp",
    "PAGE_TOKEN_1": "page_token_1",
    "PAGE_IG_USERNAME_1": "acme",
    "PAGE_ID_2": "222",
    "PAGE_NAME_2": "Beta Shop",
    "PAGE_TOKEN_2": "page_token_2",
    "EMAIL_HOST": "smtp.example.com",
    "EMAIL_PORT": "587",
    "EMAIL_USER": "mailer",
    "EMAIL_PASS": "mailer_pass",
    "EMAIL_FROM": "noreply@example.com",
    "EMAIL_TO": "alerts@example.com",
    "DEVELOPMENT_MODE": "false",
}
os.environ.update(TEST_ENV)
os.environ.pop("BUSINESS_IG_USERNAMES", None)

from dependency_injector import providers
from fastapi.testclient import TestClient
from faker import Faker
from httpx import AsyncClient, ASGITransport

from core.config import settings
from core.container import get_container, reset_container
from core.models.account import AccountEntry, AccountRegistry
from main import app

fake = Faker()


# ============================================================================
# REGISTRY FIXTURES
# ============================================================================


@pytest.fixture
def acme_page() -> AccountEntry:
    return AccountEntry(page_id="111", name="Acme Corp", access_token="page_token_1", instagram_username="acme")


@pytest.fixture
def beta_page() -> AccountEntry:
    return AccountEntry(page_id="222", name="Beta Shop", access_token="page_token_2")


@pytest.fixture
def registry(acme_page, beta_page) -> AccountRegistry:
    """Two pages; only the first is linked to an Instagram username."""
    return AccountRegistry([acme_page, beta_page])


@pytest.fixture
def empty_registry() -> AccountRegistry:
    return AccountRegistry([])


# ============================================================================
# MOCK SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def mock_graph_service():
    """Mock Graph API service responses."""
    service = MagicMock()
    service.get_post_details = AsyncMock(return_value={
        "id": "111_999",
        "message": "Our new summer collection",
        "permalink_url": "https://www.facebook.com/acme/posts/999",
    })
    service.get_media_details = AsyncMock(return_value={
        "id": "media_123",
        "caption": "Sunset over the bay",
        "permalink": "https://www.instagram.com/p/abc123/",
    })
    service.get_user_details = AsyncMock(return_value={
        "id": "user_123",
        "username": "photo_fan",
        "profile_picture_url": "https://cdn.example.com/photo_fan.jpg",
    })
    service.get_page_info = AsyncMock(return_value={
        "id": "111",
        "name": "Acme Corp",
        "link": "https://www.facebook.com/acme",
    })
    service.close = AsyncMock()
    service.__aenter__ = AsyncMock(return_value=service)
    service.__aexit__ = AsyncMock(return_value=None)
    return service


@pytest.fixture
def mock_email_service():
    """Mock email notification service."""
    service = MagicMock()
    service.send_mention_notification = AsyncMock(
        return_value={"success": True, "message_id": "<test@example.com>"}
    )
    return service


# ============================================================================
# DEPENDENCY INJECTION FIXTURES
# ============================================================================


@pytest.fixture
def test_container(mock_graph_service, mock_email_service):
    """Global container with network-facing services replaced by mocks."""
    reset_container()
    container = get_container()
    container.graph_api_service.override(providers.Object(mock_graph_service))
    container.email_service.override(providers.Object(mock_email_service))

    yield container

    container.graph_api_service.reset_override()
    container.email_service.reset_override()
    reset_container()


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================


@pytest.fixture
def test_client(test_container) -> TestClient:
    """Sync FastAPI test client for testing endpoints."""
    return TestClient(app)


@pytest.fixture
async def async_client(test_container) -> AsyncGenerator[AsyncClient, None]:
    """Async FastAPI test client; background tasks finish before the call returns."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sign_payload():
    """Build an X-Hub-Signature-256 header value for a raw body."""
    def _sign(body: bytes) -> str:
        digest = hmac.new(settings.meta.app_secret.encode(), body, hashlib.sha256).hexdigest()
        return f"sha256={digest}"

    return _sign


@pytest.fixture
def post_webhook(async_client, sign_payload):
    """POST a payload to /webhook with a valid signature."""
    async def _post(payload: dict):
        body = json.dumps(payload).encode()
        return await async_client.post(
            "/webhook",
            content=body,
            headers={"X-Hub-Signature-256": sign_payload(body), "Content-Type": "application/json"},
        )

    return _post


# ============================================================================
# PAYLOAD FACTORIES
# ============================================================================


@pytest.fixture
def facebook_comment_payload():
    """Factory for Facebook page feed comment webhooks."""
    def _build(message: str, post_id: str = "111_999", comment_id: str = None, **value) -> dict:
        return {
            "object": "page",
            "entry": [
                {
                    "id": "111",
                    "time": 1700000000,
                    "changes": [
                        {
                            "field": "feed",
                            "value": {
                                "item": "comment",
                                "verb": "add",
                                "post_id": post_id,
                                "comment_id": comment_id or f"{post_id}_{fake.random_number(digits=6)}",
                                "message": message,
                                "from": {"id": str(fake.random_number(digits=10)), "name": fake.name()},
                                "created_time": 1700000000,
                                **value,
                            },
                        }
                    ],
                }
            ],
        }

    return _build


@pytest.fixture
def instagram_comment_payload():
    """Factory for Instagram comment webhooks."""
    def _build(text: str, media_id: str = "media_123", comment_id: str = "comment_123") -> dict:
        return {
            "object": "instagram",
            "entry": [
                {
                    "id": "instagram_business_account_id",
                    "time": 1700000000,
                    "changes": [
                        {
                            "field": "comments",
                            "value": {
                                "id": comment_id,
                                "media": {"id": media_id, "media_product_type": "FEED"},
                                "text": text,
                                "from": {"id": "user_123", "username": fake.user_name()},
                            },
                        }
                    ],
                }
            ],
        }

    return _build
