"""
Unit tests for GraphAPIService.

Tests cover:
- Session management (lazy init, reuse, cleanup)
- Successful lookups and the fields requested
- Failure sentinels for missing tokens, API errors and transport errors
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

import aiohttp

from core.services.graph_api_service import GraphAPIService

BASE_URL = "https://graph.facebook.com/v18.0"


def _mock_session(status: int = 200, payload=None, raises: Exception = None) -> MagicMock:
    """aiohttp-like session whose get() is an async context manager."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload if payload is not None else {})

    request_ctx = MagicMock()
    request_ctx.__aenter__ = AsyncMock(return_value=response)
    request_ctx.__aexit__ = AsyncMock(return_value=None)

    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    if raises is not None:
        session.get = MagicMock(side_effect=raises)
    else:
        session.get = MagicMock(return_value=request_ctx)
    return session


@pytest.mark.unit
@pytest.mark.service
class TestGraphServiceSessionManagement:
    """Test session lifecycle and management."""

    async def test_init_without_session(self):
        service = GraphAPIService(base_url=BASE_URL)

        assert service._session is None
        assert service._should_close_session is True

    async def test_init_with_provided_session(self):
        mock_session = _mock_session()
        service = GraphAPIService(base_url=BASE_URL, session=mock_session)

        assert service._session is mock_session
        assert service._should_close_session is False

    async def test_session_reuse(self):
        service = GraphAPIService(base_url=BASE_URL)

        session1 = await service._get_session()
        session2 = await service._get_session()

        assert session1 is session2
        assert isinstance(session1, aiohttp.ClientSession)
        await service.close()

    async def test_close_internal_session_is_closed(self):
        service = GraphAPIService(base_url=BASE_URL)
        session = await service._get_session()

        await service.close()

        assert session.closed

    async def test_close_external_session_not_closed(self):
        mock_session = _mock_session()
        service = GraphAPIService(base_url=BASE_URL, session=mock_session)

        await service.close()

        mock_session.close.assert_not_called()

    async def test_context_manager_support(self):
        async with GraphAPIService(base_url=BASE_URL) as service:
            session = await service._get_session()
            assert session is not None

        assert session.closed


@pytest.mark.unit
@pytest.mark.service
class TestGraphServiceLookups:
    """Test Graph API lookups."""

    async def test_get_post_details_success(self):
        payload = {"message": "Hello", "permalink_url": "https://fb.com/p/1"}
        session = _mock_session(payload=payload)
        service = GraphAPIService(base_url=BASE_URL, session=session)

        result = await service.get_post_details("111_999", "token")

        assert result == payload
        session.get.assert_called_once_with(
            f"{BASE_URL}/111_999",
            params={"access_token": "token", "fields": "message,permalink_url"},
        )

    async def test_get_media_details_fields(self):
        session = _mock_session(payload={"caption": "c", "permalink": "p"})
        service = GraphAPIService(base_url=BASE_URL, session=session)

        result = await service.get_media_details("media_1", "token")

        assert result["caption"] == "c"
        assert session.get.call_args.kwargs["params"]["fields"] == "permalink,caption"

    async def test_get_user_details_fields(self):
        session = _mock_session(payload={"username": "jane"})
        service = GraphAPIService(base_url=BASE_URL, session=session)

        await service.get_user_details("user_1", "token")

        assert session.get.call_args.kwargs["params"]["fields"] == "username,profile_picture_url"

    async def test_get_page_info_fields(self):
        session = _mock_session(payload={"name": "Acme"})
        service = GraphAPIService(base_url=BASE_URL, session=session)

        await service.get_page_info("111", "token")

        assert session.get.call_args.kwargs["params"]["fields"] == "name,id,link"

    async def test_empty_token_makes_no_request(self):
        session = _mock_session()
        service = GraphAPIService(base_url=BASE_URL, session=session)

        result = await service.get_post_details("111_999", "")

        assert result is None
        session.get.assert_not_called()

    async def test_empty_object_id_makes_no_request(self):
        session = _mock_session()
        service = GraphAPIService(base_url=BASE_URL, session=session)

        assert await service.get_media_details("", "token") is None
        session.get.assert_not_called()

    async def test_api_error_returns_none(self):
        session = _mock_session(
            status=400,
            payload={"error": {"message": "Invalid OAuth access token", "code": 190}},
        )
        service = GraphAPIService(base_url=BASE_URL, session=session)

        assert await service.get_post_details("111_999", "bad_token") is None

    async def test_transport_error_returns_none(self):
        session = _mock_session(raises=aiohttp.ClientConnectionError("connection refused"))
        service = GraphAPIService(base_url=BASE_URL, session=session)

        assert await service.get_media_details("media_1", "token") is None
