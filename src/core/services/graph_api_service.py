import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import settings

logger = logging.getLogger(__name__)

POST_FIELDS = "message,permalink_url"
MEDIA_FIELDS = "permalink,caption"
USER_FIELDS = "username,profile_picture_url"
PAGE_FIELDS = "name,id,link"


class GraphAPIService:
    """Read-only client for Meta Graph API lookups (posts, media, users, pages).

    Every lookup returns the decoded JSON body on success and None on any
    failure. Errors are logged, never raised.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.meta.graph_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.meta.request_timeout_seconds
        self._session = session
        self._should_close_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                connector=aiohttp.TCPConnector(limit=20, limit_per_host=10),
            )
            self._should_close_session = True
            logger.debug("Created new aiohttp.ClientSession")
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed and self._should_close_session:
            await self._session.close()
            logger.info("GraphAPIService session closed")

    async def __aenter__(self):
        """Context manager support."""
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager cleanup."""
        await self.close()

    async def get_post_details(self, post_id: str, access_token: str) -> Optional[Dict[str, Any]]:
        """Facebook post message and permalink."""
        return await self._get_object(post_id, access_token, POST_FIELDS, "Facebook post")

    async def get_media_details(self, media_id: str, access_token: str) -> Optional[Dict[str, Any]]:
        """Instagram media caption and permalink."""
        return await self._get_object(media_id, access_token, MEDIA_FIELDS, "Instagram media")

    async def get_user_details(self, user_id: str, access_token: str) -> Optional[Dict[str, Any]]:
        """Instagram user username and profile picture."""
        return await self._get_object(user_id, access_token, USER_FIELDS, "Instagram user")

    async def get_page_info(self, page_id: str, access_token: str) -> Optional[Dict[str, Any]]:
        return await self._get_object(page_id, access_token, PAGE_FIELDS, "Facebook page")

    async def _get_object(
        self, object_id: str, access_token: str, fields: str, label: str
    ) -> Optional[Dict[str, Any]]:
        """
        GET {base_url}/{object_id}?access_token=...&fields=...

        Args:
            object_id: Graph node id (post, media, user or page)
            access_token: Page access token; empty means no request is made
            fields: Comma separated Graph fields
            label: Human readable node kind for log lines

        Returns:
            Response JSON on HTTP 200, otherwise None
        """
        if not access_token:
            logger.error(f"No access token provided for Graph API call | object={label} | id={object_id}")
            return None

        if not object_id:
            logger.error(f"No object id provided for Graph API call | object={label}")
            return None

        url = f"{self.base_url}/{object_id}"
        params = {"access_token": access_token, "fields": fields}

        logger.debug(f"Fetching {label} details | id={object_id} | fields={fields}")

        try:
            session = await self._get_session()
            async with session.get(url, params=params) as response:
                response_data = await response.json(content_type=None)

                if response.status == 200:
                    logger.info(f"{label} details retrieved | id={object_id} | status_code={response.status}")
                    return response_data

                error_data = response_data.get("error", {}) if isinstance(response_data, dict) else {}
                logger.error(
                    f"Failed to fetch {label} details | id={object_id} | status_code={response.status} | "
                    f"error={error_data.get('message') if isinstance(error_data, dict) else response_data}"
                )
                return None

        except Exception as e:
            logger.error(
                f"Exception fetching {label} details | id={object_id} | error={str(e)}",
                exc_info=True,
            )
            return None
