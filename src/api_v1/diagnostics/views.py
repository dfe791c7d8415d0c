"""
Diagnostics API views - configuration status, Graph connectivity and email checks.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from core.config import settings
from core.container import Container, get_container
from core.schemas.mention import MentionRecord, Platform
from core.utils.time import now_utc

from .schemas import ConfigurationSummary, PageInfoResponse, StatusResponse, TestEmailResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Diagnostics"])


@router.get("/status", response_model=StatusResponse)
async def service_status(container: Container = Depends(get_container)):
    """Report that the service is up and which settings are in place."""
    registry = container.account_registry()
    return StatusResponse(
        status="ok",
        message="Server is running",
        timestamp=now_utc(),
        configuration=ConfigurationSummary(
            facebook_pages=registry.page_ids,
            monitored_usernames=list(registry.monitored_usernames),
            settings_present={
                "META_APP_ID": bool(settings.meta.app_id),
                "META_APP_SECRET": bool(settings.meta.app_secret),
                "META_VERIFY_TOKEN": bool(settings.meta.verify_token),
                "EMAIL_CONFIG": bool(settings.email.host and settings.email.user),
            },
        ),
    )


@router.get("/pages/{page_id}", response_model=PageInfoResponse)
async def page_info(page_id: str, container: Container = Depends(get_container)):
    """Fetch a configured page from the Graph API using its own token."""
    registry = container.account_registry()
    page = registry.get_page(page_id)
    if not page:
        raise HTTPException(
            status_code=404,
            detail={
                "message": f"No configuration found for page ID: {page_id}",
                "available_pages": registry.page_ids,
            },
        )

    async with container.graph_api_service() as graph_service:
        data = await graph_service.get_page_info(page_id, page.access_token)

    if data is None:
        raise HTTPException(status_code=502, detail="Error fetching page info from Graph API")

    return PageInfoResponse(status="ok", message="Successfully fetched page info", page=data)


@router.post("/test-email", response_model=TestEmailResponse)
async def send_test_email(container: Container = Depends(get_container)):
    """Send a sample mention notification (development mode only)."""
    if not settings.development_mode:
        raise HTTPException(status_code=403, detail="Test endpoint only accessible in dev mode")

    registry = container.account_registry()
    username = next(iter(registry.monitored_usernames), "test_instagram_account")

    mention = MentionRecord(
        platform=Platform.INSTAGRAM,
        mention_type="post",
        post_id="test",
        post_url="https://instagram.com/test",
        post_content="This is a test mention to verify email notifications are working properly.",
        comment_text=f"Test mention of @{username}",
        tagger_username="Test User",
        mentioned_username=username,
        timestamp=int(now_utc().timestamp()),
    )

    logger.info(f"Sending test email | username={username}")
    result = await container.email_service().send_mention_notification(mention)

    return TestEmailResponse(
        status="ok",
        message="Test email sent" if result.get("success") else "Test email failed",
        success=bool(result.get("success")),
        message_id=result.get("message_id"),
        error=result.get("error"),
    )
