"""Process webhook event use case - mention detection, enrichment and notification."""

import logging
from typing import Any, Dict

from ..models.account import AccountRegistry
from ..schemas.mention import MentionRecord, Platform
from ..schemas.webhook import WebhookChange, WebhookEntry, WebhookPayload, WebhookProcessingResult
from ..services.email_service import EmailNotificationService
from ..services.graph_api_service import GraphAPIService
from ..services.mention_extractor import MentionExtractor

logger = logging.getLogger(__name__)

SUPPORTED_OBJECTS = ("page", "instagram")


class MissingCredentialsError(Exception):
    """No access token available for a Graph lookup the mention needs."""


class ProcessWebhookEventUseCase:
    """
    Process one acknowledged webhook delivery.

    Responsibilities:
    - Ignore unsupported `object` types
    - Run every change of every entry through the mention extractor
    - Enrich detected mentions with Graph API details
    - Email one notification per mention

    Changes are handled sequentially and independently: a failure in one is
    logged and never stops the rest.
    """

    def __init__(
        self,
        registry: AccountRegistry,
        extractor: MentionExtractor,
        graph_service: GraphAPIService,
        email_service: EmailNotificationService,
    ):
        self.registry = registry
        self.extractor = extractor
        self.graph_service = graph_service
        self.email_service = email_service

    async def execute(self, payload: WebhookPayload) -> WebhookProcessingResult:
        result = WebhookProcessingResult(object=payload.object, entries=len(payload.entry))

        if payload.object not in SUPPORTED_OBJECTS:
            logger.info(f"Received webhook for unsupported object | object={payload.object}")
            return result

        logger.info(f"Processing webhook | object={payload.object} | entries={len(payload.entry)}")

        try:
            for entry, change in payload.iter_changes():
                result.changes += 1
                outcome = await self._process_change(payload.object, entry, change)
                if outcome == "notified":
                    result.mentions += 1
                    result.notified += 1
                elif outcome == "undelivered":
                    result.mentions += 1
                    result.undelivered += 1
                elif outcome == "skipped":
                    result.mentions += 1
                    result.skipped += 1
                elif outcome == "failed":
                    result.failed += 1
        finally:
            await self.graph_service.close()

        logger.info(
            f"Webhook processing complete | object={result.object} | changes={result.changes} | "
            f"mentions={result.mentions} | notified={result.notified} | undelivered={result.undelivered} | "
            f"skipped={result.skipped} | failed={result.failed}"
        )
        return result

    async def _process_change(self, object_type: str, entry: WebhookEntry, change: WebhookChange) -> str:
        """Returns one of: ignored, notified, undelivered, skipped, failed."""
        try:
            mention = self.extractor.extract(object_type, entry, change)
            if mention is None:
                return "ignored"

            try:
                mention = await self.enrich(mention)
            except MissingCredentialsError as e:
                logger.error(f"Skipping notification | comment_id={mention.comment_id} | reason={e}")
                return "skipped"

            send_result = await self.email_service.send_mention_notification(mention)
            if not send_result.get("success"):
                logger.warning(
                    f"Mention notification not delivered | comment_id={mention.comment_id} | "
                    f"error={send_result.get('error')}"
                )
                return "undelivered"
            return "notified"

        except Exception:
            logger.exception(f"Error processing change | entry_id={entry.id} | field={change.field}")
            return "failed"

    async def enrich(self, mention: MentionRecord) -> MentionRecord:
        """Fill post content/url (and Instagram tagger details) from the Graph API.

        Raises MissingCredentialsError when a lookup is needed but no token is configured.
        Upstream failures leave the fields blank.
        """
        if mention.platform == Platform.FACEBOOK:
            return await self._enrich_facebook(mention)
        return await self._enrich_instagram(mention)

    async def _enrich_facebook(self, mention: MentionRecord) -> MentionRecord:
        if not mention.post_id:
            return mention

        page_id = mention.mentioned_page_id
        if not page_id:
            linked_page = self.registry.page_for_username(mention.mentioned_username)
            page_id = linked_page.page_id if linked_page else None

        token = self.registry.token_for_page(page_id)
        if not token:
            raise MissingCredentialsError("no page access token configured")

        details = await self.graph_service.get_post_details(mention.post_id, token)
        if not details:
            return mention

        return mention.model_copy(
            update={
                "post_content": details.get("message"),
                "post_url": details.get("permalink_url") or f"https://www.facebook.com/{mention.post_id}",
            }
        )

    async def _enrich_instagram(self, mention: MentionRecord) -> MentionRecord:
        if not mention.post_id and not mention.tagger_id:
            return mention

        token = self.registry.token_for_username(mention.mentioned_username)
        if not token:
            raise MissingCredentialsError(
                f"no access token configured for Instagram account {mention.mentioned_username}"
            )

        update: Dict[str, Any] = {}
        if mention.post_id:
            media = await self.graph_service.get_media_details(mention.post_id, token)
            if media:
                update["post_content"] = media.get("caption")
                update["post_url"] = media.get("permalink")

        if mention.tagger_id:
            user = await self.graph_service.get_user_details(mention.tagger_id, token)
            if user:
                if user.get("username"):
                    update["tagger_username"] = user["username"]
                update["tagger_profile_pic_url"] = user.get("profile_picture_url")

        return mention.model_copy(update=update) if update else mention
