"""Detects mentions of monitored accounts inside Facebook / Instagram webhook changes."""

import logging
from typing import Optional

from pydantic import ValidationError

from ..models.account import AccountRegistry
from ..schemas.mention import MentionRecord, Platform
from ..schemas.webhook import (
    FacebookFeedValue,
    InstagramCommentValue,
    WebhookChange,
    WebhookEntry,
)

logger = logging.getLogger(__name__)

FACEBOOK_FIELD = "feed"
FACEBOOK_ITEM = "comment"
INSTAGRAM_FIELD = "comments"


class MentionExtractor:
    """
    Turns one webhook change into a MentionRecord, or None.

    Matching is a case-sensitive substring check of `@username` against the
    monitored usernames in their configured order; the first hit wins. The
    Facebook path also accepts page references (`@PageName` / `@[pageId]`).
    No network calls happen here.
    """

    def __init__(self, registry: AccountRegistry):
        self.registry = registry

    def extract(
        self, object_type: str, entry: WebhookEntry, change: WebhookChange
    ) -> Optional[MentionRecord]:
        if object_type == "page":
            return self.extract_facebook(entry, change)
        if object_type == "instagram":
            return self.extract_instagram(entry, change)
        logger.debug(f"No extractor for object type | object={object_type}")
        return None

    def extract_facebook(
        self, entry: WebhookEntry, change: WebhookChange
    ) -> Optional[MentionRecord]:
        if change.field != FACEBOOK_FIELD or not change.value:
            logger.debug(f"Ignoring Facebook change | field={change.field}")
            return None

        try:
            value = FacebookFeedValue.model_validate(change.value)
        except ValidationError as e:
            logger.warning(f"Malformed Facebook feed value | entry_id={entry.id} | error={e}")
            return None

        if value.item != FACEBOOK_ITEM:
            logger.debug(f"Ignoring Facebook feed item | item={value.item}")
            return None

        text = value.message or ""
        mentioned_username = self.registry.find_username_in(text) or ""
        mentioned_page_id = None

        if not mentioned_username:
            page = self.registry.find_page_in(text)
            if page:
                mentioned_page_id = page.page_id
                mentioned_username = page.instagram_username or ""

        if not mentioned_username and not mentioned_page_id:
            logger.debug(f"No monitored mention in Facebook comment | comment_id={value.comment_id}")
            return None

        logger.info(
            f"Facebook mention detected | comment_id={value.comment_id} | "
            f"username={mentioned_username} | page_id={mentioned_page_id}"
        )

        author = value.from_
        return MentionRecord(
            platform=Platform.FACEBOOK,
            post_id=value.post_id or "",
            comment_id=value.comment_id or "",
            comment_text=text,
            tagger_id=(author.id if author else None) or "",
            tagger_name=(author.name if author else None) or "",
            mentioned_username=mentioned_username,
            mentioned_page_id=mentioned_page_id,
            timestamp=entry.time,
        )

    def extract_instagram(
        self, entry: WebhookEntry, change: WebhookChange
    ) -> Optional[MentionRecord]:
        if change.field != INSTAGRAM_FIELD or not change.value:
            logger.debug(f"Ignoring Instagram change | field={change.field}")
            return None

        try:
            value = InstagramCommentValue.model_validate(change.value)
        except ValidationError as e:
            logger.warning(f"Malformed Instagram comment value | entry_id={entry.id} | error={e}")
            return None

        text = value.text or ""
        mentioned_username = self.registry.find_username_in(text)
        if not mentioned_username:
            logger.debug(f"No monitored mention in Instagram comment | comment_id={value.id}")
            return None

        logger.info(
            f"Instagram mention detected | comment_id={value.id} | username={mentioned_username}"
        )

        author = value.from_
        return MentionRecord(
            platform=Platform.INSTAGRAM,
            post_id=(value.media.id if value.media else None) or "",
            comment_id=value.id or "",
            comment_text=text,
            tagger_id=(author.id if author else None) or "",
            tagger_username=(author.username if author else None) or "",
            mentioned_username=mentioned_username,
            timestamp=entry.time,
        )
