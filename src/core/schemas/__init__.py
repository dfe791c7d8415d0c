"""Core Pydantic schemas for the application."""

from .mention import MentionRecord, Platform
from .webhook import (
    ChangeAuthor,
    CommentMedia,
    FacebookFeedValue,
    InstagramCommentValue,
    WebhookChange,
    WebhookEntry,
    WebhookPayload,
    WebhookProcessingResult,
)

__all__ = [
    "MentionRecord",
    "Platform",
    "ChangeAuthor",
    "CommentMedia",
    "FacebookFeedValue",
    "InstagramCommentValue",
    "WebhookChange",
    "WebhookEntry",
    "WebhookPayload",
    "WebhookProcessingResult",
]
