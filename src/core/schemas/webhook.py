"""Pydantic schemas for Meta webhook payloads (Facebook page feed + Instagram comments)."""

from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChangeAuthor(BaseModel):
    """Author of a comment. Facebook sends `name`, Instagram sends `username`."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    username: Optional[str] = None


class FacebookFeedValue(BaseModel):
    """`value` of a Facebook `feed` change."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    item: Optional[str] = None
    verb: Optional[str] = None
    comment_id: Optional[str] = None
    post_id: Optional[str] = None
    parent_id: Optional[str] = None
    message: Optional[str] = None
    from_: Optional[ChangeAuthor] = Field(default=None, alias="from")
    created_time: Optional[int | str] = None


class CommentMedia(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    media_product_type: Optional[str] = None


class InstagramCommentValue(BaseModel):
    """`value` of an Instagram `comments` change."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    text: Optional[str] = None
    parent_id: Optional[str] = None
    from_: Optional[ChangeAuthor] = Field(default=None, alias="from")
    media: Optional[CommentMedia] = None


class WebhookChange(BaseModel):
    """One change of an entry. `value` stays unvalidated until the extractor reads it."""

    model_config = ConfigDict(extra="allow")

    field: Optional[str] = None
    value: Any = None


class WebhookEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    time: Optional[int] = None
    changes: list[WebhookChange] = Field(default_factory=list)

    @field_validator("changes", mode="before")
    @classmethod
    def null_changes_to_empty(cls, v):
        return [] if v is None else v


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str
    entry: list[WebhookEntry] = Field(default_factory=list)

    def iter_changes(self) -> Iterator[tuple[WebhookEntry, WebhookChange]]:
        """Yield every (entry, change) pair, in delivery order."""
        for entry in self.entry:
            for change in entry.changes:
                yield entry, change


class WebhookProcessingResult(BaseModel):
    """Summary of one background processing run."""

    object: str
    entries: int = 0
    changes: int = 0
    mentions: int = 0
    notified: int = 0
    undelivered: int = 0
    skipped: int = 0
    failed: int = 0
