"""Unified mention record shared by the Facebook and Instagram pipelines."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Platform(str, Enum):
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class MentionRecord(BaseModel):
    """
    One detected mention, normalized across platforms.

    Frozen: enrichment produces a copy via `model_copy(update=...)`.
    Facebook fills `tagger_name`; Instagram fills `tagger_username`.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    platform: Platform
    mention_type: str = "comment"
    post_id: str = ""
    post_url: Optional[str] = None
    post_content: Optional[str] = None
    comment_id: str = ""
    comment_text: str = ""
    tagger_id: str = ""
    tagger_name: Optional[str] = None
    tagger_username: Optional[str] = None
    tagger_profile_pic_url: Optional[str] = None
    mentioned_username: str = ""
    mentioned_page_id: Optional[str] = None
    timestamp: Optional[int] = None

    @property
    def author(self) -> str:
        return self.tagger_name or self.tagger_username or self.tagger_id or "Unknown"

    @property
    def account_label(self) -> str:
        return self.mentioned_username or self.mentioned_page_id or "your account"
