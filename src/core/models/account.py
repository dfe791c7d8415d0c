"""Account registry - maps configured Facebook pages / Instagram usernames to Graph API credentials."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class AccountEntry(BaseModel):
    """A monitored page and the credentials used to query the Graph API for it."""

    model_config = ConfigDict(frozen=True)

    page_id: str
    name: str
    access_token: str
    instagram_username: Optional[str] = None

    def references_in(self, text: str) -> bool:
        """True when text contains @PageName or @[pageId]."""
        return f"@{self.name}" in text or f"@[{self.page_id}]" in text


class AccountRegistry:
    """
    Read-only lookup over configured accounts.

    Built once at startup and shared by every request. Pages keep their
    configured order, which matters for first-match mention detection and for
    the "first page" token fallback.
    """

    def __init__(
        self,
        accounts: Iterable[AccountEntry],
        monitored_usernames: Optional[Iterable[str]] = None,
    ):
        self._accounts: tuple[AccountEntry, ...] = tuple(accounts)
        self._by_id = {account.page_id: account for account in self._accounts}
        self._by_username = {
            account.instagram_username.lower(): account
            for account in self._accounts
            if account.instagram_username
        }

        explicit = tuple(u for u in (monitored_usernames or ()) if u)
        if explicit:
            self._monitored_usernames = explicit
        else:
            self._monitored_usernames = tuple(
                account.instagram_username
                for account in self._accounts
                if account.instagram_username
            )

    @classmethod
    def from_settings(cls, meta_settings) -> "AccountRegistry":
        """Build the registry from MetaSettings (pages + BUSINESS_IG_USERNAMES)."""
        registry = cls(
            accounts=(
                AccountEntry(
                    page_id=page.page_id,
                    name=page.name,
                    access_token=page.access_token,
                    instagram_username=page.instagram_username,
                )
                for page in meta_settings.pages
            ),
            monitored_usernames=meta_settings.business_ig_usernames,
        )
        logger.info(
            f"Account registry built | pages={len(registry.accounts)} | "
            f"monitored_usernames={list(registry.monitored_usernames)}"
        )
        return registry

    @property
    def accounts(self) -> tuple[AccountEntry, ...]:
        return self._accounts

    @property
    def monitored_usernames(self) -> tuple[str, ...]:
        return self._monitored_usernames

    @property
    def page_ids(self) -> list[str]:
        return [account.page_id for account in self._accounts]

    def is_empty(self) -> bool:
        return not self._accounts

    def get_page(self, page_id: Optional[str]) -> Optional[AccountEntry]:
        if not page_id:
            return None
        return self._by_id.get(page_id)

    def page_for_username(self, username: Optional[str]) -> Optional[AccountEntry]:
        """Case-insensitive lookup of the page linked to an Instagram username."""
        if not username:
            return None
        return self._by_username.get(username.lower())

    def token_for_page(self, page_id: Optional[str] = None) -> str:
        """Token of the given page, falling back to the first configured page; "" when none exist."""
        page = self.get_page(page_id)
        if page:
            return page.access_token
        return self._fallback_token()

    def token_for_username(self, username: Optional[str]) -> str:
        page = self.page_for_username(username)
        if page:
            return page.access_token
        return self._fallback_token()

    def _fallback_token(self) -> str:
        if self._accounts:
            return self._accounts[0].access_token
        logger.warning("No page access token available for Graph API call")
        return ""

    def find_username_in(self, text: str) -> Optional[str]:
        """First monitored username (configured order) whose @handle appears in text."""
        for username in self._monitored_usernames:
            if f"@{username}" in text:
                return username
        return None

    def find_page_in(self, text: str) -> Optional[AccountEntry]:
        """First page (configured order) referenced as @PageName or @[pageId] in text."""
        for account in self._accounts:
            if account.references_in(text):
                return account
        return None
