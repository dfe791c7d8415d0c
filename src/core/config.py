import os
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


PAGE_ID_PREFIX = "PAGE_ID_"


class PageSettings(BaseModel):
    """One Facebook page entry (PAGE_ID_<n>, PAGE_NAME_<n>, PAGE_TOKEN_<n>, PAGE_IG_USERNAME_<n>)."""

    model_config = ConfigDict(frozen=True)

    page_id: str
    name: str
    access_token: str
    instagram_username: str | None = None


def _pages_from_env() -> list[PageSettings]:
    # Entries missing id, name or token are dropped; order follows the sorted env keys
    pages = []
    for key in sorted(k for k in os.environ if k.startswith(PAGE_ID_PREFIX)):
        index = key[len(PAGE_ID_PREFIX):]
        page_id = os.getenv(key, "").strip()
        name = os.getenv(f"PAGE_NAME_{index}", "").strip()
        token = os.getenv(f"PAGE_TOKEN_{index}", "").strip()
        ig_username = os.getenv(f"PAGE_IG_USERNAME_{index}", "").strip() or None
        if page_id and name and token:
            pages.append(
                PageSettings(
                    page_id=page_id,
                    name=name,
                    access_token=token,
                    instagram_username=ig_username,
                )
            )
    return pages


def _usernames_from_env() -> list[str]:
    raw = os.getenv("BUSINESS_IG_USERNAMES", "")
    return [username.strip() for username in raw.split(",") if username.strip()]


class MetaSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_id: str = Field(default_factory=lambda: os.getenv("META_APP_ID", "").strip())
    app_secret: str = Field(default_factory=lambda: os.getenv("META_APP_SECRET", "").strip())
    verify_token: str = Field(default_factory=lambda: os.getenv("META_VERIFY_TOKEN", "").strip())
    api_version: str = Field(default_factory=lambda: os.getenv("META_GRAPH_API_VERSION", "v18.0").strip())
    request_timeout_seconds: int = int(os.getenv("META_REQUEST_TIMEOUT_SECONDS", "30"))
    pages: list[PageSettings] = Field(default_factory=_pages_from_env)
    business_ig_usernames: list[str] = Field(default_factory=_usernames_from_env)

    @property
    def graph_base_url(self) -> str:
        return f"https://graph.facebook.com/{self.api_version}"

    @model_validator(mode="after")
    def _validate(self) -> Self:
        if not self.verify_token:
            raise ValueError("META_VERIFY_TOKEN environment variable must be set.")
        return self


class EmailSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = Field(default_factory=lambda: os.getenv("EMAIL_HOST", "").strip())
    port: int = Field(default_factory=lambda: int(os.getenv("EMAIL_PORT", "587")))
    user: str = Field(default_factory=lambda: os.getenv("EMAIL_USER", "").strip())
    password: str = Field(default_factory=lambda: os.getenv("EMAIL_PASS", ""))
    sender: str = Field(default_factory=lambda: os.getenv("EMAIL_FROM", "").strip())
    recipient: str = Field(default_factory=lambda: os.getenv("EMAIL_TO", "").strip())
    use_tls: bool = Field(default_factory=lambda: os.getenv("EMAIL_USE_TLS", "true").lower() == "true")
    timeout_seconds: int = int(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.recipient)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore", frozen=True)

    api_v1_prefix: str = "/api/v1"
    environment: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    development_mode: bool = Field(
        default_factory=lambda: os.getenv("DEVELOPMENT_MODE", "false").lower() == "true"
    )
    meta: MetaSettings = Field(default_factory=MetaSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)


settings = Settings()
