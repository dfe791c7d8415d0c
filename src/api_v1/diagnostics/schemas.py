"""
Pydantic v2 schemas for diagnostics API endpoints.
"""

from typing import Dict, Any, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class ConfigurationSummary(BaseModel):
    """Which parts of the configuration are present. Never exposes secrets."""
    model_config = ConfigDict()

    facebook_pages: List[str] = Field(description="Configured page ids")
    monitored_usernames: List[str] = Field(description="Instagram usernames checked for mentions")
    settings_present: Dict[str, bool] = Field(description="Presence flags for key settings")


class StatusResponse(BaseModel):
    """Response for the service status endpoint"""
    model_config = ConfigDict()

    status: str = Field(description="Service status")
    message: str = Field(description="Human readable status")
    timestamp: datetime = Field(description="Status timestamp")
    configuration: ConfigurationSummary


class PageInfoResponse(BaseModel):
    """Response for a Graph API page lookup"""
    model_config = ConfigDict()

    status: str = Field(description="Lookup status")
    message: str = Field(description="Human readable result")
    page: Dict[str, Any] = Field(description="Graph API page fields")


class TestEmailResponse(BaseModel):
    """Response for the test email endpoint"""
    model_config = ConfigDict()

    status: str = Field(description="Request status")
    message: str = Field(description="Human readable result")
    success: bool = Field(description="Whether SMTP delivery succeeded")
    message_id: str | None = Field(default=None, description="SMTP Message-ID when delivered")
    error: str | None = Field(default=None, description="Delivery error if any")
