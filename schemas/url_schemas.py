from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_EXPIRY_DAYS = 36500


class UrlCreateRequest(BaseModel):
    url: str = Field(..., min_length=1, description="The original URL to be shortened (http or https)")
    expires_in_days: Optional[int] = Field(None, ge=1, le=MAX_EXPIRY_DAYS, description="Number of days after which the URL will expire")
    custom_code: Optional[str] = Field(None, description="Optional custom alias for the short URL")
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://www.example.com/some/long/path",
                "expires_in_days": 30,
                "custom_code": "promo",
            }
        }
    )


class UrlCreateResponse(BaseModel):
    short_url: str = Field(..., description="The externally visible short URL")
    short_code: str = Field(..., description="The short code for the URL")
    original_url: str = Field(..., description="The original long URL")
    created_at: datetime = Field(..., description="Timestamp when the short URL was created")
    expires_at: Optional[datetime] = Field(None, description="Timestamp when the short URL will expire")
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "short_url": "http://localhost:8000/abc123",
                "short_code": "abc123",
                "original_url": "https://www.example.com/some/long/path",
                "created_at": "2024-01-01T12:00:00",
                "expires_at": "2024-01-08T12:00:00",
            }
        },
    )


class UrlInfoResponse(BaseModel):
    short_code: str = Field(..., description="The short code for the URL")
    original_url: str = Field(..., description="The original long URL, redacted in statistics")
    label: str = Field(..., description="Domain label the URL was created under")
    created_at: datetime = Field(..., description="Timestamp when the short URL was created")
    expires_at: Optional[datetime] = Field(None, description="Timestamp when the short URL will expire")
    click_count: int = Field(0, description="Number of times the short URL has been accessed")
    is_active: bool = Field(..., description="Whether the short URL still resolves")
    model_config = ConfigDict(from_attributes=True)


class UrlStatsResponse(BaseModel):
    total_urls: int
    total_clicks: int
    active_urls: int
    expired_urls: int
    recent_urls: list[UrlInfoResponse]
    model_config = ConfigDict(from_attributes=True)


class CleanupResponse(BaseModel):
    message: str
    deleted_count: int
    timestamp: datetime


class LabelSummaryResponse(BaseModel):
    label: str
    total_urls: int
    active_urls: int
    active_codes: list[str]
    model_config = ConfigDict(from_attributes=True)


class UrlErrorResponse(BaseModel):
    detail: str = Field(..., description="Error message detailing the issue with the URL operation")
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "detail": "Short code not found"
            }
        }
    )
