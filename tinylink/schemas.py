from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LinkCreate(BaseModel):
    long_url: str | None = Field(default=None, alias="longUrl")
    custom_code: str | None = Field(default=None, alias="customCode")

    model_config = ConfigDict(populate_by_name=True)

class LinkOut(BaseModel):
    code: str
    target_url: str
    total_clicks: int
    last_clicked_time: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("last_clicked_time", "created_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite drops the offset; every stored timestamp is UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class LinkCreated(LinkOut):
    short_url: str

class HealthOut(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    uptime_formatted: str
    total_links: int
    server_platform: str
    server_pid: int
    timestamp: datetime

class ErrorOut(BaseModel):
    error: str
