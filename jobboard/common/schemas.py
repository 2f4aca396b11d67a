"""
Input models for announcement writes.

Models accept either the camelCase keys used on the wire and in the store
(``externalLink``) or snake_case attribute names (``external_link``).
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .types import ContentType


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize datetimes to naive UTC, the form pymongo returns on reads."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ImportantDateInput(_CamelModel):
    """A dated event attached to an announcement (exam date, last date, ...)."""
    event_name: str = Field(..., min_length=1)
    event_date: datetime
    description: Optional[str] = None

    @field_validator("event_date")
    @classmethod
    def normalize_event_date(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class AnnouncementCreate(_CamelModel):
    """Payload for creating an announcement."""
    title: str
    type: ContentType
    category: str = ""
    organization: str = ""
    content: Optional[str] = None
    external_link: Optional[str] = None
    location: Optional[str] = None
    deadline: Optional[datetime] = None
    min_qualification: Optional[str] = None
    age_limit: Optional[str] = None
    application_fee: Optional[str] = None
    total_posts: Optional[int] = Field(default=None, ge=0)
    salary_min: Optional[int] = Field(default=None, ge=0)
    salary_max: Optional[int] = Field(default=None, ge=0)
    tags: List[str] = Field(default_factory=list)
    important_dates: List[ImportantDateInput] = Field(default_factory=list)
    job_details: Optional[Any] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("deadline")
    @classmethod
    def normalize_deadline(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class BulkUpsertItem(AnnouncementCreate):
    """Import row keyed by its stable slug."""
    slug: str

    @field_validator("slug")
    @classmethod
    def slug_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("slug must not be blank")
        return v


class AnnouncementUpdate(_CamelModel):
    """
    Partial update payload.

    Only fields present in ``model_fields_set`` are written; an explicit
    ``None`` clears optional fields, an omitted field is left untouched.
    """
    title: Optional[str] = None
    type: Optional[ContentType] = None
    category: Optional[str] = None
    organization: Optional[str] = None
    content: Optional[str] = None
    external_link: Optional[str] = None
    location: Optional[str] = None
    deadline: Optional[datetime] = None
    min_qualification: Optional[str] = None
    age_limit: Optional[str] = None
    application_fee: Optional[str] = None
    total_posts: Optional[int] = Field(default=None, ge=0)
    salary_min: Optional[int] = Field(default=None, ge=0)
    salary_max: Optional[int] = Field(default=None, ge=0)
    tags: Optional[List[str]] = None
    important_dates: Optional[List[ImportantDateInput]] = None
    job_details: Optional[Any] = None
    is_active: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("deadline", mode="before")
    @classmethod
    def empty_deadline_clears(cls, v: Any) -> Any:
        # Admin forms send "" to clear the deadline
        if v == "":
            return None
        return v

    @field_validator("deadline")
    @classmethod
    def normalize_deadline(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class BatchUpdateItem(BaseModel):
    """One entry of a batch update request."""
    id: str
    data: AnnouncementUpdate
