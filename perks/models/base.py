from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    """Naive UTC timestamp; all datetimes are stored without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(SQLModel):
    """Base model class with common fields"""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})
