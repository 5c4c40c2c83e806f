"""Column mixins shared by the onboarding tables."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin(SQLModel):
    """
    ``created_at`` / ``updated_at`` columns.

    Both are stamped on insert; services bump ``updated_at`` through
    :meth:`touch` whenever a row is modified in place.
    """

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def touch(self) -> None:
        self.updated_at = utcnow()
