from datetime import UTC, datetime

from sqlalchemy import TIMESTAMP
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(UTC)


class CreatedDateTimeMixin(SQLModel):
    """
    Mixin that adds a creation timestamp to a model.

    Attributes:\n
        created_datetime (datetime): The datetime when the record was created.
    """

    created_datetime: datetime = Field(
        default_factory=utcnow,
        sa_type=TIMESTAMP(timezone=True),  # type: ignore
        nullable=False,
        index=True,
    )
