from datetime import datetime

from sqlalchemy import TIMESTAMP
from sqlmodel import Field, SQLModel

from .created import utcnow


class UpdatedDateTimeMixin(SQLModel):
    """
    Mixin that adds a last-updated timestamp to a model, refreshed on every UPDATE.

    Attributes:\n
        updated_datetime (datetime | None): The datetime when the record was last updated.
    """

    updated_datetime: datetime | None = Field(
        default=None,
        sa_type=TIMESTAMP(timezone=True),  # type: ignore
        nullable=True,
        sa_column_kwargs={"onupdate": utcnow},
    )
