from typing import Any

from sqlalchemy.orm import declared_attr
from sqlmodel import Field, SQLModel


class VersionedMixin(SQLModel):
    """
    Mixin that turns on optimistic concurrency control for a model.

    Every UPDATE issued through the ORM is emitted as
    `UPDATE ... SET version = :new WHERE id = :id AND version = :old`. When another
    transaction committed first the statement matches no row and SQLAlchemy raises
    `StaleDataError`, which the `optimistic` decorator turns into a retry.

    Attributes:\n
        version (int): Row version, incremented on every write.
    """

    version: int = Field(default=1, nullable=False)

    @declared_attr  # type: ignore
    def __mapper_args__(cls) -> dict[str, Any]:  # type: ignore
        return {"version_id_col": cls.__table__.c.version}  # type: ignore
