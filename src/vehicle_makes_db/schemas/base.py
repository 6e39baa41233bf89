"""Base schema class with camelCase aliasing and ORM conversion."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SchemaBase(BaseModel):
    """Base class for all Pydantic schemas.

    Fields are declared in snake_case and exchanged in camelCase
    (``make_id`` <-> ``makeId``). Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @classmethod
    def from_orm(cls, obj: Any) -> Self:
        """
        Factory method to create a schema instance from a SQLAlchemy model.

        Args:
            obj: SQLAlchemy model instance

        Returns:
            Pydantic schema instance
        """
        return cls.model_validate(obj)

    @classmethod
    def from_orm_list(cls, objs: list[Any]) -> list[Self]:
        """Create schema instances from a list of SQLAlchemy models."""
        return [cls.from_orm(obj) for obj in objs]

    def to_record(self) -> dict[str, Any]:
        """Serialize to the camelCase record shape exposed to consumers."""
        return self.model_dump(by_alias=True)
