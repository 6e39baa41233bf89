"""Make and VehicleType schemas.

A Make owns its VehicleTypes by composition: types have no identity
outside the make they were fetched for.
"""

from pydantic import Field

from .base import SchemaBase


class VehicleType(SchemaBase):
    """A category of vehicle produced by one make."""

    type_id: str = Field(min_length=1, description="vPIC vehicle type identifier")
    type_name: str = Field(description="Vehicle type display name")


class Make(SchemaBase):
    """A vehicle manufacturer with its discovered vehicle types.

    ``vehicle_types`` is empty for a shell, i.e. a make that was listed by
    the all-makes fetch but whose types have not been loaded yet.
    """

    make_id: str = Field(description="Stable vPIC make identifier (unique key)")
    make_name: str = Field(description="Make display name")
    vehicle_types: list[VehicleType] = Field(
        default_factory=list,
        description="Vehicle types owned by this make",
    )

    @property
    def is_shell(self) -> bool:
        """True when no vehicle types are attached."""
        return not self.vehicle_types


class MakeUpsert(SchemaBase):
    """A single-record write against the store.

    ``vehicle_types=None`` means the field is omitted from the write: an
    existing row keeps its stored types, a new row starts with none.
    """

    make_id: str = Field(min_length=1)
    make_name: str
    vehicle_types: list[VehicleType] | None = None

    @classmethod
    def from_make(cls, make: Make, *, keep_stored_types: bool = False) -> "MakeUpsert":
        """Build a write for a make, optionally leaving stored types untouched."""
        return cls(
            make_id=make.make_id,
            make_name=make.make_name,
            vehicle_types=None if keep_stored_types else list(make.vehicle_types),
        )
