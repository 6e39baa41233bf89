"""GraphQL schema exposing the stored makes.

Field names are camelCased by strawberry, so the shape matches the REST
records: ``makes { makeId makeName vehicleTypes { typeId typeName } }``.
"""

from typing import Annotated, Any

import strawberry
from fastapi import Depends
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from vehicle_makes_db.db import MakeRepository
from vehicle_makes_db.schemas import Make

from .dependencies import get_make_repository


@strawberry.type(name="VehicleType")
class VehicleTypeNode:
    type_id: str
    type_name: str


@strawberry.type(name="Make")
class MakeNode:
    make_id: str
    make_name: str
    vehicle_types: list[VehicleTypeNode]

    @classmethod
    def from_make(cls, make: Make) -> "MakeNode":
        return cls(
            make_id=make.make_id,
            make_name=make.make_name,
            vehicle_types=[
                VehicleTypeNode(type_id=vt.type_id, type_name=vt.type_name)
                for vt in make.vehicle_types
            ],
        )


@strawberry.type
class Query:
    @strawberry.field(description="Every stored vehicle make.")
    async def makes(self, info: Info) -> list[MakeNode]:
        repository: MakeRepository = info.context["repository"]
        return [MakeNode.from_make(make) for make in await repository.find_all()]


schema = strawberry.Schema(query=Query)


async def get_context(
    repository: Annotated[MakeRepository, Depends(get_make_repository)],
) -> dict[str, Any]:
    return {"repository": repository}


def create_graphql_router() -> GraphQLRouter:
    """GraphQL endpoint with the GraphiQL IDE enabled; queries only."""
    return GraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql",
        allow_queries_via_get=True,
    )
