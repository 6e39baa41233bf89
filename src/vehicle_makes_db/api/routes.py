"""REST endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from vehicle_makes_db.db import MakeRepository
from vehicle_makes_db.schemas import Make

from .dependencies import get_make_repository

router = APIRouter(prefix="/api/v1", tags=["Makes"])

MakeRepositoryDep = Annotated[MakeRepository, Depends(get_make_repository)]


@router.get("/makes", response_model=list[Make])
async def list_makes(repository: MakeRepositoryDep) -> list[Make]:
    """Return every stored make with its vehicle types.

    Serves whatever is persisted, including shells whose types have not
    been loaded yet.
    """
    return await repository.find_all()
