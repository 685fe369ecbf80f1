from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from apps.backend.routes.deps import get_services
from apps.backend.services.rewards.container import RewardsServices
from apps.backend.utils.envelope import ok

router = APIRouter(tags=["queries"])


class ContactQueryIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    brand: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    message: Optional[str] = None


@router.post("/queries")
async def create_query(inb: ContactQueryIn, services: RewardsServices = Depends(get_services)):
    query = await services.catalog.create_query(inb.model_dump(exclude_none=True))
    return ok(query.to_dict(), status=201)


@router.get("/admin/queries")
async def list_queries(services: RewardsServices = Depends(get_services)):
    queries = await services.catalog.list_queries()
    return ok([q.to_dict() for q in queries], meta={"count": len(queries)})


@router.delete("/admin/queries/{query_key}")
async def delete_query(query_key: str, services: RewardsServices = Depends(get_services)):
    return ok(await services.catalog.delete_query(query_key))
