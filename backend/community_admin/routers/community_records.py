"""
Routers for the community-scoped content collections: news, businesses and
resources. They share one shape, filtered by exact community name.
"""
from typing import Optional
from fastapi import APIRouter, Body, Depends
from ..config import settings, logger
from ..dependencies import get_db, require_session
from ..services import record_service


def build_router(path: str, collection_key: str, label: str, sort_field: Optional[str] = None) -> APIRouter:
    router = APIRouter(prefix=f"/api/{path}", tags=[path])

    def collection() -> str:
        return getattr(settings, collection_key)

    @router.get("")
    async def list_items(community: Optional[str] = None, db=Depends(get_db), session: dict = Depends(require_session)):
        items = await record_service.list_records(db, collection(), {"community": community})
        if sort_field:
            items = record_service.sort_newest_first(items, sort_field)
        return items

    @router.post("")
    async def create_item(data: dict = Body(...), db=Depends(get_db), session: dict = Depends(require_session)):
        logger.info(f"Creating {label.lower()} in collection: {collection()}")
        return await record_service.create_record(db, collection(), data)

    @router.put("/{item_id}")
    async def update_item(item_id: str, data: dict = Body(...), db=Depends(get_db), session: dict = Depends(require_session)):
        return await record_service.update_record(db, collection(), item_id, data, label)

    @router.delete("/{item_id}")
    async def delete_item(item_id: str, db=Depends(get_db), session: dict = Depends(require_session)):
        await record_service.delete_record(db, collection(), item_id)
        return {"success": True}

    return router


news_router = build_router("news", "NEWS_COLLECTION", "News", sort_field="date")
businesses_router = build_router("businesses", "BUSINESSES_COLLECTION", "Business")
resources_router = build_router("resources", "RESOURCES_COLLECTION", "Resource")
