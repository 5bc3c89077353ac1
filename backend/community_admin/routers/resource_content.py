from typing import Optional
from fastapi import APIRouter, Body, Depends
from ..config import settings
from ..dependencies import get_db, require_session
from ..services import record_service

router = APIRouter(prefix="/api/resource-content", tags=["resource-content"])

LABEL = "Resource content"


@router.get("")
async def list_resource_content(
    resourceId: Optional[str] = None,
    community: Optional[str] = None,
    db=Depends(get_db),
    session: dict = Depends(require_session),
):
    content = await record_service.list_records(
        db, settings.RESOURCE_CONTENT_COLLECTION, {"resourceId": resourceId, "community": community}
    )
    return record_service.sort_newest_first(content, "createdAt")


@router.post("")
async def create_resource_content(data: dict = Body(...), db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.create_record(db, settings.RESOURCE_CONTENT_COLLECTION, data, stamp_updated=True)


@router.get("/{content_id}")
async def get_resource_content(content_id: str, db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.get_record(db, settings.RESOURCE_CONTENT_COLLECTION, content_id, LABEL)


@router.put("/{content_id}")
async def update_resource_content(
    content_id: str, data: dict = Body(...), db=Depends(get_db), session: dict = Depends(require_session)
):
    return await record_service.update_record(
        db, settings.RESOURCE_CONTENT_COLLECTION, content_id, data, LABEL, merge_existing=True, stamp_updated=True
    )


@router.delete("/{content_id}")
async def delete_resource_content(content_id: str, db=Depends(get_db), session: dict = Depends(require_session)):
    await record_service.delete_record(db, settings.RESOURCE_CONTENT_COLLECTION, content_id, LABEL, must_exist=True)
    return {"success": True}
