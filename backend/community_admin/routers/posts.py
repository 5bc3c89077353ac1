from typing import Optional
from fastapi import APIRouter, Body, Depends
from ..config import settings
from ..dependencies import get_db, require_session
from ..services import record_service

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("")
async def list_posts(
    userId: Optional[str] = None,
    community: Optional[str] = None,
    category: Optional[str] = None,
    db=Depends(get_db),
    session: dict = Depends(require_session),
):
    filters = {"userId": userId, "community": community, "category": category}
    return await record_service.list_records(db, settings.POSTS_COLLECTION, filters)


@router.post("")
async def create_post(data: dict = Body(...), db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.create_record(db, settings.POSTS_COLLECTION, data)


@router.put("/{post_id}")
async def update_post(post_id: str, data: dict = Body(...), db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.update_record(db, settings.POSTS_COLLECTION, post_id, data, "Post")


@router.delete("/{post_id}")
async def delete_post(post_id: str, db=Depends(get_db), session: dict = Depends(require_session)):
    await record_service.delete_record(db, settings.POSTS_COLLECTION, post_id)
    return {"success": True}
