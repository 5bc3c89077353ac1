import time
from typing import Optional
from fastapi import APIRouter, Body, Depends
from ..config import settings, logger
from ..dependencies import get_db, require_session
from ..models import UserCreate
from ..services import record_service
from ..services.migration_service import migrate_users

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(community: Optional[str] = None, db=Depends(get_db), session: dict = Depends(require_session)):
    start_time = time.perf_counter()
    users = await record_service.list_records(db, settings.USERS_COLLECTION, {"community": community})
    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(f"Users retrieved: {len(users)} items | {elapsed:.1f}ms")
    return users


@router.post("")
async def create_user(data: UserCreate, db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.create_record(db, settings.USERS_COLLECTION, data.model_dump(exclude_none=True))


@router.post("/migrate")
async def migrate(dryRun: bool = False, db=Depends(get_db), session: dict = Depends(require_session)):
    """
    Backfill community fields on existing users.
    Use dryRun=true to preview the changes without writing.
    """
    return await migrate_users(db, dry_run=dryRun)


@router.get("/{user_id}")
async def get_user(user_id: str, db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.get_record(db, settings.USERS_COLLECTION, user_id, "User")


@router.put("/{user_id}")
async def update_user(user_id: str, data: dict = Body(...), db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.update_record(db, settings.USERS_COLLECTION, user_id, data, "User")


@router.delete("/{user_id}")
async def delete_user(user_id: str, db=Depends(get_db), session: dict = Depends(require_session)):
    await record_service.delete_record(db, settings.USERS_COLLECTION, user_id)
    return {"success": True}
