import time
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from ..config import logger
from ..dependencies import get_db, require_session
from ..exceptions import CommunityNotFoundError
from ..models import CommunityAuthRequest
from ..services import community_service
from ..services.auth_service import create_token

router = APIRouter(prefix="/api/communities", tags=["communities"])


@router.post("")
async def community_auth(data: CommunityAuthRequest, db=Depends(get_db)):
    """Register (action="register") or log in to a community account."""
    if not (data.communityName or "").strip() or not data.password:
        raise HTTPException(400, "Community name and password are required")

    if data.action == "register":
        community = await community_service.register_community(db, data.communityName, data.password)
        message = "Community account created successfully"
    else:
        community = await community_service.authenticate_community(db, data.communityName, data.password)
        message = "Login successful"

    logger.info(f'Community session issued for "{community["name"]}"')
    return {
        "success": True,
        "message": message,
        "community": community,
        "token": create_token(community["id"], community["name"]),
    }


@router.get("")
async def check_community(name: Optional[str] = None, db=Depends(get_db)):
    if not name or not name.strip():
        raise HTTPException(400, "Community name is required")
    return {"exists": await community_service.community_exists(db, name)}


@router.get("/{name}/identity")
async def community_identity(name: str, db=Depends(get_db), session: dict = Depends(require_session)):
    identity = await community_service.resolve_community_identity(db, name)
    if identity is None:
        raise CommunityNotFoundError(name.strip())
    return identity.model_dump()


@router.post("/{name}/associate")
async def associate(
    name: str,
    associateNullUsers: bool = False,
    db=Depends(get_db),
    session: dict = Depends(require_session),
):
    start_time = time.perf_counter()
    result = await community_service.associate_community(db, name, include_unaffiliated=associateNullUsers)
    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(f"Association sweep finished: {result.total} records | {elapsed:.1f}ms")
    return {
        "success": True,
        "message": f'Successfully associated {result.total} items with "{name.strip()}"',
        "results": result.model_dump(),
    }
