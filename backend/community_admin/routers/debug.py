"""
Development-only diagnostics for Firebase connectivity.
Never returns secret values, only their presence and length.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from ..config import settings
from ..dependencies import get_db

router = APIRouter(prefix="/api/_debug", tags=["debug"])

UNAUTHENTICATED_HINT = (
    "UNAUTHENTICATED usually means the FIREBASE_PROJECT_ID / FIREBASE_CLIENT_EMAIL / private key "
    "do not all come from the SAME service-account JSON, or the service account lacks Firestore "
    "permissions for that project."
)


def require_development():
    if settings.is_production:
        raise HTTPException(404, "Not found")


def serialize_error(err: Exception) -> dict:
    code = getattr(err, "code", None)
    details = getattr(err, "details", None)
    return {
        "name": type(err).__name__,
        "message": str(err),
        "code": str(code) if code is not None else None,
        "details": str(details) if details is not None else None,
    }


@router.get("/firestore", dependencies=[Depends(require_development)])
async def firestore_check(db=Depends(get_db)):
    """Minimal read that does not create or modify data."""
    try:
        async for _ in db.collection("_health").limit(1).stream():
            break
    except Exception as e:
        unauthenticated = "UNAUTHENTICATED" in str(e) or getattr(e, "code", None) == 16
        return JSONResponse(
            status_code=500,
            content={
                "ok": False,
                "error": serialize_error(e),
                "hint": UNAUTHENTICATED_HINT if unauthenticated else None,
            },
        )
    return {"ok": True}


@router.get("/firebase-env", dependencies=[Depends(require_development)])
async def firebase_env():
    private_key = settings.FIREBASE_PRIVATE_KEY or ""
    return {
        "environment": settings.ENVIRONMENT,
        "projectId": settings.FIREBASE_PROJECT_ID,
        "clientEmail": settings.FIREBASE_CLIENT_EMAIL,
        "hasProjectId": bool(settings.FIREBASE_PROJECT_ID),
        "hasClientEmail": bool(settings.FIREBASE_CLIENT_EMAIL),
        "hasPrivateKey": bool(private_key),
        "hasCredentialsFile": bool(settings.FIREBASE_CRED_PATH),
        "hasCredentialsBase64": bool(settings.FIREBASE_CRED_BASE64),
        "hasServiceAccountKey": bool(settings.FIREBASE_SERVICE_ACCOUNT_KEY),
        "privateKeyLength": len(private_key),
        "privateKeyLooksPem": "BEGIN PRIVATE KEY" in private_key and "END PRIVATE KEY" in private_key,
        "inMemoryBackends": settings.USE_IN_MEMORY_BACKENDS,
    }
