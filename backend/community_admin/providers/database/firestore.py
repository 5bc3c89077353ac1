"""
Firestore client bootstrap.
Credentials come from a file, a base64 blob, a JSON string or the individual
FIREBASE_* variables, falling back to application default credentials.
"""
import os
import inspect
import json
import base64
from typing import Optional

from google.cloud import firestore
from google.oauth2 import service_account

from ...config import settings, logger
from .memory import InMemoryFirestore

_db = None


def load_service_account_info() -> Optional[dict]:
    """Return the service account JSON from whichever source is configured."""
    info = None
    if settings.FIREBASE_CRED_PATH and os.path.exists(settings.FIREBASE_CRED_PATH):
        with open(settings.FIREBASE_CRED_PATH, "r", encoding="utf-8") as f:
            info = json.load(f)
        logger.info(f"Firebase credentials loaded from file: {settings.FIREBASE_CRED_PATH}")
    elif settings.FIREBASE_CRED_BASE64:
        # Remove whitespace (including newlines) from base64 string
        clean_base64 = settings.FIREBASE_CRED_BASE64.replace('\n', '').replace(' ', '')
        info = json.loads(base64.b64decode(clean_base64))
        logger.info("Firebase credentials loaded from base64")
    elif settings.FIREBASE_SERVICE_ACCOUNT_KEY:
        try:
            info = json.loads(settings.FIREBASE_SERVICE_ACCOUNT_KEY)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY must be a valid JSON string") from e
        logger.info("Firebase credentials loaded from FIREBASE_SERVICE_ACCOUNT_KEY")
    elif settings.FIREBASE_PROJECT_ID and settings.FIREBASE_CLIENT_EMAIL and settings.FIREBASE_PRIVATE_KEY:
        info = {
            "type": "service_account",
            "project_id": settings.FIREBASE_PROJECT_ID,
            "client_email": settings.FIREBASE_CLIENT_EMAIL,
            "private_key": settings.FIREBASE_PRIVATE_KEY,
            "token_uri": "https://oauth2.googleapis.com/token",
        }
        logger.info("Firebase credentials loaded from individual environment variables")

    if info and isinstance(info.get("private_key"), str):
        info["private_key"] = info["private_key"].replace("\\n", "\n")
    return info


def load_credentials() -> Optional[service_account.Credentials]:
    info = load_service_account_info()
    if not info:
        return None
    return service_account.Credentials.from_service_account_info(info)


def project_id() -> Optional[str]:
    if settings.FIREBASE_PROJECT_ID:
        return settings.FIREBASE_PROJECT_ID
    info = load_service_account_info()
    return info.get("project_id") if info else None


def initialize_firebase():
    """Initialize Firestore (or the in-memory stand-in)."""
    global _db
    if _db:
        return

    if settings.USE_IN_MEMORY_BACKENDS:
        _db = InMemoryFirestore()
        logger.warning("Using in-memory Firestore backend")
        return

    creds = load_credentials()
    _db = firestore.AsyncClient(project=project_id(), credentials=creds)
    logger.info("Firestore client initialized")


def get_db():
    """Get Firestore client."""
    if not _db:
        initialize_firebase()
    return _db


async def close_db():
    """Close Firestore client."""
    global _db
    if _db:
        result = _db.close()
        if inspect.isawaitable(result):
            await result
        _db = None
