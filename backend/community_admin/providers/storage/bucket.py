"""
Storage bucket provider for document attachments.
Wraps the blocking google-cloud-storage client so handlers can await it.
"""
from datetime import timedelta
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage
from google.oauth2 import service_account

from ...config import settings, logger
from ...exceptions import StorageError
from ..database.firestore import load_service_account_info, project_id
from .files import CHUNK_SIZE, StoredFile
from .memory import InMemoryBucket


class GcsBucket:
    """Google Cloud Storage bucket backing the documents collection."""

    def __init__(self, bucket_name: str, credentials=None, project: Optional[str] = None):
        self.bucket_name = bucket_name
        self._client = storage.Client(project=project, credentials=credentials)
        self._bucket = self._client.bucket(bucket_name)

    async def exists(self, path: str) -> bool:
        try:
            return await run_in_threadpool(self._bucket.blob(path).exists)
        except GoogleAPIError as e:
            logger.error(f"Storage error checking {path}: {e}")
            raise StorageError(f"Failed to check file: {e}") from e

    async def open(self, path: str, chunk_size: int = CHUNK_SIZE) -> StoredFile:
        """Look up the object and return it with a lazy chunk reader."""
        try:
            blob = await run_in_threadpool(self._bucket.get_blob, path)
        except GoogleAPIError as e:
            logger.error(f"Storage error opening {path}: {e}")
            raise StorageError(f"Failed to download file: {e}") from e
        if blob is None:
            raise StorageError(f"File not found in storage. Checked path: {path}")
        return StoredFile(name=blob.name, chunks=self._read_chunks(blob, chunk_size), content_type=blob.content_type)

    async def _read_chunks(self, blob, chunk_size: int):
        reader = await run_in_threadpool(blob.open, "rb", chunk_size=chunk_size)
        try:
            while True:
                chunk = await run_in_threadpool(reader.read, chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await run_in_threadpool(reader.close)

    async def signed_url(self, path: str, expires_in: int = 3600) -> str:
        blob = self._bucket.blob(path)
        try:
            return await run_in_threadpool(
                blob.generate_signed_url,
                version="v4",
                expiration=timedelta(seconds=expires_in),
                method="GET",
            )
        except (GoogleAPIError, AttributeError, ValueError) as e:
            # Signing needs a private key; ADC user credentials cannot sign.
            logger.error(f"Failed to sign URL for {path}: {e}")
            raise StorageError(f"Failed to generate file URL: {e}") from e


_bucket = None


def resolve_bucket_name() -> str:
    if settings.FIREBASE_STORAGE_BUCKET:
        return settings.FIREBASE_STORAGE_BUCKET
    project = project_id()
    if project:
        return f"{project}.appspot.com"
    raise StorageError("Storage bucket not configured")


def initialize_storage():
    global _bucket
    if _bucket:
        return

    if settings.USE_IN_MEMORY_BACKENDS:
        _bucket = InMemoryBucket()
        logger.warning("Using in-memory storage bucket")
        return

    info = load_service_account_info()
    creds = service_account.Credentials.from_service_account_info(info) if info else None
    name = resolve_bucket_name()
    _bucket = GcsBucket(name, credentials=creds, project=project_id())
    logger.info(f"Storage bucket initialized: {name}")


def get_bucket():
    """Get the document storage bucket."""
    if not _bucket:
        initialize_storage()
    return _bucket
