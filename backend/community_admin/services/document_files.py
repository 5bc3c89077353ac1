"""
Attachment lookup for document submissions.
Handles file path discovery, category folder fallbacks, signed URLs and
server-side downloads of remote files.
"""
from dataclasses import dataclass
from typing import AsyncIterator, Optional
from urllib.parse import quote, urlparse

import httpx

from ..config import settings, logger
from ..exceptions import NotFoundError, RemoteFileError, StorageError

# Admin categories -> storage folder names
CATEGORY_TO_STORAGE_FOLDER = {
    "Education": "education",
    "Elder Care": "elder-support",
    "Housing": "housing",
    "Income Assistance": "income-assistance",
    "Jordan's Principle": "jordans-principle",
    "Social Assistance": "social-assistance",
    "Status Cards": "status-cards",
    "Other": "other",
}

FILE_PATH_FIELDS = ("filePath", "storagePath", "fileUrl", "file", "downloadUrl")
DEFAULT_FILENAME = "document.pdf"


@dataclass
class DownloadedFile:
    filename: str
    content_type: str
    chunks: AsyncIterator[bytes]


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the RFC 5987 UTF-8 name."""
    fallback = "".join(c if 32 <= ord(c) < 127 else "_" for c in filename)
    fallback = fallback.replace("\\", "\\\\").replace('"', '\\"')
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def storage_folder(category: Optional[str]) -> Optional[str]:
    if not category:
        return None
    return CATEGORY_TO_STORAGE_FOLDER.get(category)


def is_remote(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


def find_file_path(document_id: str, data: dict, use_category: bool = False) -> Optional[str]:
    for key in FILE_PATH_FIELDS:
        if data.get(key):
            return data[key]

    if use_category:
        folder = storage_folder(data.get("category"))
        if folder:
            file_name = data.get("fileName") or data.get("name") or f"{document_id}.pdf"
            return f"{folder}/{file_name}"
    return None


def filename_from_url(url: str, default: str = DEFAULT_FILENAME) -> str:
    try:
        name = urlparse(url).path.split("/")[-1]
    except ValueError:
        return default
    return name if "." in name else default


async def file_url(bucket, document_id: str, data: dict) -> str:
    """Public URL for a document's file: remote URLs as-is, storage paths signed."""
    path = find_file_path(document_id, data)
    if not path:
        raise NotFoundError("No file path found in document")
    if is_remote(path):
        return path

    if not await bucket.exists(path):
        raise NotFoundError("File not found in storage")
    return await bucket.signed_url(path, settings.SIGNED_URL_EXPIRATION_SECONDS)


async def locate_in_storage(bucket, document_id: str, data: dict, path: str) -> str:
    """Return the storage path that exists, trying category folder fallbacks."""
    if await bucket.exists(path):
        return path

    category = data.get("category")
    folder = storage_folder(category)
    if folder:
        file_name = path.split("/")[-1] or f"{document_id}.pdf"
        candidates = [f"{folder}/{file_name}"]
        if category == "Social Assistance":
            candidates.append(f"band-assistance/{file_name}")
        for candidate in candidates:
            if await bucket.exists(candidate):
                logger.info(f"Document {document_id} file found at fallback path {candidate}")
                return candidate

    raise NotFoundError(f"File not found in storage. Checked path: {path}")


async def _iter_response(response: httpx.Response):
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    finally:
        await response.aclose()


async def fetch_remote(client: httpx.AsyncClient, url: str, filename: str) -> DownloadedFile:
    """
    Open a remote file for streaming once its status is known to be good.

    There is no host allow-list: any URL the server can reach is fetched on
    behalf of an authenticated caller, including internal addresses.
    """
    logger.info(f"Downloading remote file: {url[:100]}")
    try:
        response = await client.send(client.build_request("GET", url), stream=True)
    except httpx.RequestError as e:
        logger.error(f"Remote file request failed: {e}")
        raise StorageError(f"Failed to download file: {e}")

    if response.status_code >= 400:
        await response.aclose()
        logger.warning(f"Remote file download returned {response.status_code}")
        raise RemoteFileError("Failed to download file from URL", status_code=response.status_code)

    content_type = response.headers.get("content-type") or "application/octet-stream"
    return DownloadedFile(filename=filename, content_type=content_type, chunks=_iter_response(response))


async def download(bucket, client: httpx.AsyncClient, document_id: str, data: dict, url: Optional[str] = None) -> DownloadedFile:
    """Open a document's file from an explicit URL, its stored URL, or the bucket."""
    path = find_file_path(document_id, data, use_category=True)
    if not path:
        raise NotFoundError("No file path found in document")

    if url:
        return await fetch_remote(client, url, filename_from_url(url))

    stored_name = data.get("fileName") or data.get("name")
    if is_remote(path):
        return await fetch_remote(client, path, stored_name or DEFAULT_FILENAME)

    located = await locate_in_storage(bucket, document_id, data, path)
    stored = await bucket.open(located)
    filename = stored_name or stored.name.split("/")[-1] or DEFAULT_FILENAME
    return DownloadedFile(
        filename=filename,
        content_type=stored.content_type or "application/octet-stream",
        chunks=stored.chunks,
    )
