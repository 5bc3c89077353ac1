"""
Test double for storage interactions.
"""
from dataclasses import dataclass, field

from ...exceptions import StorageError
from .files import CHUNK_SIZE, StoredFile


async def _iter_chunks(data: bytes, chunk_size: int):
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]


@dataclass
class InMemoryBucket:
    base_url: str = "https://storage.example.test"
    stored_objects: dict = field(default_factory=dict)

    def put(self, path: str, data: bytes, content_type: str = "application/octet-stream"):
        self.stored_objects[path] = (data, content_type)

    async def exists(self, path: str) -> bool:
        return path in self.stored_objects

    async def open(self, path: str, chunk_size: int = CHUNK_SIZE) -> StoredFile:
        stored = self.stored_objects.get(path)
        if stored is None:
            raise StorageError(f"File not found in storage. Checked path: {path}")
        data, content_type = stored
        return StoredFile(name=path, chunks=_iter_chunks(data, chunk_size), content_type=content_type)

    async def signed_url(self, path: str, expires_in: int = 3600) -> str:
        return f"{self.base_url}/{path}?op=get&expires={expires_in}"
