from dataclasses import dataclass
from typing import AsyncIterator, Optional

CHUNK_SIZE = 256 * 1024


@dataclass
class StoredFile:
    name: str
    chunks: AsyncIterator[bytes]
    content_type: Optional[str] = None
