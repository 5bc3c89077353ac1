from .bucket import GcsBucket, initialize_storage, get_bucket
from .files import StoredFile
from .memory import InMemoryBucket

__all__ = ["GcsBucket", "StoredFile", "InMemoryBucket", "initialize_storage", "get_bucket"]
