from .firestore import initialize_firebase, get_db, close_db, load_service_account_info, project_id
from .memory import InMemoryFirestore

__all__ = [
    "initialize_firebase",
    "get_db",
    "close_db",
    "load_service_account_info",
    "project_id",
    "InMemoryFirestore",
]
