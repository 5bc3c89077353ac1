"""
Collection helpers shared by the resource routers.
Records travel as plain dicts with the Firestore document ID under "id".
"""
from datetime import datetime, timezone
from typing import Optional

from google.cloud.firestore_v1 import FieldFilter

from ..config import logger
from ..exceptions import NotFoundError


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def serialize(snapshot) -> dict:
    data = snapshot.to_dict() or {}
    for key, value in data.items():
        if hasattr(value, "isoformat"):
            data[key] = value.isoformat()
    data["id"] = snapshot.id
    return data


async def list_records(db, collection: str, filters: Optional[dict] = None) -> list[dict]:
    """Stream a collection, applying equality filters whose value is set."""
    query = db.collection(collection)
    for field, value in (filters or {}).items():
        if value:
            query = query.where(filter=FieldFilter(field, "==", value))
    return [serialize(doc) async for doc in query.stream()]


async def get_record(db, collection: str, record_id: str, label: str = "Record") -> dict:
    snapshot = await db.collection(collection).document(record_id).get()
    if not snapshot.exists:
        raise NotFoundError(f"{label} not found")
    return serialize(snapshot)


async def create_record(db, collection: str, data: dict, stamp_updated: bool = False) -> dict:
    payload = {k: v for k, v in data.items() if k != "id"}
    payload["createdAt"] = now_iso()
    if stamp_updated:
        payload["updatedAt"] = payload["createdAt"]

    _, doc_ref = await db.collection(collection).add(payload)
    logger.info(f"Created record {doc_ref.id} in {collection}")
    return serialize(await doc_ref.get())


async def update_record(
    db,
    collection: str,
    record_id: str,
    data: dict,
    label: str = "Record",
    merge_existing: bool = False,
    stamp_updated: bool = False,
) -> dict:
    """
    Apply a partial update and return the stored record.

    merge_existing writes the full merged document back, so every field the
    caller did not send is preserved verbatim. The "id" key is never written.
    """
    doc_ref = db.collection(collection).document(record_id)
    current = await doc_ref.get()
    if not current.exists:
        raise NotFoundError(f"{label} not found")

    payload = {**(current.to_dict() or {}), **data} if merge_existing else dict(data)
    payload.pop("id", None)
    if stamp_updated:
        payload["updatedAt"] = now_iso()

    if payload:
        await doc_ref.update(payload)
    return serialize(await doc_ref.get())


async def delete_record(db, collection: str, record_id: str, label: str = "Record", must_exist: bool = False):
    doc_ref = db.collection(collection).document(record_id)
    if must_exist and not (await doc_ref.get()).exists:
        raise NotFoundError(f"{label} not found")
    await doc_ref.delete()
    logger.info(f"Deleted record {record_id} from {collection}")


def _timestamp(value) -> float:
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return 0.0
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp()
    return 0.0


def sort_newest_first(records: list[dict], field: str) -> list[dict]:
    return sorted(records, key=lambda r: _timestamp(r.get(field)), reverse=True)
