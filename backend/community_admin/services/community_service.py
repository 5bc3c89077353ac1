"""
Community identity resolution and association sweeps.

A community can be addressed by its Firestore document ID, by the external
code stored in its "id" field (e.g. "C0001"), or by its display name in any
casing/punctuation. Historical records only carry the display name, so the
association sweep scans whole collections and compares normalized names.
"""
import re
from typing import Optional

from google.cloud.firestore_v1 import FieldFilter

from ..config import settings, logger
from ..exceptions import AuthenticationError, BadRequestError, CommunityNotFoundError, NotFoundError
from ..models import AssociationResult, CommunityIdentity
from .auth_service import hash_password, verify_password
from .record_service import now_iso

_STRIP_CHARS = re.compile(r"[.'\"]")
_WHITESPACE = re.compile(r"\s+")

NULL_COMMUNITY_VALUES = ("", "null")


def normalize_name(name: Optional[str]) -> str:
    """Lowercase, trim, drop apostrophes/periods/quotes, collapse whitespace."""
    if not name:
        return ""
    value = _STRIP_CHARS.sub("", str(name).strip().lower())
    return _WHITESPACE.sub(" ", value).strip()


def is_unaffiliated(community) -> bool:
    if community is None:
        return True
    return str(community).strip().lower() in NULL_COMMUNITY_VALUES


async def find_community(db, name: Optional[str]):
    """Return the community snapshot for a name, exact match first, then normalized."""
    trimmed = (name or "").strip()
    if not trimmed:
        return None

    communities = db.collection(settings.COMMUNITIES_COLLECTION)
    query = communities.where(filter=FieldFilter("name", "==", trimmed)).limit(1)
    async for doc in query.stream():
        return doc

    logger.debug(f'Exact community match not found for "{trimmed}", scanning normalized names')
    target = normalize_name(trimmed)
    async for doc in communities.stream():
        if normalize_name((doc.to_dict() or {}).get("name")) == target:
            return doc
    return None


async def resolve_community_identity(db, name: Optional[str]) -> Optional[CommunityIdentity]:
    """Resolve every identifier a community is known by. None when unknown."""
    doc = await find_community(db, name)
    if doc is None:
        logger.warning(f'Community not found: "{(name or "").strip()}"')
        return None

    data = doc.to_dict() or {}
    formatted_id = data.get("id") or None

    all_ids = [doc.id]
    if formatted_id and formatted_id not in all_ids:
        all_ids.append(formatted_id)

    identity = CommunityIdentity(
        document_id=doc.id,
        name=(data.get("name") or name).strip(),
        formatted_id=formatted_id,
        all_possible_ids=all_ids,
    )
    logger.info(f'Resolved community "{identity.name}" -> {identity.all_possible_ids}')
    return identity


def _merge_ids(current: list, ids: list) -> list:
    merged = list(current)
    for community_id in ids:
        if community_id not in merged:
            merged.append(community_id)
    return merged


async def _authors_in_community(db, collection: str, target: str, snapshots: list) -> set:
    authors = set()
    async for doc in db.collection(collection).stream():
        snapshots.append(doc)
        data = doc.to_dict() or {}
        if data.get("userId") and normalize_name(data.get("community")) == target:
            authors.add(data["userId"])
    return authors


async def _retag_community(docs, target: str, display_name: str) -> int:
    updated = 0
    for doc in docs:
        current = (doc.to_dict() or {}).get("community")
        if normalize_name(current) != target or current == display_name:
            continue
        await doc.reference.update({"community": display_name})
        updated += 1
    return updated


async def _stream_all(db, collection: str) -> list:
    return [doc async for doc in db.collection(collection).stream()]


async def associate_community(db, name: str, include_unaffiliated: bool = False) -> AssociationResult:
    """
    Tag users and content with a community.

    Users are matched by normalized community name, by an identifier already
    in favoriteCommunities, by authoring posts/documents of the community, or
    (with include_unaffiliated) by having no community at all. Matched users
    get the display name and the identifier union; other collections only get
    their community field rewritten. Records already in the target state are
    not written. There is no transaction: a failed write aborts the sweep.
    """
    identity = await resolve_community_identity(db, name)
    if identity is None:
        raise CommunityNotFoundError((name or "").strip())

    display_name = identity.name
    target = normalize_name(display_name)
    ids = identity.all_possible_ids
    result = AssociationResult()
    logger.info(f'Starting association sweep for "{display_name}" (include_unaffiliated={include_unaffiliated})')

    posts, documents = [], []
    authors = await _authors_in_community(db, settings.POSTS_COLLECTION, target, posts)
    authors |= await _authors_in_community(db, settings.DOCUMENTS_COLLECTION, target, documents)
    logger.info(f"Found {len(authors)} users with content for \"{display_name}\"")

    for user_doc in await _stream_all(db, settings.USERS_COLLECTION):
        user = user_doc.to_dict() or {}
        favorites = user.get("favoriteCommunities") or []
        matched = (
            normalize_name(user.get("community")) == target
            or any(community_id in favorites for community_id in ids)
            or user_doc.id in authors
            or (include_unaffiliated and is_unaffiliated(user.get("community")))
        )
        if not matched:
            continue

        merged = _merge_ids(favorites, ids)
        if user.get("community") == display_name and merged == favorites:
            logger.debug(f"Skipping user {user_doc.id}: already associated")
            continue

        await user_doc.reference.update({"community": display_name, "favoriteCommunities": merged})
        result.users += 1
        logger.debug(f"Associated user {user_doc.id} (was {user.get('community')!r})")

    result.posts = await _retag_community(posts, target, display_name)
    result.news = await _retag_community(await _stream_all(db, settings.NEWS_COLLECTION), target, display_name)
    result.businesses = await _retag_community(await _stream_all(db, settings.BUSINESSES_COLLECTION), target, display_name)
    result.resources = await _retag_community(await _stream_all(db, settings.RESOURCES_COLLECTION), target, display_name)
    result.resourceContent = await _retag_community(
        await _stream_all(db, settings.RESOURCE_CONTENT_COLLECTION), target, display_name
    )
    result.documents = await _retag_community(documents, target, display_name)

    logger.info(f'Association complete for "{display_name}": {result.model_dump()}')
    return result


# --- Community accounts ---

async def community_exists(db, name: str) -> bool:
    query = db.collection(settings.COMMUNITIES_COLLECTION).where(
        filter=FieldFilter("name", "==", name.strip())
    ).limit(1)
    async for _ in query.stream():
        return True
    return False


async def _find_exact(db, name: str):
    query = db.collection(settings.COMMUNITIES_COLLECTION).where(
        filter=FieldFilter("name", "==", name)
    ).limit(1)
    async for doc in query.stream():
        return doc
    return None


async def register_community(db, name: str, password: str) -> dict:
    name = name.strip()
    if await _find_exact(db, name):
        raise BadRequestError("Community already exists. Please log in instead.")

    now = now_iso()
    _, doc_ref = await db.collection(settings.COMMUNITIES_COLLECTION).add({
        "name": name,
        "password": hash_password(password),
        "createdAt": now,
        "updatedAt": now,
    })
    logger.info(f'Community registered: "{name}" ({doc_ref.id})')
    return {"id": doc_ref.id, "name": name}


async def authenticate_community(db, name: str, password: str) -> dict:
    doc = await _find_exact(db, name.strip())
    if doc is None:
        raise NotFoundError("Community not found. Please register first.")

    data = doc.to_dict() or {}
    if not verify_password(password, data.get("password", "")):
        raise AuthenticationError("Invalid password")

    await doc.reference.update({"lastLoginAt": now_iso()})
    return {"id": doc.id, "name": data.get("name")}
