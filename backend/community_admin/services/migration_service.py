"""
One-off user migration: backfill the community field from favoriteCommunities
and make sure every user with a community carries its C#### code.
"""
import re

from ..config import settings, logger
from .community_service import is_unaffiliated

FORMATTED_ID = re.compile(r"^C\d{4}$")


async def _community_map(db) -> dict:
    """Map both community IDs and lowercased names to {"id", "name"}."""
    mapping = {}
    async for doc in db.collection(settings.COMMUNITIES_COLLECTION).stream():
        data = doc.to_dict() or {}
        community_id = data.get("id") or doc.id
        name = data.get("name")
        if community_id and name:
            entry = {"id": community_id, "name": name}
            mapping[community_id] = entry
            mapping[name.lower()] = entry
    return mapping


def plan_user_update(user: dict, communities: dict) -> dict:
    """Return the field updates a user needs; empty when nothing changes."""
    updates = {}
    favorites = user.get("favoriteCommunities") or []
    has_community = not is_unaffiliated(user.get("community"))

    if not has_community and favorites:
        for favorite in favorites:
            community = communities.get(favorite)
            if community:
                updates["community"] = community["name"]
                break

    if has_community and not any(FORMATTED_ID.match(str(f)) for f in favorites):
        community = communities.get(str(user["community"]).lower())
        if community:
            merged = list(favorites)
            if community["id"] not in merged:
                merged.append(community["id"])
            updates["favoriteCommunities"] = merged

    return updates


async def migrate_users(db, dry_run: bool = False) -> dict:
    logger.info(f"Starting user migration (dry_run={dry_run})")
    communities = await _community_map(db)
    users_ref = db.collection(settings.USERS_COLLECTION)
    users = [doc async for doc in users_ref.stream()]

    updated, skipped = 0, 0
    changes, errors = [], []

    for doc in users:
        user = doc.to_dict() or {}
        try:
            updates = plan_user_update(user, communities)
            if not updates:
                skipped += 1
                continue

            changes.append({
                "userId": doc.id,
                "before": {
                    "community": user.get("community"),
                    "favoriteCommunities": user.get("favoriteCommunities"),
                },
                "after": {
                    "community": updates.get("community", user.get("community")),
                    "favoriteCommunities": updates.get("favoriteCommunities", user.get("favoriteCommunities")),
                },
            })
            if not dry_run:
                await users_ref.document(doc.id).update(updates)
            updated += 1
            logger.info(f"{'Would update' if dry_run else 'Updated'} user {doc.id}: {updates}")
        except Exception as e:
            message = f"Error processing user {doc.id}: {e}"
            errors.append(message)
            logger.error(message)

    return {
        "success": True,
        "dryRun": dry_run,
        "summary": {
            "total": len(users),
            "updated": updated,
            "skipped": skipped,
            "errors": len(errors),
        },
        "changes": changes,
        "errors": errors,
    }
