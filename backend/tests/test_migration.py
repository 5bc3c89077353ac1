import pytest

from community_admin.config import settings
from community_admin.services.migration_service import plan_user_update

COMMUNITIES = {
    "C0007": {"id": "C0007", "name": "Elsipogtog First Nation"},
    "elsipogtog first nation": {"id": "C0007", "name": "Elsipogtog First Nation"},
}


@pytest.mark.parametrize("user, expected", [
    ({"community": None, "favoriteCommunities": ["C0007"]}, {"community": "Elsipogtog First Nation"}),
    ({"community": "Elsipogtog First Nation"}, {"favoriteCommunities": ["C0007"]}),
    ({"community": "elsipogtog first nation", "favoriteCommunities": ["x"]}, {"favoriteCommunities": ["x", "C0007"]}),
    ({"community": "Elsipogtog First Nation", "favoriteCommunities": ["C0007"]}, {}),
    ({"community": "Unknown Town"}, {}),
    ({"community": "null", "favoriteCommunities": ["C9999"]}, {}),
])
def test_plan_user_update(user, expected):
    assert plan_user_update(user, COMMUNITIES) == expected


def test_migrate_dry_run_then_apply(client, db):
    db.seed(settings.USERS_COLLECTION, {
        "u1": {"community": None, "favoriteCommunities": ["C0007"]},
        "u2": {"community": "O'Brien First Nation"},
        "u3": {"community": "Elsipogtog First Nation", "favoriteCommunities": ["C0007"]},
    })

    preview = client.post("/api/users/migrate", params={"dryRun": "true"}).json()

    assert preview["dryRun"] is True
    assert preview["summary"] == {"total": 3, "updated": 2, "skipped": 1, "errors": 0}
    changes = {c["userId"]: c for c in preview["changes"]}
    assert changes["u1"]["after"]["community"] == "Elsipogtog First Nation"
    assert changes["u2"]["after"]["favoriteCommunities"] == ["comm-obrien"]
    assert db.dump(settings.USERS_COLLECTION)["u1"]["community"] is None

    applied = client.post("/api/users/migrate").json()

    assert applied["dryRun"] is False
    users = db.dump(settings.USERS_COLLECTION)
    assert users["u1"]["community"] == "Elsipogtog First Nation"
    assert users["u2"]["favoriteCommunities"] == ["comm-obrien"]
    assert users["u3"] == {"community": "Elsipogtog First Nation", "favoriteCommunities": ["C0007"]}
