import jwt
from datetime import datetime, timezone, timedelta

from community_admin.config import settings

from conftest import COMMUNITY_NAME


def test_register_then_login(anonymous_client, db):
    response = anonymous_client.post(
        "/api/communities",
        json={"communityName": "  New Village ", "password": "pw", "action": "register"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["community"]["name"] == "New Village"
    assert payload["token"]

    stored = db.dump(settings.COMMUNITIES_COLLECTION)[payload["community"]["id"]]
    assert stored["password"] != "pw"
    assert "createdAt" in stored

    login = anonymous_client.post("/api/communities", json={"communityName": "New Village", "password": "pw"})
    assert login.status_code == 200
    assert login.json()["message"] == "Login successful"
    assert "lastLoginAt" in db.dump(settings.COMMUNITIES_COLLECTION)[payload["community"]["id"]]


def test_register_existing_community_rejected(anonymous_client):
    response = anonymous_client.post(
        "/api/communities",
        json={"communityName": COMMUNITY_NAME, "password": "x", "action": "register"},
    )
    assert response.status_code == 400
    assert "already exists" in response.json()["error"]


def test_login_errors(anonymous_client):
    wrong = anonymous_client.post("/api/communities", json={"communityName": COMMUNITY_NAME, "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid password"}

    unknown = anonymous_client.post("/api/communities", json={"communityName": "Nowhere", "password": "pw"})
    assert unknown.status_code == 404

    missing = anonymous_client.post("/api/communities", json={"communityName": COMMUNITY_NAME})
    assert missing.status_code == 400
    assert missing.json() == {"error": "Community name and password are required"}


def test_login_token_opens_data_routes(anonymous_client):
    login = anonymous_client.post("/api/communities", json={"communityName": COMMUNITY_NAME, "password": "secret"})
    token = login.json()["token"]

    response = anonymous_client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json() == []


def test_exists_check(anonymous_client):
    assert anonymous_client.get("/api/communities", params={"name": f" {COMMUNITY_NAME} "}).json() == {"exists": True}
    assert anonymous_client.get("/api/communities", params={"name": "Nowhere"}).json() == {"exists": False}
    assert anonymous_client.get("/api/communities").status_code == 400


def test_data_routes_require_session(anonymous_client):
    assert anonymous_client.get("/api/users").status_code == 401
    bad = anonymous_client.get("/api/posts", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401
    assert bad.json() == {"error": "Invalid token"}


def test_token_near_expiry_is_refreshed(anonymous_client):
    now = datetime.now(timezone.utc)
    expiring = jwt.encode(
        {"sub": "comm-elsi", "uid": "comm-elsi", "community": COMMUNITY_NAME, "role": "community_admin",
         "iat": now, "exp": now + timedelta(minutes=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    response = anonymous_client.get("/api/users", headers={"Authorization": f"Bearer {expiring}"})

    assert response.status_code == 200
    new_token = response.headers["X-New-Token"]
    assert jwt.decode(new_token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])["community"] == COMMUNITY_NAME


def test_identity_endpoint(client):
    response = client.get("/api/communities/  elsipogtog FIRST nation /identity")
    assert response.status_code == 200
    assert response.json() == {
        "document_id": "comm-elsi",
        "name": COMMUNITY_NAME,
        "formatted_id": "C0007",
        "all_possible_ids": ["comm-elsi", "C0007"],
        "canonical_id": "C0007",
    }

    missing = client.get("/api/communities/Nonexistent Village/identity")
    assert missing.status_code == 404
    assert missing.json() == {"error": 'Community "Nonexistent Village" not found'}


def test_associate_endpoint(client, db):
    db.seed(settings.USERS_COLLECTION, {"u1": {"community": "null"}, "u2": {"community": "Other"}})
    db.seed(settings.BUSINESSES_COLLECTION, {"b1": {"community": "elsipogtog first nation"}})

    response = client.post(f"/api/communities/{COMMUNITY_NAME}/associate", params={"associateNullUsers": "true"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["results"]["users"] == 1
    assert payload["results"]["businesses"] == 1
    assert payload["results"]["total"] == 2
    assert payload["message"] == f'Successfully associated 2 items with "{COMMUNITY_NAME}"'
    assert db.dump(settings.USERS_COLLECTION)["u2"] == {"community": "Other"}


def test_associate_unknown_community(client):
    response = client.post("/api/communities/Nonexistent Village/associate")
    assert response.status_code == 404


def test_associate_write_failure_surfaces_as_500(client, db, monkeypatch):
    db.seed(settings.NEWS_COLLECTION, {"n1": {"community": "elsipogtog first nation"}})

    from community_admin.providers.database.memory import InMemoryDocumentReference

    async def failing_update(self, data):
        raise RuntimeError("write rejected")

    monkeypatch.setattr(InMemoryDocumentReference, "update", failing_update)

    response = client.post(f"/api/communities/{COMMUNITY_NAME}/associate")
    assert response.status_code == 500
    assert response.json() == {"error": "write rejected"}
