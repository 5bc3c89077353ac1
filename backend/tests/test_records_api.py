from community_admin.config import settings


def test_user_crud(client, db):
    created = client.post("/api/users", json={"name": "Mary", "email": "mary@example.org", "badge": "elder"})
    assert created.status_code == 200
    user = created.json()
    assert user["badge"] == "elder"
    assert "createdAt" in user

    fetched = client.get(f"/api/users/{user['id']}")
    assert fetched.json()["name"] == "Mary"

    updated = client.put(f"/api/users/{user['id']}", json={"community": "Elsipogtog First Nation", "id": "ignored"})
    assert updated.status_code == 200
    assert updated.json()["community"] == "Elsipogtog First Nation"
    assert updated.json()["id"] == user["id"]

    assert client.delete(f"/api/users/{user['id']}").json() == {"success": True}
    assert client.get(f"/api/users/{user['id']}").status_code == 404
    assert db.dump(settings.USERS_COLLECTION) == {}


def test_user_email_validated(client):
    response = client.post("/api/users", json={"name": "Bad", "email": "not-an-email"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("email")


def test_missing_records_return_404(client):
    assert client.get("/api/users/missing").json() == {"error": "User not found"}
    assert client.put("/api/posts/missing", json={"title": "x"}).status_code == 404
    assert client.put("/api/news/missing", json={"title": "x"}).json() == {"error": "News not found"}
    assert client.get("/api/documents/missing").status_code == 404
    assert client.delete("/api/resource-content/missing").status_code == 404


def test_users_filtered_by_community(client, db):
    db.seed(settings.USERS_COLLECTION, {
        "a": {"community": "Elsipogtog First Nation"},
        "b": {"community": "Other"},
    })
    users = client.get("/api/users", params={"community": "Other"}).json()
    assert [u["id"] for u in users] == ["b"]


def test_posts_filters(client, db):
    db.seed(settings.POSTS_COLLECTION, {
        "p1": {"userId": "u1", "category": "art", "community": "A"},
        "p2": {"userId": "u2", "category": "art", "community": "B"},
        "p3": {"userId": "u1", "category": "music", "community": "A"},
    })

    assert {p["id"] for p in client.get("/api/posts", params={"userId": "u1"}).json()} == {"p1", "p3"}
    assert {p["id"] for p in client.get("/api/posts", params={"category": "art"}).json()} == {"p1", "p2"}
    assert len(client.get("/api/posts").json()) == 3

    updated = client.put("/api/posts/p2", json={"title": "Beadwork"}).json()
    assert updated == {"id": "p2", "userId": "u2", "category": "art", "community": "B", "title": "Beadwork"}


def test_news_sorted_newest_first(client, db):
    db.seed(settings.NEWS_COLLECTION, {
        "old": {"title": "Old", "date": "2023-01-01", "community": "A"},
        "undated": {"title": "Undated", "community": "A"},
        "new": {"title": "New", "date": "2024-06-01T10:00:00Z", "community": "A"},
        "elsewhere": {"title": "Elsewhere", "date": "2025-01-01", "community": "B"},
    })
    news = client.get("/api/news", params={"community": "A"}).json()
    assert [n["id"] for n in news] == ["new", "old", "undated"]


def test_business_and_resource_create(client, db):
    business = client.post("/api/businesses", json={"name": "Bakery", "community": "A"}).json()
    resource = client.post("/api/resources", json={"name": "Clinic", "community": "A"}).json()

    assert db.dump(settings.BUSINESSES_COLLECTION)[business["id"]]["name"] == "Bakery"
    assert "createdAt" in db.dump(settings.RESOURCES_COLLECTION)[resource["id"]]
    assert client.delete(f"/api/businesses/{business['id']}").json() == {"success": True}


def test_resource_content_lifecycle(client, db):
    created = client.post(
        "/api/resource-content",
        json={"resourceId": "r1", "title": "Intake form", "content": "...", "community": "A"},
    ).json()
    assert created["createdAt"] == created["updatedAt"]

    updated = client.put(f"/api/resource-content/{created['id']}", json={"title": "Intake form v2", "id": "x"}).json()
    assert updated["title"] == "Intake form v2"
    assert updated["resourceId"] == "r1"
    assert updated["id"] == created["id"]
    assert updated["updatedAt"] >= created["updatedAt"]

    listed = client.get("/api/resource-content", params={"resourceId": "r1"}).json()
    assert [c["id"] for c in listed] == [created["id"]]
    assert "id" not in db.dump(settings.RESOURCE_CONTENT_COLLECTION)[created["id"]]

    assert client.delete(f"/api/resource-content/{created['id']}").json() == {"success": True}


def test_documents_merge_update_and_categories(client, db):
    db.seed(settings.DOCUMENTS_COLLECTION, {
        "d1": {"category": "Housing", "status": "new", "userId": "u1"},
        "d2": {"category": "Education", "status": "new"},
        "d3": {"category": "Housing"},
        "d4": {"status": "new"},
    })

    updated = client.put("/api/documents/d1", json={"status": "approved"}).json()
    assert updated == {"id": "d1", "category": "Housing", "status": "approved", "userId": "u1"}

    assert client.get("/api/documents/categories").json() == ["Education", "Housing"]
    assert {d["id"] for d in client.get("/api/documents", params={"category": "Housing"}).json()} == {"d1", "d3"}


def test_health_is_public(anonymous_client):
    assert anonymous_client.get("/api/health").json()["status"] == "ok"
    assert anonymous_client.get("/").json()["message"] == "Community Admin Backend API"
