from conftest import bearer


def test_post_crud(client, register):
    token = register()["token"]

    created = client.post(
        "/api/posts",
        json={"title": "  Schedule  ", "content": "Round one at 10:00", "published": True},
        headers=bearer(token),
    )
    assert created.status_code == 201
    post = created.json()["post"]
    assert post["title"] == "Schedule"

    draft = client.post("/api/posts", json={"title": "Draft"}, headers=bearer(token))
    assert draft.json()["post"]["published"] is False

    listing = client.get("/api/posts").json()
    assert listing["count"] == 1
    assert listing["posts"][0]["id"] == post["id"]

    updated = client.put(
        f"/api/posts/{post['id']}", json={"content": "Moved to 11:00"}, headers=bearer(token)
    )
    assert updated.status_code == 200
    assert updated.json()["post"]["title"] == "Schedule"
    assert updated.json()["post"]["content"] == "Moved to 11:00"

    assert client.get(f"/api/posts/{post['id']}").status_code == 200
    deleted = client.delete(f"/api/posts/{post['id']}", headers=bearer(token))
    assert deleted.status_code == 200
    assert client.get(f"/api/posts/{post['id']}").status_code == 404


def test_post_writes_require_token(client):
    assert client.post("/api/posts", json={"title": "Nope"}).status_code == 401
    assert client.delete("/api/posts/anything").status_code == 401


def test_post_validation_and_missing(client, register):
    token = register()["token"]
    assert client.post("/api/posts", json={"title": "   "}, headers=bearer(token)).status_code == 400
    missing = client.put("/api/posts/missing", json={"title": "x"}, headers=bearer(token))
    assert missing.status_code == 404
    assert missing.json()["message"] == "Post not found"


def test_post_update_rejects_blank_title(client, register):
    token = register()["token"]
    post = client.post(
        "/api/posts", json={"title": "Schedule"}, headers=bearer(token)
    ).json()["post"]

    for title in ("", "   "):
        response = client.put(
            f"/api/posts/{post['id']}", json={"title": title}, headers=bearer(token)
        )
        assert response.status_code == 400

    assert client.get(f"/api/posts/{post['id']}").json()["post"]["title"] == "Schedule"
