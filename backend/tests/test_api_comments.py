def _book_rating(client, book_id):
    book = client.get(f"/api/books/id/{book_id}").json()
    return book["rating"], book["ratingCount"]


def test_rating_scenario(admin_client, user_client, client, catalog):
    book_id = catalog["book"]["id"]

    first = user_client.post(f"/api/books/{book_id}/comments", json={"content": "Muito bom!", "rating": 4})
    assert first.status_code == 201
    first = first.json()
    assert first["isApproved"] is False
    assert _book_rating(client, book_id) == (0.0, 0)
    assert client.get(f"/api/books/{book_id}/comments").json() == []

    resp = admin_client.post(f"/api/admin/comments/{first['id']}/approve")
    assert resp.status_code == 200
    assert resp.json()["isApproved"] is True
    assert _book_rating(client, book_id) == (4.0, 1)

    second = user_client.post(f"/api/books/{book_id}/comments", json={"content": "Mais ou menos", "rating": 2}).json()
    admin_client.post(f"/api/admin/comments/{second['id']}/approve")
    assert _book_rating(client, book_id) == (3.0, 2)

    public = client.get(f"/api/books/{book_id}/comments").json()
    assert len(public) == 2
    assert public[0]["user"]["username"] == "leitora"
    assert "email" not in public[0]["user"]

    # removing an approved rated comment recomputes the rating
    assert admin_client.delete(f"/api/admin/comments/{first['id']}").status_code == 204
    assert _book_rating(client, book_id) == (2.0, 1)

    admin_client.post(f"/api/admin/comments/{second['id']}/unapprove")
    assert _book_rating(client, book_id) == (0.0, 0)


def test_comment_requires_session_and_valid_payload(client, user_client, catalog):
    book_id = catalog["book"]["id"]
    assert client.post(f"/api/books/{book_id}/comments", json={"content": "Olá pessoal"}).status_code == 401

    resp = user_client.post(f"/api/books/{book_id}/comments", json={"content": "ok", "rating": 6})
    assert resp.status_code == 400
    assert {e["field"] for e in resp.json()["errors"]} == {"content", "rating"}

    assert user_client.post("/api/books/999/comments", json={"content": "Cadê o livro?"}).status_code == 404


def test_moderation_queue(admin_client, user_client, catalog):
    book_id = catalog["book"]["id"]
    pending = user_client.post(f"/api/books/{book_id}/comments", json={"content": "Aguardando"}).json()
    approved = user_client.post(f"/api/books/{book_id}/comments", json={"content": "Aprovado já"}).json()
    admin_client.post(f"/api/admin/comments/{approved['id']}/approve")

    queue = admin_client.get("/api/admin/comments", params={"status": "pending"}).json()
    assert [c["id"] for c in queue] == [pending["id"]]
    assert queue[0]["book"]["slug"] == "o-livro"
    assert queue[0]["user"]["name"]
    everything = admin_client.get("/api/admin/comments").json()
    assert {c["id"] for c in everything} == {pending["id"], approved["id"]}
    assert admin_client.get("/api/admin/comments", params={"status": "bogus"}).status_code == 400
    assert admin_client.post("/api/admin/comments/999/approve").status_code == 404


def test_helpful_and_mine(user_client, client, catalog):
    book_id = catalog["book"]["id"]
    comment = user_client.post(f"/api/books/{book_id}/comments", json={"content": "Ajudou"}).json()
    assert client.post(f"/api/comments/{comment['id']}/helpful").status_code == 401
    user_client.post(f"/api/comments/{comment['id']}/helpful")
    resp = user_client.post(f"/api/comments/{comment['id']}/helpful")
    assert resp.json()["helpfulCount"] == 2

    mine = user_client.get("/api/comments/mine").json()
    assert [c["id"] for c in mine] == [comment["id"]]
