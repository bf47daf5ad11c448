from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, login


def _me(c):
    return c.get("/api/auth/me").json()


def test_last_admin_cannot_be_deleted_or_demoted(admin_client, make_client):
    admin = _me(admin_client)

    resp = admin_client.delete(f"/api/admin/users/{admin['id']}")
    assert resp.status_code == 400
    assert "own account" in resp.json()["message"]

    resp = admin_client.put(f"/api/admin/users/{admin['id']}", json={"role": "user"})
    assert resp.status_code == 400
    assert _me(admin_client)["role"] == "admin"

    # promote a second admin who then tries to remove the first
    other = make_client()
    other.post(
        "/api/auth/register",
        json={"name": "Vice", "username": "vice", "email": "vice@leitores.org", "password": "secret1"},
    )
    vice = _me(other)
    admin_client.put(f"/api/admin/users/{vice['id']}", json={"role": "admin"})
    assert other.delete(f"/api/admin/users/{admin['id']}").status_code == 204
    # vice is now the sole admin and cannot demote themselves
    assert other.put(f"/api/admin/users/{vice['id']}", json={"role": "user"}).status_code == 400


def test_admin_user_listing(admin_client, user_client):
    users = admin_client.get("/api/admin/users").json()
    assert {u["username"] for u in users} == {ADMIN_USERNAME, "leitora"}
    assert all("password" not in u for u in users)
    user_id = _me(user_client)["id"]
    assert admin_client.get(f"/api/admin/users/{user_id}").json()["username"] == "leitora"
    assert admin_client.get("/api/admin/users/999").status_code == 404
    assert admin_client.put("/api/admin/users/999", json={"role": "admin"}).status_code == 404
    assert admin_client.put(f"/api/admin/users/{user_id}", json={"role": "owner"}).status_code == 400


def test_profile_update(user_client, admin_client):
    resp = user_client.put("/api/users/me", json={"name": "Leitora Nova", "avatarUrl": "https://img.elexandria.com/a.png"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Leitora Nova"
    assert resp.json()["avatarUrl"] == "https://img.elexandria.com/a.png"

    resp = user_client.put("/api/users/me", json={"email": "admin@elexandria.com"})
    assert resp.status_code == 409
    assert user_client.put("/api/users/me", json={"email": "invalido"}).status_code == 400


def test_password_change(user_client, make_client):
    resp = user_client.put("/api/users/me/password", json={"currentPassword": "errada", "newPassword": "novasenha"})
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "currentPassword"

    resp = user_client.put("/api/users/me/password", json={"currentPassword": "secret1", "newPassword": "novasenha"})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Password updated"}

    fresh = make_client()
    assert fresh.post("/api/auth/login", json={"username": "leitora", "password": "secret1"}).status_code == 401
    login(fresh, "leitora", "novasenha")


def test_profile_requires_session(client):
    assert client.get("/api/users/me").status_code == 401
    assert client.put("/api/users/me/password", json={"currentPassword": "a", "newPassword": "bbbbbb"}).status_code == 401


def test_admin_password_unchanged_by_failed_delete(admin_client, make_client):
    admin = _me(admin_client)
    admin_client.delete(f"/api/admin/users/{admin['id']}")
    login(make_client(), ADMIN_USERNAME, ADMIN_PASSWORD)
