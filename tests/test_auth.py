# tests/test_auth.py

"""
Tests for authentication endpoints and the bearer-token dependency.
"""

from fastapi.testclient import TestClient


def test_login_success(client: TestClient, fake_supabase):
    """Test successful login."""
    fake_supabase.auth.passwords["super@example.com"] = ("password123", "super-1")

    response = client.post(
        "/auth/login",
        json={"email": " Super@Example.com ", "password": "password123"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["access_token"] == "token-super-1"
    assert data["token_type"] == "bearer"


def test_login_invalid_credentials(client: TestClient, fake_supabase):
    """Test login with invalid credentials."""
    fake_supabase.auth.passwords["super@example.com"] = ("password123", "super-1")

    response = client.post(
        "/auth/login",
        json={"email": "super@example.com", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_me_requires_token(client: TestClient):
    response = client.get("/auth/me")
    assert response.status_code in (401, 403)


def test_me_with_invalid_token(client: TestClient):
    response = client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401


def test_me_resolves_actor_from_users_row(client: TestClient, fake_supabase):
    fake_supabase.auth.tokens["good-token"] = "zonal-admin-1"

    response = client.get("/auth/me", headers={"Authorization": "Bearer good-token"})

    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "zonalAdmin"
    assert data["zone_id"] == "zone-1"
    assert data["ward_id"] == "ward-1"


def test_suspended_account_is_refused(client: TestClient, fake_supabase):
    fake_supabase.row("users", "ward-admin-1")["status"] = "suspended"
    fake_supabase.auth.tokens["wanda-token"] = "ward-admin-1"

    response = client.get("/auth/me", headers={"Authorization": "Bearer wanda-token"})

    assert response.status_code == 403


def test_account_without_profile_is_refused(client: TestClient, fake_supabase):
    fake_supabase.auth.tokens["orphan-token"] = "no-such-user"

    response = client.get("/auth/me", headers={"Authorization": "Bearer orphan-token"})

    assert response.status_code == 403


def test_navigation_for_member(client: TestClient, login_as, member_user):
    login_as(member_user)

    response = client.get("/auth/navigation")

    assert response.status_code == 200
    assert [item["name"] for item in response.json()["items"]] == ["Settings"]


def test_update_profile_ignores_role(client: TestClient, login_as, member_user, fake_supabase):
    login_as(member_user)

    response = client.patch("/auth/me", json={"phone": "0800000000"})

    assert response.status_code == 200
    row = fake_supabase.row("users", "member-2")
    assert row["phone"] == "0800000000"
    assert row["role"] == "member"


def test_change_password_rejects_wrong_current_password(client: TestClient, login_as, member_user, fake_supabase):
    fake_supabase.auth.passwords["max@example.com"] = ("old-secret", "member-2")
    login_as(member_user)

    response = client.post("/auth/change-password", json={
        "current_password": "not-it",
        "new_password": "new-secret",
        "confirm_password": "new-secret",
    })

    assert response.status_code == 400
    assert response.json()["notice"]["description"] == "Current password is incorrect"
    fake_supabase.auth.admin.update_user_by_id.assert_not_called()


def test_change_password_success(client: TestClient, login_as, member_user, fake_supabase):
    fake_supabase.auth.passwords["max@example.com"] = ("old-secret", "member-2")
    login_as(member_user)

    response = client.post("/auth/change-password", json={
        "current_password": "old-secret",
        "new_password": "new-secret",
        "confirm_password": "new-secret",
    })

    assert response.status_code == 200
    fake_supabase.auth.admin.update_user_by_id.assert_called_once_with("member-2", {"password": "new-secret"})


def test_profile_picture_must_be_an_image(client: TestClient, login_as, member_user):
    login_as(member_user)

    response = client.post(
        "/auth/me/picture",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
