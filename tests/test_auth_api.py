import pytest
from fastapi import status

DEFAULT_PASSWORD = "Password123!"

def test_login_success(client, hr_user):
    """Test successful login with valid credentials."""
    response = client.post("/api/auth/login", json={"email": hr_user.email, "password": DEFAULT_PASSWORD})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "hr"

def test_login_email_is_case_insensitive(client, employee_user):
    response = client.post("/api/auth/login", json={"email": employee_user.email.upper(), "password": DEFAULT_PASSWORD})
    assert response.status_code == status.HTTP_200_OK
    token = response.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["user"]["id"] == employee_user.id

def test_login_invalid_credentials(client):
    """Test login failure with wrong password."""
    response = client.post("/api/auth/login", json={"email": "nonexistent@acme.com", "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["success"] is False

def test_login_inactive_user(client, db_session, employee_user):
    employee_user.is_active = False
    db_session.commit()
    response = client.post("/api/auth/login", json={"email": employee_user.email, "password": DEFAULT_PASSWORD})
    assert response.status_code == status.HTTP_403_FORBIDDEN

def test_me_returns_capabilities(client, manager_user, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers(manager_user))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["user"]["email"] == manager_user.email
    assert data["capabilities"] == {
        "can_review": True,
        "can_manage_holidays": False,
        "can_manage_users": False,
    }

def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_me_rejects_bad_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
