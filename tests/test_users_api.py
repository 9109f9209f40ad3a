import pytest
from fastapi import status
from app.models.team import Team
from app.models.user import User


def test_hr_creates_user_with_default_balances(client, hr_user, team, auth_headers):
    response = client.post("/api/users/", headers=auth_headers(hr_user), json={
        "email": "pedro.martinez@acme.com",
        "name": "Pedro Martínez",
        "password": "Password123!",
        "team_id": team.id,
    })
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["role"] == "employee"
    assert data["vacation_days_balance"] == 22
    assert data["sick_days_balance"] == 3
    assert "hashed_password" not in data


def test_duplicate_email_is_rejected(client, hr_user, employee_user, auth_headers):
    response = client.post("/api/users/", headers=auth_headers(hr_user), json={
        "email": employee_user.email.upper(),
        "name": "Copy",
        "password": "Password123!",
    })
    assert response.status_code == 422


def test_short_password_is_rejected(client, hr_user, auth_headers):
    response = client.post("/api/users/", headers=auth_headers(hr_user), json={
        "email": "short@acme.com", "name": "Short", "password": "123"
    })
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "password"


def test_manager_cannot_create_users(client, manager_user, auth_headers):
    response = client.post("/api/users/", headers=auth_headers(manager_user), json={
        "email": "new@acme.com", "name": "New", "password": "Password123!"
    })
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_user_list_is_scoped(client, employee_user, manager_user, hr_user, auth_headers):
    assert [u["id"] for u in client.get("/api/users/", headers=auth_headers(employee_user)).json()] == [employee_user.id]
    assert {u["id"] for u in client.get("/api/users/", headers=auth_headers(manager_user)).json()} == {
        employee_user.id, manager_user.id
    }
    assert len(client.get("/api/users/", headers=auth_headers(hr_user)).json()) == 3


def test_patch_user(client, hr_user, employee_user, auth_headers):
    response = client.patch(
        f"/api/users/{employee_user.id}",
        headers=auth_headers(hr_user),
        json={"vacation_days_balance": 25, "team_id": None},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["vacation_days_balance"] == 25
    assert response.json()["team_id"] is None


def test_user_balance(client, employee_user, manager_user, make_user, auth_headers):
    response = client.get(f"/api/users/{employee_user.id}/balance", headers=auth_headers(manager_user))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["vacation_days_balance"] == 12

    outsider = make_user("lucia.fernandez@acme.com", name="Lucía Fernández")
    denied = client.get(f"/api/users/{employee_user.id}/balance", headers=auth_headers(outsider))
    assert denied.status_code == status.HTTP_403_FORBIDDEN


def test_delete_user(client, db_session, hr_user, employee_user, auth_headers):
    user_id = employee_user.id
    response = client.delete(f"/api/users/{user_id}", headers=auth_headers(hr_user))
    assert response.status_code == status.HTTP_204_NO_CONTENT
    db_session.expire_all()
    assert db_session.get(User, user_id) is None


def test_cannot_delete_self(client, hr_user, auth_headers):
    response = client.delete(f"/api/users/{hr_user.id}", headers=auth_headers(hr_user))
    assert response.status_code == 422


def test_demoting_manager_releases_their_teams(client, db_session, hr_user, manager_user, team, auth_headers):
    response = client.patch(
        f"/api/users/{manager_user.id}",
        headers=auth_headers(hr_user),
        json={"role": "employee"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["role"] == "employee"

    db_session.expire_all()
    assert db_session.get(Team, team.id).manager_id is None

    denied = client.get(f"/api/teams/{team.id}/members", headers=auth_headers(manager_user))
    assert denied.status_code == status.HTTP_403_FORBIDDEN


def test_role_change_between_manager_roles_keeps_team(client, db_session, hr_user, manager_user, team, auth_headers):
    client.patch(f"/api/users/{manager_user.id}", headers=auth_headers(hr_user), json={"role": "hr"})
    db_session.expire_all()
    assert db_session.get(Team, team.id).manager_id == manager_user.id
