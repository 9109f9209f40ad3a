import pytest
from datetime import date, timedelta
from fastapi import status
from app.models.leave_request import LeaveRequest, LeaveStatus
from app.models.user import User
from app.services.availability import AvailabilityCalculator


def _submit(client, headers, start, end, leave_type="vacation", **extra):
    return client.post(
        "/api/leave/requests",
        headers=headers,
        json={"start_date": start.isoformat(), "end_date": end.isoformat(), "leave_type": leave_type, **extra},
    )


def test_leave_types(client, employee_user, auth_headers):
    response = client.get("/api/leave/types", headers=auth_headers(employee_user))
    assert response.status_code == status.HTTP_200_OK
    types = {t["value"]: t for t in response.json()}
    assert set(types) == {"vacation", "sick", "personal", "maternity", "paternity"}
    assert types["vacation"]["debits_balance"] is True
    assert types["sick"]["debits_balance"] is False


def test_create_leave_request(client, employee_user, auth_headers):
    """Test creating a leave request."""
    response = _submit(client, auth_headers(employee_user), date(2025, 7, 14), date(2025, 7, 18), reason="Summer")
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "pending"
    assert data["days_count"] == 5
    assert data["user_name"] == "María García"


def test_create_with_inverted_dates(client, employee_user, auth_headers):
    response = _submit(client, auth_headers(employee_user), date(2025, 7, 18), date(2025, 7, 14))
    assert response.status_code == 422
    assert response.json()["errors"][0]["code"] == "VALIDATION_ERROR"


def test_create_with_unknown_type(client, employee_user, auth_headers):
    response = _submit(client, auth_headers(employee_user), date(2025, 7, 14), date(2025, 7, 18), leave_type="sabbatical")
    assert response.status_code == 422


def test_manager_approval_debits_balance(client, db_session, employee_user, manager_user, auth_headers):
    """Approving María's 5 day vacation takes her from 12 to 7 days."""
    req_id = _submit(client, auth_headers(employee_user), date(2025, 7, 14), date(2025, 7, 18)).json()["id"]

    response = client.put(
        f"/api/leave/requests/{req_id}/approve",
        headers=auth_headers(manager_user),
        json={"comments": "Enjoy"},
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "approved"
    assert data["reviewed_by"] == manager_user.id
    assert data["review_comments"] == "Enjoy"

    balance = client.get("/api/leave/balance", headers=auth_headers(employee_user)).json()
    assert balance["vacation_days_balance"] == 7


def test_approved_vacation_shows_in_team_availability(client, db_session, employee_user, manager_user, team, auth_headers):
    """A 5 day vacation filed, approved, debited and reflected day by day in the team calendar."""
    start, end = date(2024, 7, 15), date(2024, 7, 19)
    req_id = _submit(client, auth_headers(employee_user), start, end).json()["id"]
    assert client.put(f"/api/leave/requests/{req_id}/approve", headers=auth_headers(manager_user)).status_code == status.HTTP_200_OK

    db_session.expire_all()
    assert db_session.get(User, employee_user.id).vacation_days_balance == 7

    calculator = AvailabilityCalculator(
        db_session.query(User).filter(User.team_id == team.id).all(),
        db_session.query(LeaveRequest).all(),
        as_of_date=start,
    )
    for offset in range(5):
        day = start + timedelta(days=offset)
        assert calculator.member_status(employee_user.id, day) == {
            "user_id": employee_user.id, "status": "absent", "reason": "vacation", "request_id": req_id,
        }
    for day in (date(2024, 7, 14), date(2024, 7, 20)):
        assert calculator.member_status(employee_user.id, day)["status"] == "available"


def test_approve_without_body(client, employee_user, manager_user, auth_headers):
    req_id = _submit(client, auth_headers(employee_user), date(2025, 7, 14), date(2025, 7, 14)).json()["id"]
    response = client.put(f"/api/leave/requests/{req_id}/approve", headers=auth_headers(manager_user))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["review_comments"] is None


def test_reject_then_approve_conflicts(client, employee_user, manager_user, auth_headers):
    req_id = _submit(client, auth_headers(employee_user), date(2025, 7, 14), date(2025, 7, 18)).json()["id"]

    rejected = client.put(
        f"/api/leave/requests/{req_id}/reject",
        headers=auth_headers(manager_user),
        json={"comments": "Release week"},
    )
    assert rejected.status_code == status.HTTP_200_OK
    assert rejected.json()["status"] == "rejected"

    again = client.put(f"/api/leave/requests/{req_id}/approve", headers=auth_headers(manager_user), json={})
    assert again.status_code == status.HTTP_409_CONFLICT
    error = again.json()["errors"][0]
    assert error["code"] == "INVALID_TRANSITION"
    assert error["details"]["current_status"] == "rejected"


def test_employee_cannot_approve(client, db_session, employee_user, auth_headers):
    req_id = _submit(client, auth_headers(employee_user), date(2025, 7, 14), date(2025, 7, 18)).json()["id"]
    response = client.put(f"/api/leave/requests/{req_id}/approve", headers=auth_headers(employee_user), json={})
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["errors"][0]["code"] == "PERMISSION_DENIED"
    assert db_session.get(LeaveRequest, req_id).status == LeaveStatus.PENDING.value


def test_approve_missing_request(client, manager_user, auth_headers):
    response = client.put("/api/leave/requests/999/approve", headers=auth_headers(manager_user), json={})
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_list_requests_respects_visibility(client, make_user, employee_user, manager_user, hr_user, auth_headers):
    outsider = make_user("lucia.fernandez@acme.com", name="Lucía Fernández")
    _submit(client, auth_headers(employee_user), date(2025, 7, 14), date(2025, 7, 18))
    _submit(client, auth_headers(outsider), date(2025, 7, 14), date(2025, 7, 18))

    mine = client.get("/api/leave/requests", headers=auth_headers(employee_user)).json()
    assert [r["user_id"] for r in mine] == [employee_user.id]

    team_view = client.get("/api/leave/requests", headers=auth_headers(manager_user)).json()
    assert [r["user_id"] for r in team_view] == [employee_user.id]

    everyone = client.get("/api/leave/requests", headers=auth_headers(hr_user)).json()
    assert len(everyone) == 2


def test_list_requests_filters(client, employee_user, auth_headers):
    headers = auth_headers(employee_user)
    _submit(client, headers, date(2025, 7, 14), date(2025, 7, 18))
    _submit(client, headers, date(2025, 9, 1), date(2025, 9, 1), leave_type="personal")

    by_type = client.get("/api/leave/requests", headers=headers, params={"leave_type": "personal"}).json()
    assert [r["leave_type"] for r in by_type] == ["personal"]

    by_range = client.get("/api/leave/requests", headers=headers, params={"start": "2025-07-01", "end": "2025-07-31"}).json()
    assert [r["start_date"] for r in by_range] == ["2025-07-14"]

    by_status = client.get("/api/leave/requests", headers=headers, params={"status": "approved"}).json()
    assert by_status == []


def test_get_request_of_someone_else(client, make_user, employee_user, auth_headers):
    outsider = make_user("lucia.fernandez@acme.com", name="Lucía Fernández")
    req_id = _submit(client, auth_headers(outsider), date(2025, 7, 14), date(2025, 7, 18)).json()["id"]

    assert client.get(f"/api/leave/requests/{req_id}", headers=auth_headers(outsider)).status_code == 200
    assert client.get(f"/api/leave/requests/{req_id}", headers=auth_headers(employee_user)).status_code == 403


def test_balance_shows_pending(client, employee_user, auth_headers):
    headers = auth_headers(employee_user)
    _submit(client, headers, date(2025, 7, 14), date(2025, 7, 16))
    balance = client.get("/api/leave/balance", headers=headers).json()
    assert balance["pending_vacation_days"] == 3
    assert balance["available_vacation_days"] == 9


def test_monthly_report(client, employee_user, manager_user, hr_user, auth_headers):
    req_id = _submit(client, auth_headers(employee_user), date(2025, 6, 30), date(2025, 7, 2)).json()["id"]
    client.put(f"/api/leave/requests/{req_id}/approve", headers=auth_headers(manager_user), json={})

    response = client.get("/api/leave/report/monthly", headers=auth_headers(hr_user), params={"year": 2025, "month": 7})
    assert response.status_code == status.HTTP_200_OK
    report = response.json()
    assert report["days_in_month"] == 31
    rows = {row["user_id"]: row for row in report["rows"]}
    assert rows[employee_user.id]["total_days_off"] == 2
    assert rows[employee_user.id]["days"][:3] == ["V", "V", None]
    assert rows[hr_user.id]["total_days_off"] == 0


def test_monthly_report_rejects_bad_month(client, hr_user, auth_headers):
    response = client.get("/api/leave/report/monthly", headers=auth_headers(hr_user), params={"year": 2025, "month": 13})
    assert response.status_code == 422


def test_requests_need_authentication(client):
    assert client.get("/api/leave/requests").status_code == status.HTTP_401_UNAUTHORIZED
