"""
Seed demo data: users for every role, teams, a few leave requests and
holidays. Safe to run more than once; existing emails, team names and
holidays are skipped.

    python -m scripts.seed_demo
"""
from datetime import date

from app.database import SessionLocal, init_db
from app.models.holiday import Holiday, HolidayType, normalize_holiday_name
from app.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from app.models.team import Team
from app.models.user import User, UserRole
from app.services import auth as auth_service

DEMO_PASSWORD = "Demo1234!"

USERS = [
    # email, name, role, team, vacation, sick
    ("maria.garcia@acme.com", "María García", UserRole.EMPLOYEE, "Development", 12, 3),
    ("carlos.lopez@acme.com", "Carlos López", UserRole.MANAGER, None, 20, 5),
    ("ana.ruiz@acme.com", "Ana Ruiz", UserRole.HR, None, 30, 15),
    ("pedro.martinez@acme.com", "Pedro Martínez", UserRole.EMPLOYEE, "Development", 15, 2),
    ("lucia.fernandez@acme.com", "Lucía Fernández", UserRole.EMPLOYEE, "Marketing", 8, 4),
]

TEAMS = ["Development", "Marketing", "Sales"]

HOLIDAYS = [
    ("New Year's Day", date(2025, 1, 1), HolidayType.NATIONAL),
    ("Epiphany", date(2025, 1, 6), HolidayType.NATIONAL),
    ("Labour Day", date(2025, 5, 1), HolidayType.NATIONAL),
    ("Company Anniversary", date(2025, 9, 15), HolidayType.COMPANY),
    ("Christmas Day", date(2025, 12, 25), HolidayType.NATIONAL),
]

db = SessionLocal()


def get_or_create_user(email, name, role, vacation, sick):
    user = db.query(User).filter(User.email == email).first()
    if user:
        print(f"User {email} already exists. Skipping.")
        return user
    user = User(
        email=email,
        hashed_password=auth_service.get_password_hash(DEMO_PASSWORD),
        name=name,
        role=role,
        vacation_days_balance=vacation,
        sick_days_balance=sick,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    print(f"Created {role.value} -> {email}")
    return user


def get_or_create_team(name, manager):
    team = db.query(Team).filter(Team.name == name).first()
    if team:
        return team
    team = Team(name=name, manager_id=manager.id)
    db.add(team)
    db.commit()
    db.refresh(team)
    print(f"Created team {name}")
    return team


def add_request(user, leave_type, start, end, reason, status, reviewer=None):
    exists = db.query(LeaveRequest).filter(
        LeaveRequest.user_id == user.id, LeaveRequest.start_date == start
    ).first()
    if exists:
        return
    db.add(LeaveRequest(
        user_id=user.id,
        user_name=user.name,
        leave_type=leave_type.value,
        start_date=start,
        end_date=end,
        days_count=(end - start).days + 1,
        reason=reason,
        status=status.value,
        reviewed_by=reviewer.id if reviewer else None,
    ))
    db.commit()


def add_holiday(name, day, holiday_type, creator):
    key = normalize_holiday_name(name)
    if db.query(Holiday).filter(Holiday.name_key == key, Holiday.date == day).first():
        return
    db.add(Holiday(name=name, name_key=key, date=day, holiday_type=holiday_type.value, created_by=creator.id))
    db.commit()


def main():
    init_db()

    users = {}
    for email, name, role, _, vacation, sick in USERS:
        users[email] = get_or_create_user(email, name, role, vacation, sick)

    manager = users["carlos.lopez@acme.com"]
    hr = users["ana.ruiz@acme.com"]
    teams = {name: get_or_create_team(name, manager) for name in TEAMS}

    for email, _, _, team_name, _, _ in USERS:
        if team_name and users[email].team_id is None:
            users[email].team_id = teams[team_name].id
    db.commit()

    add_request(users["maria.garcia@acme.com"], LeaveType.VACATION, date(2025, 7, 14), date(2025, 7, 18),
                "Summer holidays", LeaveStatus.PENDING)
    add_request(manager, LeaveType.SICK, date(2025, 6, 9), date(2025, 6, 11),
                "Flu", LeaveStatus.APPROVED, reviewer=hr)
    add_request(hr, LeaveType.PERSONAL, date(2025, 6, 20), date(2025, 6, 20),
                "Medical appointment", LeaveStatus.APPROVED, reviewer=hr)

    for name, day, holiday_type in HOLIDAYS:
        add_holiday(name, day, holiday_type, hr)

    print(f"Demo data ready. Every demo account uses the password {DEMO_PASSWORD}")


if __name__ == "__main__":
    try:
        main()
    finally:
        db.close()
