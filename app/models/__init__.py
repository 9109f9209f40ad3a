# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, team, leave_request, holiday, notification

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .team import Team
from .leave_request import LeaveRequest, LeaveStatus, LeaveType
from .holiday import Holiday, HolidayType
from .notification import Notification

__all__ = [
    "User",
    "UserRole",
    "Team",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "Holiday",
    "HolidayType",
    "Notification",
]
