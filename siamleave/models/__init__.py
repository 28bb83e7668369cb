# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    user, position, leave_type, leave_quota, leave_used,
    leave_request, notification
)

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .position import Position
from .leave_type import LeaveType
from .leave_quota import LeaveQuota
from .leave_used import LeaveUsed
from .leave_request import LeaveRequest, LeaveStatus
from .notification import Notification

__all__ = [
    "User",
    "UserRole",
    "Position",
    "LeaveType",
    "LeaveQuota",
    "LeaveUsed",
    "LeaveRequest",
    "LeaveStatus",
    "Notification",
]
