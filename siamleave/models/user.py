"""
User Model.
Admins and superadmins share the users table with employees; the role column tells them apart.
"""
import uuid
from sqlalchemy import Column, String, Enum, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from siamleave.database import Base


class UserRole(str, enum.Enum):
    """
    User roles (most to least permissions):
    - SUPERADMIN: Manages reference data and can reset quotas
    - ADMIN: Approves or rejects leave requests, reads usage of any user
    - USER: Self-service access
    """
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    USER = "user"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)

    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
    position_id = Column(String(36), ForeignKey("positions.id", ondelete="SET NULL"), nullable=True, index=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    position = relationship("Position", back_populates="users")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    leave_requests = relationship("LeaveRequest", foreign_keys="[LeaveRequest.user_id]", back_populates="user", cascade="all, delete-orphan")
    leave_used = relationship("LeaveUsed", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"

    @property
    def is_admin(self) -> bool:
        """Check if user can approve requests and read other users' usage."""
        return self.role in [UserRole.ADMIN, UserRole.SUPERADMIN]
