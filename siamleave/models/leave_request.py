import uuid
from sqlalchemy import Column, String, Date, Boolean, ForeignKey, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from siamleave.database import Base
import enum

class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type_id = Column(String(36), ForeignKey("leave_types.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=True)  # "HH:MM", hour-based requests only
    end_time = Column(String(5), nullable=True)
    reason = Column(Text, nullable=True)
    contact = Column(String, nullable=True)

    status = Column(String, default=LeaveStatus.PENDING.value, nullable=False, index=True)  # Stored as plain string for SQLite
    backdated = Column(Boolean, default=False, nullable=False)

    status_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    status_changed_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", foreign_keys=[user_id], back_populates="leave_requests")
    approver = relationship("User", foreign_keys=[status_by])
    leave_type = relationship("LeaveType")
