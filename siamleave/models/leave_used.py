import uuid
from sqlalchemy import Column, String, Integer, Float, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from siamleave.database import Base


class LeaveUsed(Base):
    """
    Running total of approved leave per user and leave type.
    Derived data: it can always be rebuilt from approved leave requests.
    """
    __tablename__ = "leave_used"
    __table_args__ = (
        UniqueConstraint("user_id", "leave_type_id", name="uq_leave_used_user_type"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type_id = Column(String(36), ForeignKey("leave_types.id"), nullable=False, index=True)
    days = Column(Integer, default=0, nullable=False)
    hours = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="leave_used")
    leave_type = relationship("LeaveType")
