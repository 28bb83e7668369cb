import uuid
from sqlalchemy import Column, String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from siamleave.database import Base


class LeaveQuota(Base):
    __tablename__ = "leave_quotas"
    __table_args__ = (
        UniqueConstraint("position_id", "leave_type_id", name="uq_leave_quota_position_type"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    position_id = Column(String(36), ForeignKey("positions.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type_id = Column(String(36), ForeignKey("leave_types.id"), nullable=False, index=True)
    quota = Column(Integer, default=0, nullable=False)  # days per year

    position = relationship("Position", back_populates="quotas")
    leave_type = relationship("LeaveType")
