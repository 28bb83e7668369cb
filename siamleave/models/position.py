import uuid
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from siamleave.database import Base


class Position(Base):
    __tablename__ = "positions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name_th = Column(String, nullable=False)
    name_en = Column(String, nullable=False)

    # False means usage under this position is cleared by the annual reset
    new_year_quota = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    users = relationship("User", back_populates="position")
    quotas = relationship("LeaveQuota", back_populates="position", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Position {self.name_en}>"
