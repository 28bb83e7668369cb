import uuid
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func
from siamleave.database import Base
from siamleave.core.i18n import deleted_label


class LeaveType(Base):
    """
    Reference data for leave categories.
    Rows are soft-deleted (is_active/deleted_at) so historical requests keep a label.
    """
    __tablename__ = "leave_types"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name_th = Column(String, nullable=False)
    name_en = Column(String, nullable=False, index=True)
    require_attachment = Column(Boolean, default=False, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<LeaveType {self.name_en}{'' if self.is_active else ' (deleted)'}>"

    def display_name(self, lang: str = "en") -> str:
        name = self.name_th if lang == "th" else self.name_en
        return deleted_label(name, self.is_active, lang)
