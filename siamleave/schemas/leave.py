from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

# --- Leave requests ---

class LeaveRequestCreate(BaseModel):
    leave_type_id: str
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration_type: Literal["day", "hour"] = "day"
    reason: Optional[str] = None
    contact: Optional[str] = None
    allow_backdated: bool = True

class LeaveRequestResponse(BaseModel):
    id: str
    user_id: str
    leave_type_id: str
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    contact: Optional[str] = None
    status: str
    backdated: bool
    status_by: Optional[str] = None
    status_changed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class LeaveStatusUpdate(BaseModel):
    status: Literal["approved", "rejected"]
    rejected_reason: Optional[str] = None

# --- Reference data ---

class LeaveTypeCreate(BaseModel):
    name_th: str
    name_en: str
    require_attachment: bool = False

class LeaveTypeUpdate(BaseModel):
    name_th: Optional[str] = None
    name_en: Optional[str] = None
    require_attachment: Optional[bool] = None

class LeaveTypeResponse(BaseModel):
    id: str
    name_th: str
    name_en: str
    require_attachment: bool
    is_active: bool
    deleted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class PositionCreate(BaseModel):
    name_th: str
    name_en: str
    new_year_quota: bool = False
    # leave_type_id -> quota in days, created together with the position
    quotas: Dict[str, int] = {}

class PositionResponse(BaseModel):
    id: str
    name_th: str
    name_en: str
    new_year_quota: bool

    model_config = ConfigDict(from_attributes=True)

# --- Quotas ---

class LeaveQuotaCreate(BaseModel):
    position_id: str
    leave_type_id: str
    quota: int = Field(ge=0)

class LeaveQuotaUpdate(BaseModel):
    quota: int = Field(ge=0)

class LeaveQuotaResponse(BaseModel):
    id: str
    position_id: str
    leave_type_id: str
    quota: int

    model_config = ConfigDict(from_attributes=True)

class RemainingBalance(BaseModel):
    days: int
    hours: float

class QuotaStatusResponse(BaseModel):
    leave_type_id: str
    leave_type_name: Optional[str] = None
    leave_type_name_th: Optional[str] = None
    leave_type_name_en: Optional[str] = None
    quota_days: int
    used_days: int
    used_hours: float
    total_used_days: float
    remaining_days: float
    remaining: RemainingBalance

# --- Usage ---

class LeaveUsageResponse(BaseModel):
    leave_type_id: str
    leave_type_name: str
    leave_type_name_th: str
    leave_type_name_en: str
    is_active: bool
    days: int
    hours: float
    total_days: float

class LeaveUsedResponse(BaseModel):
    id: Optional[str] = None
    user_id: str
    leave_type_id: str
    leave_type_name: str
    leave_type_name_th: str
    leave_type_name_en: str
    days: int
    hours: float
    total_days: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class LeaveUsageSummary(BaseModel):
    leave_type_id: str
    leave_type_name: str
    total_days: int
    total_hours: float
    user_count: int

# --- Reset ---

class QuotaResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    position_id: Optional[str] = Field(default=None, alias="positionId")
    force: bool = False
    strategy: str = "zero"

class ResetByUsersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: List[str] = Field(alias="userIds")
    strategy: str = "zero"

class ResetResultResponse(BaseModel):
    positions_affected: int
    users_affected: int
    rows_affected: int
    strategy: str

# Resolve forward references for Pydantic V2
LeaveRequestResponse.model_rebuild()
QuotaStatusResponse.model_rebuild()
