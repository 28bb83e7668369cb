from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from siamleave.core.config import BusinessSettings, get_business_settings
from siamleave.core.schemas import ApiResponse
from siamleave.database import get_db
from siamleave.models.user import User
from siamleave.routers.auth_deps import get_current_user, get_language, get_today, require_superadmin
from siamleave.schemas.leave import (
    LeaveQuotaCreate,
    LeaveQuotaResponse,
    LeaveQuotaUpdate,
    QuotaResetRequest,
    QuotaStatusResponse,
    ResetResultResponse,
)
from siamleave.services import quota as quota_service
from siamleave.services.quota_reset import reset_quota

router = APIRouter(prefix="/leave-quota", tags=["leave-quota"])


@router.get("/me", response_model=ApiResponse[List[QuotaStatusResponse]])
def my_quota(
    year: Optional[int] = Query(default=None, ge=1900, le=3000),
    db: Session = Depends(get_db),
    lang: str = Depends(get_language),
    current_user: User = Depends(get_current_user),
    business: BusinessSettings = Depends(get_business_settings),
    today: date = Depends(get_today)
):
    """Quota, usage and remaining balance for every leave type of the caller's position."""
    year = year or today.year
    overview = quota_service.quota_overview(db, current_user.id, year, lang, business)
    return ApiResponse.ok(overview, metadata={"year": year})


@router.get("", response_model=ApiResponse[List[LeaveQuotaResponse]])
def list_quotas(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    quotas = quota_service.list_quotas(db)
    return ApiResponse.ok([LeaveQuotaResponse.model_validate(q) for q in quotas])


@router.get("/position/{position_id}", response_model=ApiResponse[List[LeaveQuotaResponse]])
def quotas_for_position(
    position_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    quota_service.get_position(db, position_id)
    quotas = quota_service.list_quotas(db, position_id)
    return ApiResponse.ok([LeaveQuotaResponse.model_validate(q) for q in quotas])


@router.post("", response_model=ApiResponse[LeaveQuotaResponse], status_code=201)
def create_quota(
    payload: LeaveQuotaCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin())
):
    row = quota_service.create_quota(db, payload.position_id, payload.leave_type_id, payload.quota)
    return ApiResponse.ok(LeaveQuotaResponse.model_validate(row), message="Leave quota created")


@router.put("/{quota_id}", response_model=ApiResponse[LeaveQuotaResponse])
def update_quota(
    quota_id: str,
    payload: LeaveQuotaUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin())
):
    row = quota_service.update_quota(db, quota_id, payload.quota)
    return ApiResponse.ok(LeaveQuotaResponse.model_validate(row), message="Leave quota updated")


@router.delete("/{quota_id}", response_model=ApiResponse[None])
def delete_quota(
    quota_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin())
):
    quota_service.delete_quota(db, quota_id)
    return ApiResponse.ok(None, message="Leave quota deleted")


@router.post("/reset", response_model=ApiResponse[ResetResultResponse])
def reset_leave_quota(
    payload: QuotaResetRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin()),
    today: date = Depends(get_today)
):
    result = reset_quota(
        db,
        position_id=payload.position_id,
        force=payload.force,
        strategy=payload.strategy,
        today=today
    )
    return ApiResponse.ok(result.to_dict(), message="Leave quota reset completed")
