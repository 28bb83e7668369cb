from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from siamleave.core.config import BusinessSettings, get_business_settings
from siamleave.core.schemas import ApiResponse
from siamleave.database import get_db
from siamleave.models.user import User
from siamleave.routers.auth_deps import ensure_self_or_admin, get_current_user, get_language, get_today, require_admin
from siamleave.schemas.leave import LeaveUsageResponse, LeaveUsageSummary, LeaveUsedResponse
from siamleave.services import quota as quota_service
from siamleave.services import usage as usage_service

router = APIRouter(prefix="/leave-used", tags=["leave-used"])


@router.get("/summary", response_model=ApiResponse[List[LeaveUsageSummary]])
def leave_usage_summary(
    year: Optional[int] = Query(default=None, ge=1900, le=3000),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
    lang: str = Depends(get_language),
    business: BusinessSettings = Depends(get_business_settings),
    current_user: User = Depends(require_admin())
):
    summary = usage_service.usage_summary(db, year, month, lang, business)
    return ApiResponse.ok(summary, metadata={"year": year, "month": month})


@router.get("/user/{user_id}", response_model=ApiResponse[List[LeaveUsageResponse]])
def leave_usage_for_user(
    user_id: str,
    year: Optional[int] = Query(default=None, ge=1900, le=3000),
    db: Session = Depends(get_db),
    lang: str = Depends(get_language),
    current_user: User = Depends(get_current_user),
    business: BusinessSettings = Depends(get_business_settings),
    today: date = Depends(get_today)
):
    ensure_self_or_admin(current_user, user_id)
    quota_service.get_user(db, user_id)
    year = year or today.year
    rows = usage_service.usage_breakdown(db, user_id, year, lang, business)
    return ApiResponse.ok(rows, metadata={"year": year})


@router.get("/user/{user_id}/type/{leave_type_id}", response_model=ApiResponse[LeaveUsedResponse])
def cached_usage_for_type(
    user_id: str,
    leave_type_id: str,
    db: Session = Depends(get_db),
    lang: str = Depends(get_language),
    current_user: User = Depends(get_current_user),
    business: BusinessSettings = Depends(get_business_settings)
):
    ensure_self_or_admin(current_user, user_id)
    quota_service.get_user(db, user_id)
    leave_type = quota_service.get_leave_type(db, leave_type_id)
    row = usage_service.cached_usage(db, user_id, leave_type_id)
    return ApiResponse.ok(usage_service.serialize_cache_row(
        row, leave_type, lang, business, user_id=user_id, leave_type_id=leave_type_id
    ))


@router.post("/user/{user_id}/rebuild", response_model=ApiResponse[List[LeaveUsedResponse]])
def rebuild_usage_cache(
    user_id: str,
    year: Optional[int] = Query(default=None, ge=1900, le=3000),
    db: Session = Depends(get_db),
    lang: str = Depends(get_language),
    current_user: User = Depends(require_admin()),
    business: BusinessSettings = Depends(get_business_settings),
    today: date = Depends(get_today)
):
    quota_service.get_user(db, user_id)
    year = year or today.year
    rows = usage_service.rebuild_usage_cache(db, user_id, year, business)
    return ApiResponse.ok(
        [usage_service.serialize_cache_row(row, row.leave_type, lang, business) for row in rows],
        message="Leave usage cache rebuilt",
        metadata={"year": year}
    )
