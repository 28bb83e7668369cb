from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from siamleave.core.schemas import ApiResponse
from siamleave.database import get_db
from siamleave.models.user import User
from siamleave.routers.auth_deps import get_today, require_superadmin
from siamleave.schemas.leave import QuotaResetRequest, ResetByUsersRequest, ResetResultResponse
from siamleave.services.quota_reset import reset_quota

router = APIRouter(prefix="/leave-quota-reset", tags=["leave-quota-reset"])


@router.post("/reset", response_model=ApiResponse[ResetResultResponse])
def reset_by_position(
    payload: QuotaResetRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin()),
    today: date = Depends(get_today)
):
    """Reset usage for one position, or for every position without new_year_quota."""
    result = reset_quota(
        db,
        position_id=payload.position_id,
        force=payload.force,
        strategy=payload.strategy,
        today=today
    )
    return ApiResponse.ok(result.to_dict(), message="Leave quota reset completed")


@router.post("/reset-by-users", response_model=ApiResponse[ResetResultResponse])
def reset_by_users(
    payload: ResetByUsersRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin()),
    today: date = Depends(get_today)
):
    # Manual resets of named users are not tied to January 1st
    result = reset_quota(
        db,
        user_ids=payload.user_ids,
        force=True,
        strategy=payload.strategy,
        today=today
    )
    return ApiResponse.ok(result.to_dict(), message="Leave quota reset completed")
