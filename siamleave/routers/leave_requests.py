from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from siamleave.core.config import BusinessSettings, get_business_settings
from siamleave.core.schemas import ApiResponse
from siamleave.database import get_db
from siamleave.models.user import User
from siamleave.routers.auth_deps import get_current_user, get_today, require_admin
from siamleave.schemas.leave import LeaveRequestCreate, LeaveRequestResponse, LeaveStatusUpdate
from siamleave.services import leave_service

router = APIRouter(prefix="/leave-request", tags=["leave-request"])


@router.post("", response_model=ApiResponse[LeaveRequestResponse], status_code=201)
def submit_leave_request(
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    business: BusinessSettings = Depends(get_business_settings),
    today: date = Depends(get_today)
):
    leave = leave_service.submit_leave_request(db, current_user, payload, business, today)
    return ApiResponse.ok(LeaveRequestResponse.model_validate(leave), message="Leave request submitted")


@router.get("/my", response_model=ApiResponse[List[LeaveRequestResponse]])
def my_leave_requests(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    requests = leave_service.list_my_requests(db, current_user.id, status)
    return ApiResponse.ok([LeaveRequestResponse.model_validate(r) for r in requests])


@router.put("/{leave_id}/status", response_model=ApiResponse[LeaveRequestResponse])
def update_leave_status(
    leave_id: str,
    update: LeaveStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
    business: BusinessSettings = Depends(get_business_settings)
):
    leave = leave_service.change_status(db, leave_id, update, current_user, business)
    return ApiResponse.ok(LeaveRequestResponse.model_validate(leave), message=f"Leave request {leave.status}")


@router.delete("/{leave_id}", response_model=ApiResponse[None])
def delete_leave_request(
    leave_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    business: BusinessSettings = Depends(get_business_settings)
):
    leave_service.delete_leave_request(db, leave_id, current_user, business)
    return ApiResponse.ok(None, message="Leave request deleted")
