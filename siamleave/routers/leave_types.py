from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from siamleave.core.schemas import ApiResponse
from siamleave.database import get_db
from siamleave.models.user import User
from siamleave.routers.auth_deps import get_current_user, require_superadmin
from siamleave.schemas.leave import LeaveTypeCreate, LeaveTypeResponse, LeaveTypeUpdate
from siamleave.services import leave_service

router = APIRouter(prefix="/leave-types", tags=["leave-types"])


@router.get("", response_model=ApiResponse[List[LeaveTypeResponse]])
def list_leave_types(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    leave_types = leave_service.list_leave_types(db, include_inactive)
    return ApiResponse.ok([LeaveTypeResponse.model_validate(t) for t in leave_types])


@router.post("", response_model=ApiResponse[LeaveTypeResponse], status_code=201)
def create_leave_type(
    payload: LeaveTypeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin())
):
    leave_type = leave_service.create_leave_type(db, payload.name_th, payload.name_en, payload.require_attachment)
    return ApiResponse.ok(LeaveTypeResponse.model_validate(leave_type), message="Leave type created")


@router.put("/{leave_type_id}", response_model=ApiResponse[LeaveTypeResponse])
def update_leave_type(
    leave_type_id: str,
    payload: LeaveTypeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin())
):
    leave_type = leave_service.update_leave_type(db, leave_type_id, payload.model_dump(exclude_unset=True))
    return ApiResponse.ok(LeaveTypeResponse.model_validate(leave_type), message="Leave type updated")


@router.delete("/{leave_type_id}", response_model=ApiResponse[LeaveTypeResponse])
def delete_leave_type(
    leave_type_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin())
):
    leave_type = leave_service.delete_leave_type(db, leave_type_id)
    return ApiResponse.ok(LeaveTypeResponse.model_validate(leave_type), message="Leave type deleted")
