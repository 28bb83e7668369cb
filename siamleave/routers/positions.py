from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from siamleave.core.schemas import ApiResponse
from siamleave.database import get_db
from siamleave.models.user import User
from siamleave.routers.auth_deps import get_current_user, require_superadmin
from siamleave.schemas.leave import PositionCreate, PositionResponse
from siamleave.services import leave_service

router = APIRouter(prefix="/positions", tags=["positions"])


@router.get("", response_model=ApiResponse[List[PositionResponse]])
def list_positions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    positions = leave_service.list_positions(db)
    return ApiResponse.ok([PositionResponse.model_validate(p) for p in positions])


@router.post("", response_model=ApiResponse[PositionResponse], status_code=201)
def create_position(
    payload: PositionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin())
):
    position = leave_service.create_position(
        db, payload.name_th, payload.name_en, payload.new_year_quota, payload.quotas
    )
    return ApiResponse.ok(PositionResponse.model_validate(position), message="Position created")


@router.delete("/{position_id}", response_model=ApiResponse[None])
def delete_position(
    position_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin())
):
    leave_service.delete_position(db, position_id)
    return ApiResponse.ok(None, message="Position deleted")
