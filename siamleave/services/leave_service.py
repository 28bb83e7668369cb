"""
Leave Request Workflow & Reference Data

Submission runs every validation before the quota check, so a request that
fails here never touches usage. Approval feeds the LeaveUsed cache; deleting
an approved request releases it again.
"""
import logging
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from siamleave.core.config import BusinessSettings, settings
from siamleave.core.exceptions import BackdatedLeaveError, NotFoundError, ValidationError
from siamleave.models.leave_request import LeaveRequest, LeaveStatus
from siamleave.models.leave_type import LeaveType
from siamleave.models.position import Position
from siamleave.models.user import User
from siamleave.schemas.leave import LeaveRequestCreate, LeaveStatusUpdate
from siamleave.services.duration import duration, is_valid_time_format, is_within_working_hours
from siamleave.services.notification import NotificationService
from siamleave.services.quota import check_request_quota, get_leave_type, get_position, set_position_quotas
from siamleave.services.usage import record_approved_leave, release_leave

logger = logging.getLogger(__name__)


def _business(business: Optional[BusinessSettings]) -> BusinessSettings:
    return business or settings.business


def _validate_times(payload: LeaveRequestCreate, business: BusinessSettings) -> None:
    for value in (payload.start_time, payload.end_time):
        if not is_valid_time_format(value):
            raise ValidationError(
                "Invalid time format (expected HH:MM)",
                "รูปแบบเวลาไม่ถูกต้อง (ต้องเป็น HH:MM)",
                details={"value": value}
            )
        if not is_within_working_hours(value, business.working_start_hour, business.working_end_hour):
            raise ValidationError(
                f"Time must be between {business.working_start_hour:02d}:00 and {business.working_end_hour:02d}:00",
                f"เวลาต้องอยู่ระหว่าง {business.working_start_hour:02d}:00 ถึง {business.working_end_hour:02d}:00",
                details={"value": value}
            )
    if payload.start_time == payload.end_time:
        raise ValidationError("Start time and end time must be different", "เวลาเริ่มและเวลาสิ้นสุดต้องไม่เท่ากัน")


def submit_leave_request(
    db: Session,
    user: User,
    payload: LeaveRequestCreate,
    business: Optional[BusinessSettings] = None,
    today: Optional[date] = None
) -> LeaveRequest:
    """
    Validate and store a new leave request as pending.

    Hour-based requests (duration_type="hour") must carry both times inside
    the working window; day-based requests drop any times they were sent.

    Raises:
        ValidationError: missing contact, bad dates or bad times
        NotFoundError: unknown leave type
        BackdatedLeaveError: start date in the past while allow_backdated is false
        QuotaNotFoundError / QuotaExceededError: from the quota check
    """
    business = _business(business)
    today = today or date.today()

    if not payload.contact or not payload.contact.strip():
        raise ValidationError("Contact is required", "กรุณาระบุช่องทางการติดต่อ")

    if payload.start_date > payload.end_date:
        raise ValidationError("Start date must not be after end date", "วันที่เริ่มต้องไม่อยู่หลังวันที่สิ้นสุด")

    if payload.start_date < business.min_date or payload.end_date > business.max_date:
        raise ValidationError(
            "Leave dates are out of the allowed range",
            "วันที่ลาอยู่นอกช่วงที่อนุญาต",
            details={"min_date": business.min_date.isoformat(), "max_date": business.max_date.isoformat()}
        )

    start_time = end_time = None
    if payload.duration_type == "hour":
        if payload.start_date != payload.end_date:
            raise ValidationError("Hourly leave must start and end on the same day", "การลารายชั่วโมงต้องเป็นวันเดียวกัน")
        _validate_times(payload, business)
        start_time, end_time = payload.start_time, payload.end_time

    leave_type = get_leave_type(db, payload.leave_type_id)
    if not leave_type.is_active:
        raise ValidationError("This leave type has been deleted", "ประเภทการลานี้ถูกลบแล้ว")

    backdated = payload.start_date < today
    if backdated and not payload.allow_backdated:
        raise BackdatedLeaveError()

    leave = LeaveRequest(
        user_id=user.id,
        leave_type_id=leave_type.id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        start_time=start_time,
        end_time=end_time,
        reason=payload.reason,
        contact=payload.contact.strip(),
        status=LeaveStatus.PENDING.value,
        backdated=backdated,
    )

    check_request_quota(db, user, leave_type, duration(leave), payload.start_date.year, business)

    db.add(leave)
    db.commit()
    db.refresh(leave)
    logger.info(f"Leave request {leave.id} submitted by user {user.id} ({leave_type.name_en})")
    return leave


def get_leave_request(db: Session, leave_id: str) -> LeaveRequest:
    leave = db.query(LeaveRequest).filter(LeaveRequest.id == leave_id).first()
    if not leave:
        raise NotFoundError("Leave request", leave_id, message_th="ไม่พบคำขอลา")
    return leave


def list_my_requests(db: Session, user_id: str, status: Optional[str] = None) -> List[LeaveRequest]:
    query = db.query(LeaveRequest).filter(LeaveRequest.user_id == user_id)
    if status:
        query = query.filter(LeaveRequest.status == status)
    return query.order_by(LeaveRequest.start_date.desc()).all()


def change_status(
    db: Session,
    leave_id: str,
    update: LeaveStatusUpdate,
    approver: User,
    business: Optional[BusinessSettings] = None
) -> LeaveRequest:
    """Approve or reject a request and notify its owner."""
    leave = get_leave_request(db, leave_id)
    previous = leave.status
    now = datetime.now(timezone.utc)

    leave.status = update.status
    leave.status_by = approver.id
    leave.status_changed_at = now
    if update.status == LeaveStatus.APPROVED.value:
        leave.approved_at = now
        leave.rejected_reason = None
        if previous != LeaveStatus.APPROVED.value:
            record_approved_leave(db, leave, business)
    else:
        leave.rejected_reason = update.rejected_reason
        if previous == LeaveStatus.APPROVED.value:
            release_leave(db, leave, business)

    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to change status of leave request {leave_id}", exc_info=True)
        raise
    db.refresh(leave)
    logger.info(f"Leave request {leave.id}: {previous} -> {leave.status} by {approver.id}")

    # Send Notification
    try:
        NotificationService.notify_leave_status(
            db, leave, leave.leave_type, approver.full_name or approver.email
        )
    except Exception as e:
        # Don't fail the request if notification fails
        db.rollback()
        logger.warning(f"Notification failed: {e}", exc_info=True)

    return leave


def delete_leave_request(
    db: Session,
    leave_id: str,
    current_user: User,
    business: Optional[BusinessSettings] = None
) -> None:
    leave = get_leave_request(db, leave_id)
    if leave.user_id != current_user.id and not current_user.is_admin:
        raise NotFoundError("Leave request", leave_id, message_th="ไม่พบคำขอลา")

    if leave.status == LeaveStatus.APPROVED.value:
        release_leave(db, leave, business)
    db.delete(leave)
    db.commit()
    logger.info(f"Leave request {leave_id} deleted by user {current_user.id}")


# ---------------------------------------------------------------------------
# Leave types
# ---------------------------------------------------------------------------

def list_leave_types(db: Session, include_inactive: bool = False) -> List[LeaveType]:
    query = db.query(LeaveType)
    if not include_inactive:
        query = query.filter(LeaveType.is_active == True)  # noqa: E712
    return query.order_by(LeaveType.name_en).all()


def create_leave_type(db: Session, name_th: str, name_en: str, require_attachment: bool = False) -> LeaveType:
    leave_type = LeaveType(name_th=name_th, name_en=name_en, require_attachment=require_attachment)
    db.add(leave_type)
    db.commit()
    db.refresh(leave_type)
    return leave_type


def update_leave_type(db: Session, leave_type_id: str, changes: Dict) -> LeaveType:
    leave_type = get_leave_type(db, leave_type_id)
    for field, value in changes.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(
                f"'{field}' must not be empty",
                f"ต้องระบุค่า '{field}'",
                details={"field": field}
            )
    for field, value in changes.items():
        setattr(leave_type, field, value)
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to update leave type {leave_type_id}", exc_info=True)
        raise
    db.refresh(leave_type)
    return leave_type


def delete_leave_type(db: Session, leave_type_id: str) -> LeaveType:
    """Soft delete: usage already recorded under the type stays visible."""
    leave_type = get_leave_type(db, leave_type_id)
    if leave_type.is_active:
        leave_type.is_active = False
        leave_type.deleted_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(leave_type)
    return leave_type


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

def list_positions(db: Session) -> List[Position]:
    return db.query(Position).order_by(Position.name_en).all()


def create_position(
    db: Session,
    name_th: str,
    name_en: str,
    new_year_quota: bool = False,
    quotas: Optional[Dict[str, int]] = None
) -> Position:
    """Create a position and its quota rows in one transaction."""
    position = Position(name_th=name_th, name_en=name_en, new_year_quota=new_year_quota)
    try:
        db.add(position)
        if quotas:
            set_position_quotas(db, position, quotas)
        db.commit()
    except Exception:
        db.rollback()
        logger.warning(f"Position '{name_en}' was not created", exc_info=True)
        raise
    db.refresh(position)
    return position


def delete_position(db: Session, position_id: str) -> None:
    position = get_position(db, position_id)
    db.delete(position)
    db.commit()
