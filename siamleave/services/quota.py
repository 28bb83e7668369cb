"""
Quota Service Layer

Resolves the yearly quota a user's position grants for each leave type and
combines it with derived usage into a remaining balance. Also guards new
leave submissions against that balance and maintains the quota table.
"""
import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from siamleave.core.config import BusinessSettings, settings
from siamleave.core.exceptions import (
    NotFoundError,
    QuotaExceededError,
    QuotaNotFoundError,
    ValidationError,
)
from siamleave.models.leave_quota import LeaveQuota
from siamleave.models.leave_type import LeaveType
from siamleave.models.position import Position
from siamleave.models.user import User
from siamleave.services.duration import LeaveDuration, hours_to_duration
from siamleave.services.usage import LeaveUsage, approved_requests, usage_for_user, usage_from_requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaStatus:
    leave_type_id: str
    quota_days: int
    used_days: int
    used_hours: float
    total_used_days: float
    remaining_days: float
    remaining: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _business(business: Optional[BusinessSettings]) -> BusinessSettings:
    return business or settings.business


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id, message_th="ไม่พบผู้ใช้")
    return user


def get_leave_type(db: Session, leave_type_id: str) -> LeaveType:
    leave_type = db.query(LeaveType).filter(LeaveType.id == leave_type_id).first()
    if not leave_type:
        raise NotFoundError("Leave type", leave_type_id, message_th="ไม่พบประเภทการลา")
    return leave_type


def get_position(db: Session, position_id: str) -> Position:
    position = db.query(Position).filter(Position.id == position_id).first()
    if not position:
        raise NotFoundError("Position", position_id, message_th="ไม่พบตำแหน่ง")
    return position


def find_quota(db: Session, position_id: Optional[str], leave_type_id: str) -> Optional[LeaveQuota]:
    if not position_id:
        return None
    return db.query(LeaveQuota).filter(
        LeaveQuota.position_id == position_id,
        LeaveQuota.leave_type_id == leave_type_id
    ).first()


def is_emergency(leave_type: LeaveType, business: Optional[BusinessSettings] = None) -> bool:
    return (leave_type.name_en or "").strip().lower() == _business(business).emergency_leave_type.lower()


def build_status(leave_type_id: str, quota_days: int, usage: LeaveUsage, working_hours_per_day: int) -> QuotaStatus:
    remaining_hours = max(0.0, quota_days * working_hours_per_day - usage.total_hours)
    remaining = hours_to_duration(remaining_hours, working_hours_per_day)
    return QuotaStatus(
        leave_type_id=leave_type_id,
        quota_days=quota_days,
        used_days=usage.used_days,
        used_hours=usage.used_hours,
        total_used_days=usage.total_days(working_hours_per_day),
        remaining_days=round(remaining_hours / working_hours_per_day, 2),
        remaining={"days": remaining.days, "hours": remaining.hours},
    )


def quota_status(
    db: Session,
    user_id: str,
    leave_type_id: str,
    year: int,
    business: Optional[BusinessSettings] = None
) -> QuotaStatus:
    """Quota, usage and remaining balance of one user for one leave type."""
    working_hours = _business(business).working_hours_per_day
    user = get_user(db, user_id)
    leave_type = get_leave_type(db, leave_type_id)

    quota_row = find_quota(db, user.position_id, leave_type.id)
    usage = usage_for_user(db, user.id, year, leave_type.id, business)
    return build_status(leave_type.id, quota_row.quota if quota_row else 0, usage, working_hours)


def quota_overview(
    db: Session,
    user_id: str,
    year: int,
    lang: str = "en",
    business: Optional[BusinessSettings] = None
) -> List[Dict[str, Any]]:
    """
    Quota status for every active leave type the user's position has a quota for.
    Usage is computed in one pass over the user's approved requests.
    """
    working_hours = _business(business).working_hours_per_day
    user = get_user(db, user_id)
    if not user.position_id:
        raise NotFoundError("Position", None, message_th="ไม่พบตำแหน่งของผู้ใช้")

    quotas = (
        db.query(LeaveQuota)
        .join(LeaveType, LeaveQuota.leave_type_id == LeaveType.id)
        .filter(LeaveQuota.position_id == user.position_id, LeaveType.is_active == True)  # noqa: E712
        .all()
    )

    grouped = defaultdict(list)
    for request in approved_requests(db, user.id, year):
        grouped[request.leave_type_id].append(request)

    overview = []
    for quota_row in quotas:
        usage = usage_from_requests(grouped.get(quota_row.leave_type_id, []), working_hours)
        status = build_status(quota_row.leave_type_id, quota_row.quota, usage, working_hours).to_dict()
        status.update({
            "leave_type_name": quota_row.leave_type.display_name(lang),
            "leave_type_name_th": quota_row.leave_type.name_th,
            "leave_type_name_en": quota_row.leave_type.name_en,
        })
        overview.append(status)
    overview.sort(key=lambda s: s["leave_type_name_en"])
    return overview


def check_request_quota(
    db: Session,
    user: User,
    leave_type: LeaveType,
    requested: LeaveDuration,
    year: int,
    business: Optional[BusinessSettings] = None
) -> Optional[QuotaStatus]:
    """
    Reject a new request that would push the user's usage past the quota.

    Emergency leave skips the check entirely. The check and the later insert
    are not serialized, so concurrent submissions can both pass.

    Raises:
        QuotaNotFoundError: no quota row for (position, leave type)
        QuotaExceededError: used + requested hours exceed quota hours
    """
    business = _business(business)
    working_hours = business.working_hours_per_day
    if is_emergency(leave_type, business):
        logger.info(f"Skipping quota check for emergency leave of user {user.id}")
        return None

    quota_row = find_quota(db, user.position_id, leave_type.id)
    if not quota_row:
        raise QuotaNotFoundError(leave_type.id)

    usage = usage_for_user(db, user.id, year, leave_type.id, business)
    request_hours = requested.to_hours(working_hours)
    total_quota_hours = quota_row.quota * working_hours
    if usage.total_hours + request_hours > total_quota_hours:
        logger.info(
            f"Quota exceeded for user {user.id}, leave type {leave_type.id}: "
            f"{usage.total_hours}h used + {request_hours}h requested > {total_quota_hours}h"
        )
        raise QuotaExceededError(details={
            "quota_hours": total_quota_hours,
            "used_hours": usage.total_hours,
            "requested_hours": request_hours,
        })
    return build_status(leave_type.id, quota_row.quota, usage, working_hours)


# ---------------------------------------------------------------------------
# Quota table maintenance
# ---------------------------------------------------------------------------

def list_quotas(db: Session, position_id: Optional[str] = None) -> List[LeaveQuota]:
    query = db.query(LeaveQuota)
    if position_id:
        query = query.filter(LeaveQuota.position_id == position_id)
    return query.all()


def set_position_quotas(db: Session, position: Position, quotas: Dict[str, int]) -> List[LeaveQuota]:
    """
    Upsert quota rows for a position without committing, so callers can keep
    it inside a wider transaction.
    """
    rows = []
    for leave_type_id, days in quotas.items():
        if days is None or days < 0:
            raise ValidationError("Quota must be a non-negative number of days", "โควต้าต้องเป็นจำนวนวันที่ไม่ติดลบ")
        get_leave_type(db, leave_type_id)
        row = find_quota(db, position.id, leave_type_id) if position.id else None
        if row is None:
            row = LeaveQuota(leave_type_id=leave_type_id, quota=days)
            position.quotas.append(row)
        else:
            row.quota = days
        rows.append(row)
    return rows


def create_quota(db: Session, position_id: str, leave_type_id: str, quota: int) -> LeaveQuota:
    get_position(db, position_id)
    get_leave_type(db, leave_type_id)
    if find_quota(db, position_id, leave_type_id):
        raise ValidationError(
            "A quota already exists for this position and leave type",
            "มีโควต้าสำหรับตำแหน่งและประเภทการลานี้อยู่แล้ว"
        )
    row = LeaveQuota(position_id=position_id, leave_type_id=leave_type_id, quota=quota)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_quota(db: Session, quota_id: str, quota: int) -> LeaveQuota:
    row = db.query(LeaveQuota).filter(LeaveQuota.id == quota_id).first()
    if not row:
        raise NotFoundError("Leave quota", quota_id, message_th="ไม่พบโควต้าการลา")
    row.quota = quota
    db.commit()
    db.refresh(row)
    return row


def delete_quota(db: Session, quota_id: str) -> None:
    row = db.query(LeaveQuota).filter(LeaveQuota.id == quota_id).first()
    if not row:
        raise NotFoundError("Leave quota", quota_id, message_th="ไม่พบโควต้าการลา")
    db.delete(row)
    db.commit()
