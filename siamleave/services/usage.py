"""
Leave Usage Aggregator

Usage is always derived from approved LeaveRequest rows so deletions and
status changes are reflected immediately. The LeaveUsed table is kept as a
running-total cache next to it: incremented on approval, released on
deletion, rebuilt on demand, and cleared by the annual reset.
"""
import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from siamleave.core.config import BusinessSettings, settings
from siamleave.models.leave_request import LeaveRequest, LeaveStatus
from siamleave.models.leave_type import LeaveType
from siamleave.models.leave_used import LeaveUsed
from siamleave.services.duration import duration, hours_to_duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveUsage:
    used_days: int
    used_hours: float
    total_hours: float

    def total_days(self, working_hours_per_day: int) -> float:
        return round(self.total_hours / working_hours_per_day, 2)


def _business(business: Optional[BusinessSettings]) -> BusinessSettings:
    return business or settings.business


def approved_requests(
    db: Session,
    user_id: str,
    year: int,
    leave_type_id: Optional[str] = None
) -> List[LeaveRequest]:
    """Approved requests of a user whose start date falls in `year`."""
    query = db.query(LeaveRequest).filter(
        LeaveRequest.user_id == user_id,
        LeaveRequest.status == LeaveStatus.APPROVED.value,
        LeaveRequest.start_date >= date(year, 1, 1),
        LeaveRequest.start_date <= date(year, 12, 31),
    )
    if leave_type_id:
        query = query.filter(LeaveRequest.leave_type_id == leave_type_id)
    return query.all()


def usage_from_requests(requests: Iterable[Any], working_hours_per_day: int) -> LeaveUsage:
    total_hours = round(sum(duration(r).to_hours(working_hours_per_day) for r in requests), 2)
    normalized = hours_to_duration(total_hours, working_hours_per_day)
    return LeaveUsage(
        used_days=normalized.days,
        used_hours=normalized.hours,
        total_hours=total_hours,
    )


def usage_for_user(
    db: Session,
    user_id: str,
    year: int,
    leave_type_id: Optional[str] = None,
    business: Optional[BusinessSettings] = None
) -> LeaveUsage:
    """
    Sum a user's approved leave for one year, optionally for a single leave type.

    Args:
        db: Database session
        user_id: ID of the user
        year: Calendar year, matched against the request start date
        leave_type_id: Restrict to one leave type (soft-deleted types included)
        business: Business rules; defaults to the configured settings

    Returns:
        LeaveUsage with whole days, leftover hours and the raw hour total
    """
    working_hours = _business(business).working_hours_per_day
    return usage_from_requests(approved_requests(db, user_id, year, leave_type_id), working_hours)


def usage_breakdown(
    db: Session,
    user_id: str,
    year: int,
    lang: str = "en",
    business: Optional[BusinessSettings] = None
) -> List[Dict[str, Any]]:
    """
    Per leave type usage for a user. Every active leave type is listed, plus any
    soft-deleted type the user still has approved leave under.
    """
    working_hours = _business(business).working_hours_per_day

    grouped: Dict[str, List[LeaveRequest]] = defaultdict(list)
    for request in approved_requests(db, user_id, year):
        grouped[request.leave_type_id].append(request)

    leave_types = db.query(LeaveType).filter(
        (LeaveType.is_active == True) | (LeaveType.id.in_(list(grouped)))  # noqa: E712
    ).all()

    rows = []
    for leave_type in leave_types:
        usage = usage_from_requests(grouped.get(leave_type.id, []), working_hours)
        rows.append({
            "leave_type_id": leave_type.id,
            "leave_type_name": leave_type.display_name(lang),
            "leave_type_name_th": leave_type.display_name("th"),
            "leave_type_name_en": leave_type.display_name("en"),
            "is_active": leave_type.is_active,
            "days": usage.used_days,
            "hours": usage.used_hours,
            "total_days": usage.total_days(working_hours),
        })
    rows.sort(key=lambda r: (not r["is_active"], r["leave_type_name_en"]))
    return rows


# ---------------------------------------------------------------------------
# LeaveUsed cache
# ---------------------------------------------------------------------------

def cached_usage(db: Session, user_id: str, leave_type_id: str) -> Optional[LeaveUsed]:
    return db.query(LeaveUsed).filter(
        LeaveUsed.user_id == user_id,
        LeaveUsed.leave_type_id == leave_type_id
    ).first()


def record_approved_leave(
    db: Session,
    leave: LeaveRequest,
    business: Optional[BusinessSettings] = None
) -> Optional[LeaveUsed]:
    """Add an approved request to the cache. The caller owns the commit."""
    working_hours = _business(business).working_hours_per_day
    measured = duration(leave)
    if measured.is_empty:
        logger.info(f"No days or hours to record for leave request {leave.id}")
        return None

    row = cached_usage(db, leave.user_id, leave.leave_type_id)
    if row is None:
        row = LeaveUsed(user_id=leave.user_id, leave_type_id=leave.leave_type_id, days=0, hours=0.0)
        db.add(row)
        # Sessions do not autoflush; make the row visible to later lookups in this transaction
        db.flush()

    total = (row.days or 0) * working_hours + (row.hours or 0) + measured.to_hours(working_hours)
    combined = hours_to_duration(total, working_hours)
    row.days, row.hours = combined.days, combined.hours
    logger.info(
        f"Recorded leave request {leave.id} for user {leave.user_id}: "
        f"{measured.days} day(s) {measured.hours} hour(s)"
    )
    return row


def release_leave(
    db: Session,
    leave: LeaveRequest,
    business: Optional[BusinessSettings] = None
) -> Optional[LeaveUsed]:
    """Take a previously approved request back out of the cache, never below zero."""
    working_hours = _business(business).working_hours_per_day
    row = cached_usage(db, leave.user_id, leave.leave_type_id)
    if row is None:
        return None

    remaining = (row.days or 0) * working_hours + (row.hours or 0) - duration(leave).to_hours(working_hours)
    released = hours_to_duration(max(0.0, remaining), working_hours)
    row.days, row.hours = released.days, released.hours
    return row


def rebuild_usage_cache(
    db: Session,
    user_id: str,
    year: int,
    business: Optional[BusinessSettings] = None
) -> List[LeaveUsed]:
    """Re-derive a user's LeaveUsed rows from approved requests of `year`."""
    working_hours = _business(business).working_hours_per_day

    grouped: Dict[str, List[LeaveRequest]] = defaultdict(list)
    for request in approved_requests(db, user_id, year):
        grouped[request.leave_type_id].append(request)

    try:
        rows = {row.leave_type_id: row for row in db.query(LeaveUsed).filter(LeaveUsed.user_id == user_id).all()}
        for leave_type_id in set(rows) | set(grouped):
            usage = usage_from_requests(grouped.get(leave_type_id, []), working_hours)
            row = rows.get(leave_type_id)
            if row is None:
                row = LeaveUsed(user_id=user_id, leave_type_id=leave_type_id)
                db.add(row)
                rows[leave_type_id] = row
            row.days, row.hours = usage.used_days, usage.used_hours
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to rebuild leave usage cache for user {user_id}", exc_info=True)
        raise

    logger.info(f"Rebuilt leave usage cache for user {user_id} ({len(rows)} leave types, year {year})")
    return list(rows.values())


def serialize_cache_row(
    row: Optional[LeaveUsed],
    leave_type: Optional[LeaveType],
    lang: str = "en",
    business: Optional[BusinessSettings] = None,
    **identity: Any
) -> Dict[str, Any]:
    working_hours = _business(business).working_hours_per_day
    days = row.days if row else 0
    hours = row.hours if row else 0.0
    return {
        "id": row.id if row else None,
        "user_id": row.user_id if row else identity.get("user_id"),
        "leave_type_id": row.leave_type_id if row else identity.get("leave_type_id"),
        "leave_type_name": leave_type.display_name(lang) if leave_type else "Unknown",
        "leave_type_name_th": leave_type.display_name("th") if leave_type else "Unknown",
        "leave_type_name_en": leave_type.display_name("en") if leave_type else "Unknown",
        "days": days or 0,
        "hours": hours or 0.0,
        "total_days": round((days or 0) + (hours or 0) / working_hours, 2),
        "created_at": row.created_at if row else None,
        "updated_at": row.updated_at if row else None,
    }


def _created_between(year: Optional[int], month: Optional[int]):
    if year is None and month is None:
        return None
    year = year or date.today().year
    if month:
        last_day = calendar.monthrange(year, month)[1]
        return datetime(year, month, 1), datetime(year, month, last_day, 23, 59, 59, 999999)
    return datetime(year, 1, 1), datetime(year, 12, 31, 23, 59, 59, 999999)


def usage_summary(
    db: Session,
    year: Optional[int] = None,
    month: Optional[int] = None,
    lang: str = "en",
    business: Optional[BusinessSettings] = None
) -> List[Dict[str, Any]]:
    """Cache totals per leave type with the number of distinct users."""
    working_hours = _business(business).working_hours_per_day
    query = db.query(LeaveUsed)
    bounds = _created_between(year, month)
    if bounds:
        query = query.filter(LeaveUsed.created_at >= bounds[0], LeaveUsed.created_at <= bounds[1])

    summary: Dict[str, Dict[str, Any]] = {}
    hours: Dict[str, float] = defaultdict(float)
    users: Dict[str, set] = defaultdict(set)
    for row in query.all():
        if row.leave_type_id not in summary:
            summary[row.leave_type_id] = {
                "leave_type_id": row.leave_type_id,
                "leave_type_name": row.leave_type.display_name(lang) if row.leave_type else "Unknown",
            }
        hours[row.leave_type_id] += (row.days or 0) * working_hours + (row.hours or 0.0)
        users[row.leave_type_id].add(row.user_id)

    results = []
    for leave_type_id, entry in summary.items():
        total = hours_to_duration(hours[leave_type_id], working_hours)
        results.append({
            **entry,
            "total_days": total.days,
            "total_hours": total.hours,
            "user_count": len(users[leave_type_id]),
        })
    return results
