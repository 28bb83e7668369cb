"""
Annual Leave Quota Reset

Clears accumulated LeaveUsed totals for a set of users. Runs as

    validating -> transacting -> committed | rolled back

Validation (strategy, reset day, target list) happens before any write. All
writes share the request session's transaction and are committed once; any
failure rolls every change back before the error propagates.

There is no internal scheduler: the January 1st run is triggered externally
through the reset endpoints.
"""
import enum
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from siamleave.core.exceptions import ValidationError
from siamleave.models.leave_used import LeaveUsed
from siamleave.models.position import Position
from siamleave.models.user import User
from siamleave.services.quota import get_position

logger = logging.getLogger(__name__)


class ResetStrategy(str, enum.Enum):
    ZERO = "zero"
    DELETE = "delete"


@dataclass(frozen=True)
class ResetResult:
    positions_affected: int
    users_affected: int
    rows_affected: int
    strategy: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def is_reset_day(today: date) -> bool:
    return today.month == 1 and today.day == 1


def _resolve_targets(
    db: Session,
    position_id: Optional[str],
    user_ids: Optional[Sequence[str]]
) -> Tuple[int, List[str]]:
    """Return (number of positions involved, target user ids). Unknown user ids are dropped."""
    if user_ids:
        unique_ids = list(dict.fromkeys(user_ids))
        rows = db.query(User.id, User.position_id).filter(User.id.in_(unique_ids)).all()
        existing = {row.id for row in rows}
        positions = {row.position_id for row in rows if row.position_id}
        return len(positions), [user_id for user_id in unique_ids if user_id in existing]

    if position_id:
        position_ids = [get_position(db, position_id).id]
    else:
        # Positions that do not carry quota over into the new year
        position_ids = [
            p.id for p in db.query(Position).filter(Position.new_year_quota == False).all()  # noqa: E712
        ]

    if not position_ids:
        return 0, []

    users = db.query(User.id).filter(User.position_id.in_(position_ids)).all()
    return len(position_ids), [u.id for u in users]


def _apply_strategy(db: Session, user_ids: List[str], strategy: ResetStrategy) -> int:
    query = db.query(LeaveUsed).filter(LeaveUsed.user_id.in_(user_ids))
    if strategy == ResetStrategy.DELETE:
        return query.delete(synchronize_session=False)
    return query.update({LeaveUsed.days: 0, LeaveUsed.hours: 0.0}, synchronize_session=False)


def reset_quota(
    db: Session,
    position_id: Optional[str] = None,
    user_ids: Optional[Sequence[str]] = None,
    force: bool = False,
    strategy: str = ResetStrategy.ZERO.value,
    today: Optional[date] = None
) -> ResetResult:
    """
    Reset leave usage for the selected users.

    Targets, in order of precedence: explicit `user_ids`, every user holding
    `position_id`, or every user of a position with new_year_quota disabled.

    Args:
        db: Database session; committed on success, rolled back on failure
        position_id: Limit the reset to one position
        user_ids: Explicit user list (takes precedence over position_id)
        force: Allow running on a day other than January 1st
        strategy: "zero" keeps LeaveUsed rows with days/hours set to 0,
            "delete" removes them
        today: Reference date for the January 1st guard (defaults to today)

    Returns:
        ResetResult with counts of positions, users and LeaveUsed rows touched
    """
    try:
        strategy_value = ResetStrategy(strategy)
    except ValueError:
        raise ValidationError(
            f"Unknown reset strategy '{strategy}' (expected 'zero' or 'delete')",
            f"ไม่รู้จักวิธีรีเซ็ต '{strategy}' (ต้องเป็น 'zero' หรือ 'delete')"
        )

    today = today or date.today()
    if not force and not is_reset_day(today):
        raise ValidationError(
            "Reset is only allowed on January 1st (or send force=true)",
            "รีเซ็ตได้เฉพาะวันที่ 1 มกราคมเท่านั้น (หรือส่ง force=true)",
            details={"today": today.isoformat()}
        )

    if user_ids is not None and len(user_ids) == 0:
        raise ValidationError("user_ids (array) is required", "ต้องระบุรายการ user_ids")

    try:
        positions_affected, targets = _resolve_targets(db, position_id, user_ids)
        rows_affected = _apply_strategy(db, targets, strategy_value) if targets else 0
        db.commit()
    except Exception:
        db.rollback()
        logger.error(
            "Leave quota reset rolled back",
            exc_info=True,
            extra={"position_id": position_id, "strategy": strategy_value.value}
        )
        raise

    result = ResetResult(
        positions_affected=positions_affected,
        users_affected=len(targets),
        rows_affected=rows_affected or 0,
        strategy=strategy_value.value,
    )
    logger.info(f"Leave quota reset committed: {result}")
    return result
