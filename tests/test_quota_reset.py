from datetime import date

import pytest

from siamleave.core.exceptions import NotFoundError, ValidationError
from siamleave.models.leave_used import LeaveUsed
from siamleave.models.position import Position
from siamleave.models.user import User, UserRole
from siamleave.services import quota_reset
from siamleave.services.quota_reset import reset_quota

NEW_YEAR = date(2025, 1, 1)


@pytest.fixture
def usage_rows(db_session, position, employee, leave_types):
    """Cached usage for two Staff users and one user of a carry-over position."""
    manager_position = Position(name_th="ผู้จัดการ", name_en="Manager", new_year_quota=True)
    db_session.add(manager_position)
    db_session.commit()

    colleague = User(email="suda@example.com", hashed_password="x", role=UserRole.USER, position_id=position.id)
    manager = User(email="boss@example.com", hashed_password="x", role=UserRole.USER, position_id=manager_position.id)
    db_session.add_all([colleague, manager])
    db_session.commit()

    vacation, sick = leave_types["vacation"], leave_types["sick"]
    db_session.add_all([
        LeaveUsed(user_id=employee.id, leave_type_id=vacation.id, days=4, hours=2.0),
        LeaveUsed(user_id=employee.id, leave_type_id=sick.id, days=1, hours=0.0),
        LeaveUsed(user_id=colleague.id, leave_type_id=vacation.id, days=2, hours=5.5),
        LeaveUsed(user_id=manager.id, leave_type_id=vacation.id, days=6, hours=1.0),
    ])
    db_session.commit()
    return {"employee": employee, "colleague": colleague, "manager": manager, "manager_position": manager_position}


def _totals(db_session, user_id):
    db_session.expire_all()
    return sorted(
        (row.days, row.hours)
        for row in db_session.query(LeaveUsed).filter(LeaveUsed.user_id == user_id).all()
    )


def test_reset_refused_outside_new_year(db_session, usage_rows):
    with pytest.raises(ValidationError) as exc_info:
        reset_quota(db_session, today=date(2024, 3, 15))
    assert exc_info.value.status_code == 400
    assert exc_info.value.details == {"today": "2024-03-15"}
    assert _totals(db_session, usage_rows["employee"].id) == [(1, 0.0), (4, 2.0)]


def test_zero_strategy_keeps_rows(db_session, usage_rows):
    result = reset_quota(db_session, today=NEW_YEAR)

    assert result.strategy == "zero"
    assert result.positions_affected == 1
    assert result.users_affected == 2
    assert result.rows_affected == 3
    assert db_session.query(LeaveUsed).count() == 4
    assert _totals(db_session, usage_rows["employee"].id) == [(0, 0.0), (0, 0.0)]
    assert _totals(db_session, usage_rows["colleague"].id) == [(0, 0.0)]
    # Positions that carry quota over are untouched
    assert _totals(db_session, usage_rows["manager"].id) == [(6, 1.0)]


def test_force_allows_any_day(db_session, usage_rows):
    result = reset_quota(db_session, force=True, today=date(2024, 3, 15))
    assert result.rows_affected == 3


def test_delete_strategy_removes_only_targets(db_session, position, usage_rows):
    result = reset_quota(db_session, position_id=position.id, strategy="delete", today=NEW_YEAR)

    assert result.rows_affected == 3
    assert _totals(db_session, usage_rows["employee"].id) == []
    assert _totals(db_session, usage_rows["colleague"].id) == []
    assert _totals(db_session, usage_rows["manager"].id) == [(6, 1.0)]


def test_explicit_position_ignores_new_year_flag(db_session, usage_rows):
    result = reset_quota(db_session, position_id=usage_rows["manager_position"].id, today=NEW_YEAR)
    assert result.users_affected == 1
    assert _totals(db_session, usage_rows["manager"].id) == [(0, 0.0)]


def test_reset_by_user_ids(db_session, usage_rows):
    colleague, manager = usage_rows["colleague"], usage_rows["manager"]
    result = reset_quota(
        db_session, user_ids=[colleague.id, manager.id, colleague.id], force=True, strategy="delete"
    )

    assert result.users_affected == 2
    assert result.positions_affected == 2
    assert result.rows_affected == 2
    assert _totals(db_session, usage_rows["employee"].id) == [(1, 0.0), (4, 2.0)]


def test_reset_by_user_ids_skips_missing_users(db_session, usage_rows):
    employee = usage_rows["employee"]
    result = reset_quota(
        db_session, user_ids=[employee.id, "missing-user-1", "missing-user-2"], force=True
    )

    assert result.users_affected == 1
    assert result.positions_affected == 1
    assert result.rows_affected == 2
    assert _totals(db_session, employee.id) == [(0, 0.0), (0, 0.0)]


def test_unknown_position(db_session, usage_rows):
    with pytest.raises(NotFoundError):
        reset_quota(db_session, position_id="no-such-position", today=NEW_YEAR)


def test_unknown_strategy(db_session, usage_rows):
    with pytest.raises(ValidationError):
        reset_quota(db_session, strategy="archive", today=NEW_YEAR)


def test_empty_user_list(db_session, usage_rows):
    with pytest.raises(ValidationError):
        reset_quota(db_session, user_ids=[], force=True)


def test_no_targets_is_a_noop(db_session, usage_rows):
    db_session.query(Position).filter(Position.new_year_quota == False).update(  # noqa: E712
        {Position.new_year_quota: True}, synchronize_session=False
    )
    db_session.commit()

    result = reset_quota(db_session, today=NEW_YEAR)
    assert (result.positions_affected, result.users_affected, result.rows_affected) == (0, 0, 0)


def test_failure_rolls_back_every_change(db_session, usage_rows, monkeypatch):
    original = quota_reset._apply_strategy

    def apply_then_fail(db, user_ids, strategy):
        original(db, user_ids, strategy)
        raise RuntimeError("connection lost")

    monkeypatch.setattr(quota_reset, "_apply_strategy", apply_then_fail)

    with pytest.raises(RuntimeError):
        reset_quota(db_session, strategy="delete", today=NEW_YEAR)

    assert db_session.query(LeaveUsed).count() == 4
    assert _totals(db_session, usage_rows["employee"].id) == [(1, 0.0), (4, 2.0)]


def test_reset_day():
    assert quota_reset.is_reset_day(date(2025, 1, 1))
    assert not quota_reset.is_reset_day(date(2025, 1, 2))
    assert not quota_reset.is_reset_day(date(2025, 12, 1))
