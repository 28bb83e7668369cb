from datetime import date

import pytest

from siamleave.core.config import BusinessSettings
from siamleave.core.exceptions import NotFoundError, QuotaExceededError, QuotaNotFoundError, ValidationError
from siamleave.models.leave_type import LeaveType
from siamleave.services import quota as quota_service
from siamleave.services.duration import LeaveDuration
from siamleave.services.leave_service import delete_leave_type


@pytest.fixture
def used_8_days_3_hours(employee, leave_types, quotas, make_leave):
    """75 hours of approved vacation at 9 working hours per day."""
    vacation = leave_types["vacation"]
    make_leave(employee, vacation, date(2024, 1, 8), date(2024, 1, 15))
    make_leave(employee, vacation, date(2024, 1, 16), start_time="09:00", end_time="12:00")


def test_request_over_quota_is_rejected(db_session, employee, leave_types, used_8_days_3_hours):
    # 75h used + 18h requested = 93h > 10 days * 9h
    with pytest.raises(QuotaExceededError) as exc_info:
        quota_service.check_request_quota(
            db_session, employee, leave_types["vacation"], LeaveDuration(days=2), 2024
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.details == {"quota_hours": 90, "used_hours": 75.0, "requested_hours": 18}


def test_request_within_quota_passes(db_session, employee, leave_types, used_8_days_3_hours):
    status = quota_service.check_request_quota(
        db_session, employee, leave_types["vacation"], LeaveDuration(days=1), 2024
    )
    assert status.used_days == 8
    assert status.used_hours == 3.0
    assert status.remaining == {"days": 1, "hours": 6.0}


def test_request_filling_quota_exactly_passes(db_session, employee, leave_types, used_8_days_3_hours):
    quota_service.check_request_quota(
        db_session, employee, leave_types["vacation"], LeaveDuration(days=1, hours=6), 2024
    )


def test_emergency_leave_skips_quota(db_session, employee, leave_types, quotas):
    assert quota_service.check_request_quota(
        db_session, employee, leave_types["emergency"], LeaveDuration(days=30), 2024
    ) is None


def test_emergency_type_is_configurable(db_session, employee, leave_types, quotas):
    business = BusinessSettings(emergency_leave_type="Sick")
    assert quota_service.check_request_quota(
        db_session, employee, leave_types["sick"], LeaveDuration(days=60), 2024, business
    ) is None


def test_missing_quota_row(db_session, employee, quotas):
    maternity = LeaveType(name_th="ลาคลอด", name_en="Maternity")
    db_session.add(maternity)
    db_session.commit()

    with pytest.raises(QuotaNotFoundError) as exc_info:
        quota_service.check_request_quota(db_session, employee, maternity, LeaveDuration(days=1), 2024)
    assert exc_info.value.localized("th") == "ไม่พบโควต้าการลาสำหรับประเภทนี้"
    assert exc_info.value.localized("en") == "Leave quota for this type not found."


def test_remaining_never_negative(db_session, employee, leave_types, quotas, make_leave):
    make_leave(employee, leave_types["vacation"], date(2024, 2, 1), date(2024, 2, 12))

    status = quota_service.quota_status(db_session, employee.id, leave_types["vacation"].id, 2024)
    assert status.quota_days == 10
    assert status.used_days == 12
    assert status.remaining_days == 0
    assert status.remaining == {"days": 0, "hours": 0.0}


def test_quota_status_uses_configured_working_hours(db_session, employee, leave_types, quotas, make_leave):
    make_leave(employee, leave_types["vacation"], date(2024, 2, 1), start_time="09:00", end_time="17:00")
    business = BusinessSettings(working_hours_per_day=8)

    status = quota_service.quota_status(db_session, employee.id, leave_types["vacation"].id, 2024, business)
    assert status.used_days == 1
    assert status.used_hours == 0.0
    assert status.remaining_days == 9


def test_quota_status_unknown_user(db_session, leave_types):
    with pytest.raises(NotFoundError):
        quota_service.quota_status(db_session, "missing", leave_types["vacation"].id, 2024)


def test_overview_lists_active_quota_types(db_session, employee, leave_types, quotas, make_leave):
    make_leave(employee, leave_types["sick"], date(2024, 2, 1), date(2024, 2, 2))
    overview = quota_service.quota_overview(db_session, employee.id, 2024, lang="th")

    assert [row["leave_type_name_en"] for row in overview] == ["Sick", "Vacation"]
    sick = overview[0]
    assert sick["leave_type_name"] == "ลาป่วย"
    assert sick["used_days"] == 2
    assert sick["remaining_days"] == 28

    delete_leave_type(db_session, leave_types["sick"].id)
    overview = quota_service.quota_overview(db_session, employee.id, 2024)
    assert [row["leave_type_name_en"] for row in overview] == ["Vacation"]


def test_overview_requires_position(db_session, admin_user):
    with pytest.raises(NotFoundError) as exc_info:
        quota_service.quota_overview(db_session, admin_user.id, 2024)
    assert exc_info.value.status_code == 404


def test_duplicate_quota_row_rejected(db_session, position, leave_types, quotas):
    with pytest.raises(ValidationError):
        quota_service.create_quota(db_session, position.id, leave_types["vacation"].id, 5)


def test_quota_table_maintenance(db_session, position, leave_types):
    quota_id = quota_service.create_quota(db_session, position.id, leave_types["emergency"].id, 3).id
    assert quota_service.update_quota(db_session, quota_id, 6).quota == 6
    assert len(quota_service.list_quotas(db_session, position.id)) == 1

    quota_service.delete_quota(db_session, quota_id)
    assert quota_service.list_quotas(db_session) == []
    with pytest.raises(NotFoundError):
        quota_service.delete_quota(db_session, quota_id)
