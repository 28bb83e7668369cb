import pytest
import os
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from siamleave.database import Base, get_db
from siamleave.main import app
from siamleave.core.limiter import limiter
from siamleave.routers.auth_deps import get_today
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

# Fixed reference date for backdating and reset-day checks
TODAY = date(2024, 3, 15)

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """
    Fresh schema per test. Services commit and roll back on their own, so the
    session is not wrapped in an outer transaction.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def position(db_session):
    """Position whose usage is cleared by the annual reset."""
    from siamleave.models.position import Position
    position = Position(name_th="พนักงาน", name_en="Staff", new_year_quota=False)
    db_session.add(position)
    db_session.commit()
    return position

@pytest.fixture(scope="function")
def leave_types(db_session):
    from siamleave.models.leave_type import LeaveType
    types = {
        "vacation": LeaveType(name_th="ลาพักร้อน", name_en="Vacation"),
        "sick": LeaveType(name_th="ลาป่วย", name_en="Sick", require_attachment=True),
        "emergency": LeaveType(name_th="ลาฉุกเฉิน", name_en="Emergency"),
    }
    db_session.add_all(types.values())
    db_session.commit()
    return types

@pytest.fixture(scope="function")
def quotas(db_session, position, leave_types):
    """Vacation 10 days and sick 30 days for the Staff position; no emergency quota."""
    from siamleave.models.leave_quota import LeaveQuota
    rows = {
        "vacation": LeaveQuota(position_id=position.id, leave_type_id=leave_types["vacation"].id, quota=10),
        "sick": LeaveQuota(position_id=position.id, leave_type_id=leave_types["sick"].id, quota=30),
    }
    db_session.add_all(rows.values())
    db_session.commit()
    return rows

def _make_user(db_session, email, role, position_id=None, full_name=None):
    from siamleave.models.user import User
    from siamleave.services import auth as auth_service
    user = User(
        email=email,
        hashed_password=auth_service.get_password_hash("Password123!"),
        full_name=full_name,
        role=role,
        position_id=position_id,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def employee(db_session, position):
    from siamleave.models.user import UserRole
    return _make_user(db_session, "somchai@example.com", UserRole.USER, position.id, "Somchai Jaidee")

@pytest.fixture(scope="function")
def admin_user(db_session):
    from siamleave.models.user import UserRole
    return _make_user(db_session, "manager@example.com", UserRole.ADMIN, full_name="Leave Manager")

@pytest.fixture(scope="function")
def superadmin(db_session):
    from siamleave.models.user import UserRole
    return _make_user(db_session, "root@example.com", UserRole.SUPERADMIN, full_name="System Administrator")

@pytest.fixture(scope="function")
def auth_headers():
    """Helper fixture to build bearer headers for a user."""
    from siamleave.services.auth import create_access_token

    def _auth_headers(user, lang=None):
        token = create_access_token(data={"sub": user.id, "role": user.role.value})
        headers = {"Authorization": f"Bearer {token}"}
        if lang:
            headers["Accept-Language"] = lang
        return headers
    return _auth_headers

@pytest.fixture(scope="function")
def make_leave(db_session):
    """Insert a leave request row directly, approved unless told otherwise."""
    from siamleave.models.leave_request import LeaveRequest, LeaveStatus

    def _make_leave(user, leave_type, start, end=None, status=LeaveStatus.APPROVED.value,
                    start_time=None, end_time=None):
        leave = LeaveRequest(
            user_id=user.id,
            leave_type_id=leave_type.id,
            start_date=start,
            end_date=end or start,
            start_time=start_time,
            end_time=end_time,
            contact="081-234-5678",
            status=status,
        )
        db_session.add(leave)
        db_session.commit()
        return leave
    return _make_leave

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
