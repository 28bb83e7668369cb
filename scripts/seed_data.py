"""
Seed a development database with positions, leave types, quotas and one user per role.

    python -m scripts.seed_data
"""
from siamleave.database import SessionLocal, init_db
from siamleave.models.leave_quota import LeaveQuota
from siamleave.models.leave_type import LeaveType
from siamleave.models.position import Position
from siamleave.models.user import User, UserRole
from siamleave.services.auth import get_password_hash

LEAVE_TYPES = [
    # name_th, name_en, require_attachment
    ("ลาพักร้อน", "Vacation", False),
    ("ลาป่วย", "Sick", True),
    ("ลากิจ", "Personal", False),
    ("ลาฉุกเฉิน", "Emergency", False),
]

POSITIONS = {
    # name_en: (name_th, new_year_quota, {leave type name_en: days})
    "Staff": ("พนักงาน", False, {"Vacation": 10, "Sick": 30, "Personal": 3}),
    "Manager": ("ผู้จัดการ", True, {"Vacation": 15, "Sick": 30, "Personal": 5}),
}

init_db()
db = SessionLocal()

def get_or_create_leave_type(name_th, name_en, require_attachment):
    leave_type = db.query(LeaveType).filter(LeaveType.name_en == name_en).first()
    if leave_type:
        print(f"Leave type {name_en} already exists. Skipping.")
        return leave_type
    leave_type = LeaveType(name_th=name_th, name_en=name_en, require_attachment=require_attachment)
    db.add(leave_type)
    db.commit()
    print(f"Created leave type -> {name_en}")
    return leave_type

def get_or_create_position(name_en, name_th, new_year_quota, quotas, leave_types):
    position = db.query(Position).filter(Position.name_en == name_en).first()
    if position:
        print(f"Position {name_en} already exists. Skipping.")
        return position
    position = Position(name_th=name_th, name_en=name_en, new_year_quota=new_year_quota)
    for type_name, days in quotas.items():
        position.quotas.append(LeaveQuota(leave_type_id=leave_types[type_name].id, quota=days))
    db.add(position)
    db.commit()
    print(f"Created position -> {name_en} ({len(quotas)} quotas)")
    return position

def create_user(email, password, role, position=None):
    # Check if user already exists to avoid unique constraint errors
    if db.query(User).filter(User.email == email).first():
        print(f"User {email} already exists. Skipping.")
        return
    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
        position_id=position.id if position else None,
        is_active=True
    )
    db.add(user)
    db.commit()
    print(f"Created {role.value} -> {email}")

try:
    leave_types = {name_en: get_or_create_leave_type(th, name_en, att) for th, name_en, att in LEAVE_TYPES}
    positions = {
        name_en: get_or_create_position(name_en, th, carry, quotas, leave_types)
        for name_en, (th, carry, quotas) in POSITIONS.items()
    }

    create_user("employee@example.com", "Employee123!", UserRole.USER, positions["Staff"])
    create_user("manager@example.com", "Manager123!", UserRole.ADMIN, positions["Manager"])
    create_user("superadmin@example.com", "Superadmin123!", UserRole.SUPERADMIN)
finally:
    db.close()
