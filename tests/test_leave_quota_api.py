from datetime import date

from fastapi import status

from siamleave.models.leave_used import LeaveUsed


def test_my_quota(client, employee, auth_headers, leave_types, quotas, make_leave):
    make_leave(employee, leave_types["vacation"], date(2024, 2, 5), date(2024, 2, 6))
    make_leave(employee, leave_types["vacation"], date(2024, 2, 7), start_time="09:00", end_time="13:30")

    response = client.get("/api/leave-quota/me", headers=auth_headers(employee, "en"))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["metadata"] == {"year": 2024}

    vacation = next(row for row in body["data"] if row["leave_type_id"] == leave_types["vacation"].id)
    assert vacation["leave_type_name"] == "Vacation"
    assert vacation["quota_days"] == 10
    assert vacation["used_days"] == 2
    assert vacation["used_hours"] == 4.5
    assert vacation["remaining"] == {"days": 7, "hours": 4.5}


def test_my_quota_without_position(client, admin_user, auth_headers):
    response = client.get("/api/leave-quota/me", headers=auth_headers(admin_user))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_quota_requires_authentication(client):
    response = client.get("/api/leave-quota/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_quota_crud(client, superadmin, auth_headers, position, leave_types):
    headers = auth_headers(superadmin)
    created = client.post("/api/leave-quota", headers=headers, json={
        "position_id": position.id,
        "leave_type_id": leave_types["vacation"].id,
        "quota": 12,
    })
    assert created.status_code == status.HTTP_201_CREATED
    quota_id = created.json()["data"]["id"]

    duplicate = client.post("/api/leave-quota", headers=headers, json={
        "position_id": position.id,
        "leave_type_id": leave_types["vacation"].id,
        "quota": 3,
    })
    assert duplicate.status_code == status.HTTP_400_BAD_REQUEST

    updated = client.put(f"/api/leave-quota/{quota_id}", headers=headers, json={"quota": 15})
    assert updated.json()["data"]["quota"] == 15

    listed = client.get(f"/api/leave-quota/position/{position.id}", headers=headers)
    assert [row["quota"] for row in listed.json()["data"]] == [15]

    assert client.delete(f"/api/leave-quota/{quota_id}", headers=headers).status_code == 200
    assert client.delete(f"/api/leave-quota/{quota_id}", headers=headers).status_code == 404
    assert client.get("/api/leave-quota", headers=headers).json()["data"] == []


def test_negative_quota_rejected(client, superadmin, auth_headers, position, leave_types):
    response = client.post("/api/leave-quota", headers=auth_headers(superadmin), json={
        "position_id": position.id,
        "leave_type_id": leave_types["vacation"].id,
        "quota": -1,
    })
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_admin_cannot_edit_quotas(client, admin_user, auth_headers, position, leave_types):
    response = client.post("/api/leave-quota", headers=auth_headers(admin_user), json={
        "position_id": position.id,
        "leave_type_id": leave_types["vacation"].id,
        "quota": 5,
    })
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["errors"][0]["code"] == "PERMISSION_DENIED"


def _seed_usage(db_session, employee, leave_types):
    db_session.add(LeaveUsed(user_id=employee.id, leave_type_id=leave_types["vacation"].id, days=3, hours=1.0))
    db_session.commit()


def test_reset_requires_new_year_or_force(client, db_session, superadmin, employee, auth_headers, leave_types):
    _seed_usage(db_session, employee, leave_types)
    headers = auth_headers(superadmin)

    refused = client.post("/api/leave-quota/reset", headers=headers, json={})
    assert refused.status_code == status.HTTP_400_BAD_REQUEST

    forced = client.post("/api/leave-quota/reset", headers=headers, json={"force": True})
    assert forced.status_code == status.HTTP_200_OK
    assert forced.json()["data"] == {
        "positions_affected": 1, "users_affected": 1, "rows_affected": 1, "strategy": "zero"
    }
    db_session.expire_all()
    row = db_session.query(LeaveUsed).one()
    assert (row.days, row.hours) == (0, 0.0)


def test_reset_with_position_alias(client, db_session, superadmin, employee, position, auth_headers, leave_types):
    _seed_usage(db_session, employee, leave_types)
    response = client.post(
        "/api/leave-quota-reset/reset",
        headers=auth_headers(superadmin),
        json={"positionId": position.id, "force": True, "strategy": "delete"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["rows_affected"] == 1
    assert db_session.query(LeaveUsed).count() == 0


def test_reset_unknown_strategy(client, superadmin, auth_headers):
    response = client.post(
        "/api/leave-quota-reset/reset",
        headers=auth_headers(superadmin),
        json={"force": True, "strategy": "archive"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_reset_by_users_ignores_date(client, db_session, superadmin, employee, auth_headers, leave_types):
    _seed_usage(db_session, employee, leave_types)
    headers = auth_headers(superadmin)

    empty = client.post("/api/leave-quota-reset/reset-by-users", headers=headers, json={"userIds": []})
    assert empty.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post(
        "/api/leave-quota-reset/reset-by-users",
        headers=headers,
        json={"user_ids": [employee.id], "strategy": "delete"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["users_affected"] == 1
    assert db_session.query(LeaveUsed).count() == 0


def test_reset_forbidden_for_employee(client, employee, auth_headers):
    response = client.post("/api/leave-quota/reset", headers=auth_headers(employee), json={"force": True})
    assert response.status_code == status.HTTP_403_FORBIDDEN
