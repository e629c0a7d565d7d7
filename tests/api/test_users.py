import pytest
import httpx
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession

from class_scheduler.database import models as db_models


@pytest.mark.anyio
class TestUsersAPI:

    async def test_admin_lists_teachers_and_students(
        self,
        client: httpx.AsyncClient,
        auth_headers,
        test_admin: db_models.Users,
        test_teacher: db_models.Users,
        test_student: db_models.Users
    ):
        response = await client.get("/api/users", headers=auth_headers(test_admin))

        assert response.status_code == 200
        assert [u["name"] for u in response.json()] == ["Sam Student", "Tom Teacher"]
        assert all("password" not in u for u in response.json())

    async def test_non_admin_cannot_list(
        self,
        client: httpx.AsyncClient,
        auth_headers,
        test_teacher: db_models.Users
    ):
        response = await client.get("/api/users", headers=auth_headers(test_teacher))
        assert response.status_code == 403

    async def test_admin_updates_user(
        self,
        client: httpx.AsyncClient,
        auth_headers,
        test_admin: db_models.Users,
        test_teacher: db_models.Users
    ):
        response = await client.patch(
            f"/api/users/{test_teacher.id}",
            json={"baseSalaryPerHour": "25.00", "isActive": False},
            headers=auth_headers(test_admin)
        )

        assert response.status_code == 200, response.json()
        assert Decimal(response.json()["baseSalaryPerHour"]) == Decimal("25.00")
        assert response.json()["isActive"] is False

    async def test_update_unknown_user(
        self,
        client: httpx.AsyncClient,
        auth_headers,
        test_admin: db_models.Users
    ):
        response = await client.patch("/api/users/9999", json={"name": "Ghost"}, headers=auth_headers(test_admin))
        assert response.status_code == 404

    async def test_record_payments(
        self,
        client: httpx.AsyncClient,
        db_session: AsyncSession,
        auth_headers,
        test_admin: db_models.Users,
        test_student: db_models.Users
    ):
        student_id = test_student.id
        for amount in ("100.00", "-40.00"):
            response = await client.post(
                f"/api/users/{student_id}/payments",
                json={"amount": amount, "note": "term fee"},
                headers=auth_headers(test_admin)
            )
            assert response.status_code == 200, response.json()

        body = response.json()
        assert Decimal(body["balance"]) == Decimal("60.00")
        assert [p["amount"] for p in body["paymentHistory"]] == ["100.00", "-40.00"]

        stored = await db_session.get(db_models.Users, student_id, populate_existing=True)
        assert stored.balance == Decimal("60.00")
        assert len(stored.payment_history) == 2

    async def test_teacher_cannot_record_payment(
        self,
        client: httpx.AsyncClient,
        auth_headers,
        test_teacher: db_models.Users,
        test_student: db_models.Users
    ):
        response = await client.post(
            f"/api/users/{test_student.id}/payments",
            json={"amount": "10.00"},
            headers=auth_headers(test_teacher)
        )
        assert response.status_code == 403
