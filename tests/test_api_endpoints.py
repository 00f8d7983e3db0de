"""
NaijaTax Compliance - API Endpoint Tests

End-to-end tests through the FastAPI app: authentication, owner
resolution, plan and account-type gating, payroll, VAT and calculators.
"""

import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.models.entity import Company
from tests.conftest import TEST_PASSWORD, _auth_headers


def _money(value) -> Decimal:
    return Decimal(str(value))


class TestHealthEndpoints:
    """Test health check endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_api_root(self, client: AsyncClient):
        response = await client.get("/api/v1")
        assert response.status_code == 200
        assert response.json()["endpoints"]["payroll"] == "/api/v1/payroll"


class TestAuthEndpoints:
    """Test authentication endpoints."""

    @pytest.mark.asyncio
    async def test_register_login_me(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/register", json={
            "email": "ngozi@example.com",
            "password": "SecurePass123!",
            "first_name": "Ngozi",
            "last_name": "Eze",
            "account_type": "company",
        })
        assert response.status_code == 201
        assert response.json()["subscription_plan"] == "free"

        response = await client.post("/api/v1/auth/login", json={
            "email": "ngozi@example.com",
            "password": "SecurePass123!",
        })
        assert response.status_code == 200
        token = response.json()["access_token"]

        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["account_type"] == "company"

    @pytest.mark.asyncio
    async def test_duplicate_registration(self, client: AsyncClient, company_user):
        response = await client.post("/api/v1/auth/register", json={
            "email": company_user.email,
            "password": "SecurePass123!",
            "first_name": "Dup",
            "last_name": "User",
            "account_type": "company",
        })
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "DUPLICATE_ENTRY"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, company_user):
        response = await client.post("/api/v1/auth/login", json={
            "email": company_user.email,
            "password": "wrong-password",
        })
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_login_fixture_user(self, client: AsyncClient, company_user):
        response = await client.post("/api/v1/auth/login", json={
            "email": company_user.email,
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unauthenticated_request(self, client: AsyncClient):
        response = await client.get("/api/v1/payroll/employees")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401


class TestOwnerResolution:
    """Test which Company / Business a request acts for."""

    @pytest.mark.asyncio
    async def test_create_and_list_entities(self, client: AsyncClient, business_user):
        headers = _auth_headers(business_user)
        response = await client.post("/api/v1/entities", json={
            "name": "Emeka Stores",
            "registration_number": "BN555",
        }, headers=headers)
        assert response.status_code == 201
        assert response.json()["bn_number"] == "BN555"

        response = await client.get("/api/v1/entities", headers=headers)
        assert [e["name"] for e in response.json()] == ["Emeka Stores"]

    @pytest.mark.asyncio
    async def test_individual_has_no_entities(self, client: AsyncClient, individual_headers):
        response = await client.get("/api/v1/entities", headers=individual_headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "ACCOUNT_TYPE_NOT_ALLOWED"

    @pytest.mark.asyncio
    async def test_individual_cannot_own_records(self, client: AsyncClient, individual_headers):
        response = await client.get("/api/v1/invoices", headers=individual_headers)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_ACCOUNT_TYPE"

    @pytest.mark.asyncio
    async def test_missing_entity(self, client: AsyncClient, free_company_headers):
        response = await client.get("/api/v1/invoices", headers=free_company_headers)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "MISSING_ENTITY_ID"

    @pytest.mark.asyncio
    async def test_foreign_entity_header(self, client: AsyncClient, company_headers, business):
        headers = dict(company_headers, **{"X-Entity-ID": str(business.id)})
        response = await client.get("/api/v1/invoices", headers=headers)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ENTITY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_malformed_entity_header(self, client: AsyncClient, company_headers):
        headers = dict(company_headers, **{"X-Entity-ID": "abc"})
        response = await client.get("/api/v1/invoices", headers=headers)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_defaults_to_first_entity(self, client: AsyncClient, company_user, company):
        response = await client.get("/api/v1/invoices", headers=_auth_headers(company_user))
        assert response.status_code == 200
        assert response.json() == []


class TestGating:
    """Test subscription-plan and account-type gating."""

    @pytest.mark.asyncio
    async def test_payroll_requires_paid_plan(self, client: AsyncClient, free_company_headers):
        response = await client.get("/api/v1/payroll/employees", headers=free_company_headers)
        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["code"] == "FEATURE_NOT_AVAILABLE"
        assert detail["details"]["feature"] == "payroll"
        assert detail["details"]["upgrade_to"] == "standard"

    @pytest.mark.asyncio
    async def test_cit_summary_is_company_only(self, client: AsyncClient, business_headers):
        response = await client.get("/api/v1/tax/cit/2026", headers=business_headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "ACCOUNT_TYPE_NOT_ALLOWED"

    @pytest.mark.asyncio
    async def test_pit_summary_for_business(self, client: AsyncClient, business_headers):
        response = await client.get("/api/v1/tax/pit/2026", headers=business_headers)
        assert response.status_code == 200
        assert _money(response.json()["annual_tax"]) == Decimal("0")


class TestPayrollEndpoints:
    """Test the payroll flow over HTTP."""

    @pytest.mark.asyncio
    async def test_payroll_flow(self, client: AsyncClient, company_headers):
        response = await client.post("/api/v1/payroll/employees", json={
            "employee_number": "EMP-001",
            "first_name": "Tunde",
            "last_name": "Bakare",
            "salary": "500000",
        }, headers=company_headers)
        assert response.status_code == 201
        employee_id = response.json()["id"]

        period = {"employee_id": employee_id, "month": 3, "year": 2026}
        response = await client.post("/api/v1/payroll/generate", json=period, headers=company_headers)
        assert response.status_code == 200
        payroll = response.json()
        assert _money(payroll["paye"]) == Decimal("58550")
        assert _money(payroll["net_salary"]) == Decimal("363950")
        assert payroll["status"] == "draft"

        response = await client.post("/api/v1/payroll/generate", json=period, headers=company_headers)
        assert response.json()["id"] == payroll["id"]

        response = await client.get("/api/v1/payroll/schedules/2026/3", headers=company_headers)
        assert response.status_code == 200
        detail = response.json()
        assert detail["schedule"]["status"] == "draft"
        assert detail["totals"]["employee_count"] == 1
        assert _money(detail["totals"]["total_paye"]) == Decimal("58550")

        response = await client.post(
            "/api/v1/payroll/schedules/2026/3/status", json={"status": "approved"}, headers=company_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        response = await client.post(
            "/api/v1/payroll/schedules/2026/3/status", json={"status": "draft"}, headers=company_headers,
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_STATUS_TRANSITION"

        response = await client.post(
            "/api/v1/payroll/schedules/2026/3/status", json={"status": "paid"}, headers=company_headers,
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_STATUS"

    @pytest.mark.asyncio
    async def test_generate_all(self, client: AsyncClient, company_headers, company_owner, make_employee):
        await make_employee(company_owner)
        await make_employee(company_owner)

        response = await client.post(
            "/api/v1/payroll/generate-all", json={"month": 1, "year": 2026}, headers=company_headers,
        )
        assert response.status_code == 200
        assert len(response.json()["generated"]) == 2
        assert response.json()["failures"] == []

        response = await client.get(
            "/api/v1/payroll/records", params={"month": 1, "year": 2026}, headers=company_headers,
        )
        assert len(response.json()) == 2

    @pytest.mark.asyncio
    async def test_invalid_year(self, client: AsyncClient, company_headers, employee):
        response = await client.post("/api/v1/payroll/generate", json={
            "employee_id": str(employee.id), "month": 1, "year": 2025,
        }, headers=company_headers)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_TAX_PERIOD"

    @pytest.mark.asyncio
    async def test_unknown_employee(self, client: AsyncClient, company_headers):
        response = await client.get(f"/api/v1/payroll/employees/{uuid.uuid4()}", headers=company_headers)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "EMPLOYEE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_remit_paye(self, client: AsyncClient, company_headers, employee):
        await client.post("/api/v1/payroll/generate", json={
            "employee_id": str(employee.id), "month": 1, "year": 2026,
        }, headers=company_headers)

        response = await client.post("/api/v1/payroll/remittances/2026/1/remit", json={
            "remittance_date": "2026-02-08",
            "reference": "FIRS-123",
        }, headers=company_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "remitted"

        response = await client.get("/api/v1/payroll/remittances", headers=company_headers)
        assert [r["status"] for r in response.json()] == ["remitted"]

    @pytest.mark.asyncio
    async def test_employee_wht_credit_lowers_annual_pit(self, client: AsyncClient, company_headers, employee):
        for month in (1, 2, 3):
            await client.post("/api/v1/payroll/generate", json={
                "employee_id": str(employee.id), "month": month, "year": 2026,
            }, headers=company_headers)

        response = await client.get("/api/v1/payroll/annual-pit/2026", headers=company_headers)
        assert response.status_code == 200
        before = response.json()["employees"][0]
        assert _money(before["annual_pit_after_wht"]) == Decimal("70125")

        response = await client.post(
            f"/api/v1/payroll/employees/{employee.id}/wht-credits",
            json={"tax_year": 2026, "amount": "15000"},
            headers=company_headers,
        )
        assert response.status_code == 201
        assert response.json()["taxpayer_id"] == str(employee.id)
        assert response.json()["status"] == "available"

        response = await client.get("/api/v1/payroll/annual-pit/2026", headers=company_headers)
        after = response.json()["employees"][0]
        assert _money(after["wht_credit_applied"]) == Decimal("15000")
        assert _money(after["annual_pit_after_wht"]) == Decimal("55125")

    @pytest.mark.asyncio
    async def test_employee_wht_credit_unknown_employee(self, client: AsyncClient, company_headers):
        response = await client.post(
            f"/api/v1/payroll/employees/{uuid.uuid4()}/wht-credits",
            json={"tax_year": 2026, "amount": "15000"},
            headers=company_headers,
        )
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "EMPLOYEE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_annual_pit_read_is_preview(self, client: AsyncClient, company_headers, employee):
        await client.post("/api/v1/payroll/generate", json={
            "employee_id": str(employee.id), "month": 1, "year": 2026,
        }, headers=company_headers)
        await client.post(
            f"/api/v1/payroll/employees/{employee.id}/wht-credits",
            json={"tax_year": 2026, "amount": "5000"},
            headers=company_headers,
        )
        balance_url = f"/api/v1/payroll/employees/{employee.id}/wht-credits/2026"

        for _ in range(2):
            response = await client.get("/api/v1/payroll/annual-pit/2026", headers=company_headers)
            assert response.json()["employees"][0]["credits_committed"] is False
        response = await client.get(balance_url, headers=company_headers)
        assert _money(response.json()["available_credits"]) == Decimal("5000")

        response = await client.post("/api/v1/payroll/annual-pit/2026/apply-credits", headers=company_headers)
        assert response.status_code == 200
        assert response.json()["employees"][0]["credits_committed"] is True
        response = await client.get(balance_url, headers=company_headers)
        assert _money(response.json()["available_credits"]) == Decimal("0")


class TestIncomeTaxEndpoints:
    """Test CIT summaries and WHT credit application over HTTP."""

    async def _company_books(self, client: AsyncClient, headers):
        await client.post("/api/v1/invoices", json={
            "customer_name": "Dangote Cement",
            "issue_date": "2026-03-10",
            "subtotal": "100000000",
            "status": "paid",
        }, headers=headers)
        response = await client.post("/api/v1/wht/records", json={
            "payer_name": "Shell Nigeria",
            "payment_type": "professional_services",
            "gross_amount": "10000000",
            "payment_date": "2026-04-01",
        }, headers=headers)
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_cit_summary_does_not_consume_credit(self, client: AsyncClient, company_headers):
        await self._company_books(client, company_headers)

        for _ in range(3):
            response = await client.get("/api/v1/tax/cit/2026", headers=company_headers)
            assert response.status_code == 200
            assert _money(response.json()["wht_credit_applied"]) == Decimal("500000")

        response = await client.get("/api/v1/wht/credits/2026", headers=company_headers)
        assert _money(response.json()["available_credits"]) == Decimal("500000")

    @pytest.mark.asyncio
    async def test_apply_cit_credits(self, client: AsyncClient, company_headers):
        await self._company_books(client, company_headers)

        response = await client.post("/api/v1/tax/cit/2026/apply-credits", headers=company_headers)
        assert response.status_code == 200
        assert response.json()["credits_committed"] is True
        assert _money(response.json()["wht_credit_applied"]) == Decimal("500000")

        response = await client.get("/api/v1/wht/credits/2026", headers=company_headers)
        assert _money(response.json()["available_credits"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_apply_pit_credits_is_business_only(self, client: AsyncClient, company_headers):
        response = await client.post("/api/v1/tax/pit/2026/apply-credits", headers=company_headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "ACCOUNT_TYPE_NOT_ALLOWED"

    @pytest.mark.asyncio
    async def test_file_and_remit_cit(self, client: AsyncClient, company_headers):
        await self._company_books(client, company_headers)

        response = await client.post("/api/v1/tax/cit/2026/remittance", headers=company_headers)
        assert response.status_code == 200
        filed = response.json()
        assert filed["tax_year"] == 2026
        assert filed["remittance_deadline"] == "2027-06-30"
        assert _money(filed["wht_credit_applied"]) == Decimal("500000")
        assert _money(filed["tax_payable"]) == _money(filed["tax_liability"]) - Decimal("500000")

        response = await client.post("/api/v1/tax/cit/2026/remittance/remit", json={
            "remittance_date": "2027-06-01",
            "reference": "CIT-2026",
        }, headers=company_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "remitted"

        response = await client.get("/api/v1/tax/cit-remittances", headers=company_headers)
        assert [(r["tax_year"], r["status"]) for r in response.json()] == [(2026, "remitted")]

    @pytest.mark.asyncio
    async def test_file_pit_remittance(self, client: AsyncClient, business_headers, company_headers):
        response = await client.post("/api/v1/tax/pit/2026/remittance", headers=business_headers)
        assert response.status_code == 200
        assert response.json()["remittance_deadline"] == "2027-03-31"
        assert _money(response.json()["tax_payable"]) == Decimal("0")

        response = await client.post("/api/v1/tax/pit/2026/remittance", headers=company_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_remit_unfiled_year(self, client: AsyncClient, company_headers):
        response = await client.post("/api/v1/tax/cit/2026/remittance/remit", json={
            "remittance_date": "2027-06-01",
        }, headers=company_headers)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"


class TestWHTRemittanceEndpoints:
    """Test monthly WHT remittances over HTTP."""

    @pytest.mark.asyncio
    async def test_file_and_remit(self, client: AsyncClient, company_headers):
        response = await client.post(
            "/api/v1/wht/remittances/2099/5", json={"total_wht": "250000"}, headers=company_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["remittance_deadline"] == "2099-06-21"

        response = await client.post("/api/v1/wht/remittances/2099/5/remit", json={
            "remittance_date": "2099-06-15",
        }, headers=company_headers)
        assert response.json()["status"] == "remitted"

        response = await client.post(
            "/api/v1/wht/remittances/2099/5", json={"total_wht": "1"}, headers=company_headers,
        )
        assert _money(response.json()["total_wht"]) == Decimal("250000")

        response = await client.get("/api/v1/wht/remittances", params={"year": 2099}, headers=company_headers)
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, client: AsyncClient, company_headers):
        response = await client.post(
            "/api/v1/wht/remittances/2099/5", json={"total_wht": "-5"}, headers=company_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_wht_plan(self, client: AsyncClient, free_company_user, db_session):
        company = Company(id=uuid.uuid4(), user_id=free_company_user.id, name="Free Co")
        db_session.add(company)
        await db_session.commit()

        response = await client.get(
            "/api/v1/wht/remittances", headers=_auth_headers(free_company_user, company.id),
        )
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "FEATURE_NOT_AVAILABLE"


class TestComplianceEndpoints:
    """Test the compliance status report."""

    @pytest.mark.asyncio
    async def test_company_status(self, client: AsyncClient, company_headers):
        response = await client.get(
            "/api/v1/compliance/status", params={"as_of": "2026-10-01"}, headers=company_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "compliant"
        assert body["score"] == 100
        assert body["account_type"] == "company"
        assert body["upcoming_deadlines"][0]["tax_type"] == "VAT"

    @pytest.mark.asyncio
    async def test_overdue_wht_and_missing_tin(self, client: AsyncClient, business_headers):
        await client.post("/api/v1/wht/remittances/2026/1", json={"total_wht": "5000"}, headers=business_headers)

        response = await client.get(
            "/api/v1/compliance/status", params={"as_of": "2026-10-01"}, headers=business_headers,
        )
        body = response.json()
        assert body["score"] == 55
        assert body["status"] == "at_risk"
        assert [a["type"] for a in body["alerts"]] == ["overdue_remittance", "missing_tin"]
        assert body["remittances"]["overdue"] == 1


class TestVATEndpoints:
    """Test VAT endpoints."""

    @pytest.mark.asyncio
    async def test_invoice_and_summary(self, client: AsyncClient, company_headers):
        response = await client.post("/api/v1/invoices", json={
            "customer_name": "Chevron Nigeria",
            "issue_date": "2026-03-10",
            "subtotal": "10000000",
            "status": "paid",
        }, headers=company_headers)
        assert response.status_code == 201
        assert _money(response.json()["vat_amount"]) == Decimal("750000")

        response = await client.get(
            "/api/v1/vat/summary", params={"month": 3, "year": 2026}, headers=company_headers,
        )
        assert response.status_code == 200
        summary = response.json()
        # ₦10M turnover is under the threshold but VAT was charged
        assert summary["is_vat_exempt"] is True
        assert summary["compliance_warning"] is True
        assert summary["status"] == "payable"
        assert summary["remittance_deadline"] == "2026-04-21"

    @pytest.mark.asyncio
    async def test_vat_remittance_requires_plan(self, client: AsyncClient, free_company_user, db_session):
        company = Company(id=uuid.uuid4(), user_id=free_company_user.id, name="Free Co")
        db_session.add(company)
        await db_session.commit()

        headers = _auth_headers(free_company_user, company.id)
        response = await client.get("/api/v1/vat/summary", params={"month": 1, "year": 2026}, headers=headers)
        assert response.status_code == 200

        response = await client.post("/api/v1/vat/remittances/2026/1", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "FEATURE_NOT_AVAILABLE"


class TestCalculatorEndpoints:
    """Test the stateless calculators."""

    @pytest.mark.asyncio
    async def test_calculate_paye(self, client: AsyncClient, company_headers):
        response = await client.post(
            "/api/v1/tax/calculate/paye", json={"gross_salary": "500000"}, headers=company_headers,
        )
        assert response.status_code == 200
        result = response.json()
        assert _money(result["taxable_income"]) == Decimal("422500")
        assert _money(result["paye"]) == Decimal("58550")

    @pytest.mark.asyncio
    async def test_calculate_vat_position(self, client: AsyncClient, company_headers):
        response = await client.post("/api/v1/tax/calculate/vat-position", json={
            "output_vat": "0", "input_vat": "5000", "annual_turnover": "20000000",
        }, headers=company_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "exempt"

    @pytest.mark.asyncio
    async def test_calculate_itf(self, client: AsyncClient, company_headers):
        response = await client.post("/api/v1/tax/calculate/itf", json={
            "total_gross_payroll": "1000000", "annual_turnover": "0", "headcount": 5,
        }, headers=company_headers)
        assert response.json()["is_liable"] is True
        assert _money(response.json()["itf"]) == Decimal("10000")

    @pytest.mark.asyncio
    async def test_deadlines(self, client: AsyncClient, company_headers):
        response = await client.get("/api/v1/tax/deadlines/2026/12", headers=company_headers)
        assert response.json()["paye"] == "2027-01-10"
        assert response.json()["vat"] == "2027-01-21"

    @pytest.mark.asyncio
    async def test_request_validation_error_format(self, client: AsyncClient, company_headers):
        response = await client.post(
            "/api/v1/tax/calculate/paye", json={"gross_salary": "-1"}, headers=company_headers,
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "VALIDATION_ERROR"
        assert detail["details"]["errors"]
