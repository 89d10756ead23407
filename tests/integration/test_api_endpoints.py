"""API endpoint integration tests.

Tests the FastAPI endpoints against the in-memory test database.
"""

import csv
import io
from uuid import uuid4

import pytest
from httpx import AsyncClient

from staffing_payroll.services.payroll_run_service import compute_snapshot_hash

pytestmark = pytest.mark.asyncio

PREVIEW_PAYLOAD = {
    "base_pay_rate": 25.00,
    "base_bill_rate": 45.00,
    "ot_bill_multiplier": 1.5,
    "sd_pay_delta_rate": 3.00,
    "sd_bill_delta_rate": 5.00,
    "reg_hours": 40,
    "ot_hours": 8,
    "dt_hours": 4,
    "reg_sd_hours": 16,
    "ot_sd_hours": 4,
    "dt_sd_hours": 2,
}

RATE_CARD = {
    "order_id": "ORD-1",
    "base_pay_rate": 25.00,
    "base_bill_rate": 45.00,
    "ot_bill_multiplier": 1.5,
    "sd_pay_delta_rate": 3.00,
    "sd_bill_delta_rate": 5.00,
}


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should return 200."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["payroll_timezone"] == "America/Chicago"
        assert data["engine_version"]
        assert "timestamp" in data

    async def test_readiness_check(self, client: AsyncClient):
        """Readiness endpoint should return 200."""
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_liveness_check(self, client: AsyncClient):
        """Liveness endpoint should return 200."""
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestMoneyPreview:
    """Test POST /api/v1/money/preview."""

    async def test_preview(self, client: AsyncClient):
        """Reference scenario rows and totals."""
        response = await client.post("/api/v1/money/preview", json=PREVIEW_PAYLOAD)
        assert response.status_code == 200

        data = response.json()
        assert [row["bucket"] for row in data["rows"]] == [
            "REG", "OT", "DT", "REG (SD)", "OT (SD)", "DT (SD)",
        ]
        assert [row["pay_amount"] for row in data["rows"]] == [
            1000.0, 300.0, 200.0, 448.0, 168.0, 112.0,
        ]
        assert [row["bill_amount"] for row in data["rows"]] == [
            1800.0, 540.0, 360.0, 800.0, 300.0, 200.0,
        ]
        assert data["total_hours"] == 74
        assert data["total_pay"] == 2228.0
        assert data["total_bill"] == 4000.0
        assert data["notice"] == "PREVIEW ONLY - NOT INVOICE - NOT SNAPSHOT"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("reg_hours", -1),
            ("base_pay_rate", -0.01),
            ("ot_bill_multiplier", 0),
            ("base_bill_rate", "inf"),
            ("dt_hours", "lots"),
            ("base_pay_rate", 1e307),
            ("reg_hours", 1e154),
            ("ot_bill_multiplier", 1e300),
        ],
    )
    async def test_rejects_invalid_values(self, client: AsyncClient, field, value):
        """Bad numbers are rejected before any calculation."""
        response = await client.post(
            "/api/v1/money/preview", json={**PREVIEW_PAYLOAD, field: value}
        )
        assert response.status_code == 422

    async def test_largest_values_stay_finite(self, client: AsyncClient):
        """Inputs at the upper bounds still produce finite amounts."""
        payload = {
            "base_pay_rate": 1_000_000,
            "base_bill_rate": 1_000_000,
            "ot_bill_multiplier": 100,
            "sd_pay_delta_rate": 1_000_000,
            "sd_bill_delta_rate": 1_000_000,
            "reg_hours": 10_000,
            "ot_hours": 10_000,
            "dt_hours": 10_000,
            "reg_sd_hours": 10_000,
            "ot_sd_hours": 10_000,
            "dt_sd_hours": 10_000,
        }
        response = await client.post("/api/v1/money/preview", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["rows"][2]["bill_multiplier"] == 133.33
        assert data["total_hours"] == 60_000
        assert data["total_pay"] > 0
        assert data["total_bill"] > data["total_pay"]

    async def test_rejects_missing_field(self, client: AsyncClient):
        """Every input is required; nothing defaults to zero."""
        payload = dict(PREVIEW_PAYLOAD)
        del payload["dt_sd_hours"]

        response = await client.post("/api/v1/money/preview", json=payload)
        assert response.status_code == 422

    async def test_rejects_unknown_field(self, client: AsyncClient):
        """A supplied DT billing multiplier is not accepted."""
        response = await client.post(
            "/api/v1/money/preview",
            json={**PREVIEW_PAYLOAD, "dt_bill_multiplier": 3.0},
        )
        assert response.status_code == 422


class TestWeeklyRollup:
    """Test the read-only weekly rollup endpoints."""

    async def test_rollup(self, client: AsyncClient, seeded_hours):
        response = await client.get(
            "/api/v1/payroll/weekly-rollup", params={"week_end": "2026-01-10"}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["week_start"] == "2026-01-04"
        assert data["week_end"] == "2026-01-10"
        assert data["timezone"] == "America/Chicago"
        assert data["include_reference"] is False
        assert [(g["worker_id"], g["order_id"]) for g in data["groups"]] == [
            ("W-1", "ORD-1"),
            ("W-1", "ORD-LEGACY"),
            ("W-2", "ORD-2"),
        ]
        assert data["groups"][0]["period_start"].startswith("2026-01-04T06:00:00")

    async def test_rollup_with_reference(self, client: AsyncClient, seeded_hours):
        response = await client.get(
            "/api/v1/payroll/weekly-rollup",
            params={"week_end": "2026-01-10", "include_reference": "true"},
        )
        assert response.status_code == 200

        totals = response.json()["groups"][0]["totals"]
        reg = next(t for t in totals if t["earning_code"] == "REG")
        assert reg["quantity"] == 139.0

    @pytest.mark.parametrize("week_end", ["2026-1-10", "2026-02-30", "soon"])
    async def test_invalid_week_end(self, client: AsyncClient, week_end):
        response = await client.get(
            "/api/v1/payroll/weekly-rollup", params={"week_end": week_end}
        )
        assert response.status_code == 400
        assert "Invalid week end" in response.json()["detail"]

    async def test_missing_week_end(self, client: AsyncClient):
        response = await client.get("/api/v1/payroll/weekly-rollup")
        assert response.status_code == 422

    async def test_preview(self, client: AsyncClient, seeded_hours):
        response = await client.get(
            "/api/v1/payroll/weekly-rollup/preview", params={"week_end": "2026-01-10"}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["total_hours"] == 86.5
        assert data["groups"][0]["hour_buckets"]["ot_hours"] == 8.0
        assert data["groups"][2]["hour_buckets"]["dt_sd_hours"] == 2.0
        assert data["deductions_preview"] is None
        assert data["deduction_elections"] is None

    async def test_preview_with_deductions(
        self, client: AsyncClient, seeded_hours, seeded_elections
    ):
        response = await client.get(
            "/api/v1/payroll/weekly-rollup/preview",
            params={"week_end": "2026-01-10", "include_deductions": "true"},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["include_deductions"] is True
        assert len(data["deduction_elections"]) == 3
        preview = data["deductions_preview"]
        assert preview["total_cents"] == 2250
        w1 = preview["by_employee"][0]
        assert [d["code"] for d in w1["deductions"]] == ["401K", "ETV"]
        assert w1["deductions"][0]["warning"] == "PERCENT_BASIS_NOT_CALCULATED"
        assert w1["deductions"][1]["label"] == "Empower The Veterans Foundation"

    async def test_export(self, client: AsyncClient, seeded_hours):
        response = await client.get(
            "/api/v1/payroll/weekly-rollup/export", params={"week_end": "2026-01-10"}
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert (
            'filename="payroll_weekly_rollup_2026-01-10.csv"'
            in response.headers["content-disposition"]
        )

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == [
            "week_start",
            "week_end",
            "worker_id",
            "order_id",
            "period_start",
            "period_end",
            "earning_code",
            "unit",
            "quantity",
        ]
        assert len(rows) == 9
        assert rows[1][:4] == ["2026-01-04", "2026-01-10", "W-1", "ORD-1"]
        assert rows[1][6:] == ["DT", "HOURS", "4.0"]

    async def test_export_empty_week(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/payroll/weekly-rollup/export", params={"week_end": "2026-01-10"}
        )
        assert response.status_code == 200
        assert response.text.count("\n") == 1


class TestPayrollRuns:
    """Test finalizing and reading payroll runs."""

    async def test_finalize_and_get(self, client: AsyncClient, seeded_hours):
        response = await client.post(
            "/api/v1/payroll-runs/finalize",
            json={
                "week_end": "2026-01-10",
                "rate_cards": [RATE_CARD],
                "finalized_by_user_id": "payroll-admin",
            },
        )
        assert response.status_code == 201

        created = response.json()
        assert created["week_start"] == "2026-01-04"
        assert created["week_end"] == "2026-01-10"
        assert len(created["snapshot_hash"]) == 64

        response = await client.get(f"/api/v1/payroll-runs/{created['payroll_run_id']}")
        assert response.status_code == 200

        run = response.json()
        assert run["snapshot_hash"] == created["snapshot_hash"]
        assert run["finalized_by_user_id"] == "payroll-admin"
        assert run["include_deductions"] is False
        assert compute_snapshot_hash(run["snapshot_json"]) == run["snapshot_hash"]

        previews = run["snapshot_json"]["money_previews"]
        assert previews[0]["preview"]["total_pay"] == 1500.0
        assert previews[1]["preview"] is None

    async def test_finalize_with_deductions(
        self, client: AsyncClient, seeded_hours, seeded_elections
    ):
        response = await client.post(
            "/api/v1/payroll-runs/finalize",
            json={"week_end": "2026-01-10", "include_deductions": True},
        )
        assert response.status_code == 201

        run_id = response.json()["payroll_run_id"]
        run = (await client.get(f"/api/v1/payroll-runs/{run_id}")).json()
        assert run["snapshot_json"]["deductions_preview"]["total_cents"] == 2250

    async def test_finalize_invalid_week_end(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payroll-runs/finalize", json={"week_end": "01/10/2026"}
        )
        assert response.status_code == 400

    async def test_finalize_rejects_bad_rate_card(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payroll-runs/finalize",
            json={
                "week_end": "2026-01-10",
                "rate_cards": [{**RATE_CARD, "base_pay_rate": -25.0}],
            },
        )
        assert response.status_code == 422

    async def test_get_missing_run(self, client: AsyncClient):
        response = await client.get(f"/api/v1/payroll-runs/{uuid4()}")
        assert response.status_code == 404

    async def test_get_invalid_run_id(self, client: AsyncClient):
        response = await client.get("/api/v1/payroll-runs/not-a-uuid")
        assert response.status_code == 422
