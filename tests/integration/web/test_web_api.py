"""
HTTP API 테스트

TestClient로 라우트 / 상태 코드 / 예외 매핑 확인.
"""

import pytest
from fastapi.testclient import TestClient

from tests.catalog_data import GULA, KOPI, OUTLET, WAREHOUSE

pytestmark = pytest.mark.integration


def post_batch(client: TestClient, principal: dict[str, str], body: dict):
    return client.post("/api/movements/batches", json=body, headers=principal)


def initial_stock(client: TestClient, principal: dict[str, str], *lines: tuple[int, str]) -> None:
    response = post_batch(
        client,
        principal,
        {
            "movement_type": "initial_stock",
            "lines": [
                {"item_id": item_id, "location_id": WAREHOUSE.id, "quantity_change": quantity}
                for item_id, quantity in lines
            ],
        },
    )
    assert response.status_code == 201, response.text


class TestHealth:
    """GET /health"""

    def test_ok(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["database"] == "ok"


class TestMovementsApi:
    """이동 API"""

    def test_principal_required(self, client: TestClient) -> None:
        response = client.post(
            "/api/movements/batches",
            json={"movement_type": "initial_stock", "lines": [{"item_id": 1, "location_id": 1, "quantity_change": "1"}]},
        )

        assert response.status_code == 401

    def test_distribution_batch(self, client: TestClient, principal: dict[str, str]) -> None:
        initial_stock(client, principal, (KOPI.id, "20"))

        response = post_batch(
            client,
            principal,
            {
                "movement_type": "distribution",
                "operation_date": "2026-10-19",
                "counterpart": OUTLET.name,
                "allocate_document": True,
                "lines": [{"item_id": KOPI.id, "location_id": WAREHOUSE.id, "quantity_change": "-12"}],
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["document_number"] == "SJ-OUKEM-191026-001"
        assert data["movements"][0]["quantity_change"] == "-12"
        assert data["movements"][0]["created_by"] == "user-1"

        stock = client.get(f"/api/stock/{KOPI.id}").json()
        assert stock["quantity"] == "8"

    def test_zero_quantity_rejected(self, client: TestClient, principal: dict[str, str]) -> None:
        response = post_batch(
            client,
            principal,
            {
                "movement_type": "manual_adjustment",
                "lines": [{"item_id": KOPI.id, "location_id": WAREHOUSE.id, "quantity_change": "0"}],
            },
        )

        assert response.status_code == 400

    def test_unknown_item_404(self, client: TestClient, principal: dict[str, str]) -> None:
        response = post_batch(
            client,
            principal,
            {
                "movement_type": "manual_adjustment",
                "lines": [{"item_id": 999, "location_id": WAREHOUSE.id, "quantity_change": "1"}],
            },
        )

        assert response.status_code == 404
        assert response.json()["error"] == "ItemNotFound"

    def test_unknown_location_422(self, client: TestClient, principal: dict[str, str]) -> None:
        response = post_batch(
            client,
            principal,
            {
                "movement_type": "manual_adjustment",
                "lines": [
                    {"item_id": KOPI.id, "location_id": WAREHOUSE.id, "quantity_change": "1"},
                    {"item_id": KOPI.id, "location_id": 77, "quantity_change": "1"},
                ],
            },
        )

        assert response.status_code == 422
        assert response.json()["error"] == "ConstraintViolation"
        assert client.get("/api/movements").json()["total"] == 0

    def test_list_with_filters(self, client: TestClient, principal: dict[str, str]) -> None:
        initial_stock(client, principal, (KOPI.id, "5"), (GULA.id, "3"))

        response = client.get("/api/movements", params={"item_id": GULA.id, "movement_type": "initial_stock"})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["movements"][0]["item_id"] == GULA.id


class TestStockApi:
    """재고 API"""

    def test_low_and_summary(self, client: TestClient, principal: dict[str, str]) -> None:
        initial_stock(client, principal, (KOPI.id, "20"), (GULA.id, "5"))

        low = client.get("/api/stock/low").json()
        summary = client.get("/api/stock/summary").json()
        health = client.get(f"/api/stock/{GULA.id}/health").json()

        assert [row["item_id"] for row in low] == [3, GULA.id]
        assert summary["low_stock_count"] == 2
        assert health["health"] == "menipis"

    def test_health_unknown_item(self, client: TestClient) -> None:
        assert client.get("/api/stock/999/health").status_code == 404


class TestDocumentsApi:
    """문서 번호 API"""

    def test_preview_then_allocate(self, client: TestClient, principal: dict[str, str]) -> None:
        params = {"prefix": "SJ", "label": "Artirasa Joglo", "operation_date": "2026-10-19"}

        preview = client.get("/api/documents/preview", params=params).json()
        allocated = client.post("/api/documents/next", json=params, headers=principal).json()
        after = client.get("/api/documents/preview", params=params).json()

        assert preview["document_number"] == allocated["document_number"] == "SJ-ARJOG-191026-001"
        assert preview["reserved"] is False
        assert allocated["reserved"] is True
        assert allocated["scope_code"] == "ARJOG"
        assert after["sequence"] == 2

    def test_invalid_prefix(self, client: TestClient, principal: dict[str, str]) -> None:
        response = client.post("/api/documents/next", json={"prefix": "sj"}, headers=principal)

        assert response.status_code == 422


class TestOpnameApi:
    """실사 API"""

    def test_full_cycle(self, client: TestClient, principal: dict[str, str]) -> None:
        initial_stock(client, principal, (KOPI.id, "10"))

        created = client.post("/api/opname/sessions", json={"item_ids": [KOPI.id]}, headers=principal)
        assert created.status_code == 201
        session_id = created.json()["session"]["id"]
        assert created.json()["lines"][0]["system_stock_at_start"] == "10"

        counted = client.put(
            f"/api/opname/sessions/{session_id}/counts",
            json={"item_id": KOPI.id, "physical_count": "7"},
            headers=principal,
        )
        assert counted.status_code == 200
        assert counted.json()["variance"] == "-3"

        approved = client.post(f"/api/opname/sessions/{session_id}/approve", headers=principal)
        assert approved.status_code == 200
        assert approved.json()["adjustments"][0]["movement_type"] == "opname_adjustment"

        again = client.post(f"/api/opname/sessions/{session_id}/approve", headers=principal)
        assert again.status_code == 409
        assert again.json()["error"] == "SessionNotPending"

        assert client.get(f"/api/stock/{KOPI.id}").json()["quantity"] == "7"
        report = client.get("/api/opname/report").json()
        assert report[0]["total_variance"] == "-3"

    def test_missing_session(self, client: TestClient) -> None:
        assert client.get("/api/opname/sessions/404").status_code == 404

    def test_negative_count_rejected(self, client: TestClient, principal: dict[str, str]) -> None:
        session_id = client.post("/api/opname/sessions", json={}, headers=principal).json()["session"]["id"]

        response = client.put(
            f"/api/opname/sessions/{session_id}/counts",
            json={"item_id": KOPI.id, "physical_count": "-1"},
            headers=principal,
        )

        assert response.status_code == 422


class TestReportsApi:
    """리포트 API"""

    def test_classified(self, client: TestClient, principal: dict[str, str]) -> None:
        post_batch(
            client,
            principal,
            {
                "movement_type": "purchase",
                "counterpart": "PT Sumber",
                "lines": [{"item_id": KOPI.id, "location_id": WAREHOUSE.id, "quantity_change": "10"}],
            },
        )
        post_batch(
            client,
            principal,
            {
                "movement_type": "distribution",
                "counterpart": OUTLET.name,
                "lines": [{"item_id": GULA.id, "location_id": WAREHOUSE.id, "quantity_change": "-2"}],
            },
        )

        data = client.get("/api/reports/classified").json()

        assert data["count"] == 2
        assert data["expense"] == "10000"
        # GULA 판매가 없음: 500 × 1.3 × 2
        assert data["income"] == "1300.0"
        assert [e["source"] for e in data["entries"]] == ["Barang Masuk", "Distribusi"]
