"""Tests for the HTTP facade (health, scan, report lookup, risk summary)."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from pqscan import __version__
from pqscan.api.main import create_app
from pqscan.core.config import Settings
from pqscan.tests.samples import CLEAN_SOURCE, GARBAGE_SOURCE, WALLET_SOURCE


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx AsyncClient bound to the app over ASGI."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


class TestHealthEndpoint:
    def test_root(self, client: TestClient):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json() == {"status": "running", "service": "pqscan"}

    def test_health_check(self, client: TestClient):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert resp.json()["version"] == __version__

    def test_cors_allows_dashboard_origin(self, client: TestClient):
        resp = client.get("/health", headers={"Origin": "http://localhost:3000"})
        assert resp.headers["access-control-allow-origin"] == "*"


class TestScanRoute:
    def test_scan_contract(self, client: TestClient, write_contract, report_dir: Path):
        write_contract(WALLET_SOURCE, "Wallet.sol")

        resp = client.get("/scan", params={"file": "Wallet.sol"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["contract"] == "Wallet.sol"
        assert body["riskScore"] == 60
        assert body["ecrecoverCount"] == 1
        assert body["publicKeyExposureCount"] == 1
        assert len(body["warnings"]) == 2
        assert (report_dir / body["reportFile"]).exists()

    def test_missing_file_param(self, client: TestClient, report_dir: Path):
        resp = client.get("/scan")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "USAGE_ERROR"
        assert not report_dir.exists()

    def test_nonexistent_contract(self, client: TestClient):
        resp = client.get("/scan", params={"file": "Ghost.sol"})
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_path_outside_root_rejected(self, client: TestClient, tmp_path: Path):
        (tmp_path.parent / "Outside.sol").write_text(WALLET_SOURCE, encoding="utf-8")
        resp = client.get("/scan", params={"file": "../Outside.sol"})
        assert resp.status_code == 404
        assert "outside the contracts root" in resp.json()["error"]["message"]

    def test_unparseable_contract(self, client: TestClient, write_contract, report_dir: Path):
        write_contract(GARBAGE_SOURCE, "Garbage.sol")
        resp = client.get("/scan", params={"file": "Garbage.sol"})
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "PARSE_ERROR"
        assert error["details"]["contract"] == "Garbage.sol"
        assert not report_dir.exists()


class TestReportRoutes:
    def test_latest_without_reports(self, client: TestClient):
        resp = client.get("/reports/latest")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_latest_after_scan(self, client: TestClient, write_contract):
        write_contract(CLEAN_SOURCE, "Counter.sol")
        write_contract(WALLET_SOURCE, "Wallet.sol")
        client.get("/scan", params={"file": "Counter.sol"})
        client.get("/scan", params={"file": "Wallet.sol"})

        resp = client.get("/reports/latest")

        assert resp.status_code == 200
        assert resp.json() == {
            "contract": "Wallet.sol",
            "ecrecoverCount": 1,
            "publicKeyExposureCount": 1,
            "riskScore": 60,
            "warnings": resp.json()["warnings"],
        }

    def test_latest_with_only_corrupt_report(self, client: TestClient, report_dir: Path):
        report_dir.mkdir(parents=True)
        (report_dir / "0000000000001-analysis.json").write_text("{broken")

        resp = client.get("/reports/latest")

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_empty_summary(self, client: TestClient):
        resp = client.get("/risk-summary")
        assert resp.status_code == 200
        assert resp.json() == {"totalReports": 0, "avgRisk": 0, "reports": []}

    def test_summary_after_scans(self, client: TestClient, write_contract):
        write_contract(CLEAN_SOURCE, "Counter.sol")
        write_contract(WALLET_SOURCE, "Wallet.sol")
        client.get("/scan", params={"file": "Counter.sol"})
        client.get("/scan", params={"file": "Wallet.sol"})

        body = client.get("/risk-summary").json()

        assert body["totalReports"] == 2
        assert body["avgRisk"] == 30
        assert [r["contract"] for r in body["reports"]] == ["Counter.sol", "Wallet.sol"]


class TestAsyncClient:
    @pytest.mark.asyncio
    async def test_health_over_asgi(self, async_client: AsyncClient):
        resp = await async_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["service"] == "pqscan"

    @pytest.mark.asyncio
    async def test_concurrent_scans(self, async_client: AsyncClient, write_contract, report_dir: Path):
        write_contract(WALLET_SOURCE, "Wallet.sol")

        responses = await asyncio.gather(
            *(async_client.get("/scan", params={"file": "Wallet.sol"}) for _ in range(8))
        )

        assert [r.status_code for r in responses] == [200] * 8
        assert {r.json()["riskScore"] for r in responses} == {60}
        files = {r.json()["reportFile"] for r in responses}
        assert len(files) == 8
        assert sorted(p.name for p in report_dir.iterdir()) == sorted(files)
