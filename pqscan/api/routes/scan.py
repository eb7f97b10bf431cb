"""Scan and report endpoints — thin HTTP facade over the analyzer."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from pqscan.analyzer.analyzer import QuantumRiskAnalyzer
from pqscan.core.config import Settings
from pqscan.core.errors import NotFoundError, UsageError
from pqscan.core.types import AnalysisReport, RiskSummary
from pqscan.reports.store import ReportStore

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Schemas ──────────────────────────────────────────────────────────────────


class ScanResponse(BaseModel):
    """Subset of the saved report re-served to the dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    contract: str
    risk_score: int = Field(alias="riskScore")
    ecrecover_count: int = Field(alias="ecrecoverCount")
    public_key_exposure_count: int = Field(alias="publicKeyExposureCount")
    warnings: list[str] = []
    report_file: str = Field(default="", alias="reportFile")


# ── Dependencies ─────────────────────────────────────────────────────────────


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(settings: Settings = Depends(get_app_settings)) -> ReportStore:
    return ReportStore(settings.report_dir, settings.report_suffix)


def _resolve_contract(settings: Settings, file: str) -> Path:
    root = Path(settings.contracts_root).resolve()
    candidate = (root / file).resolve()
    if not candidate.is_relative_to(root):
        raise NotFoundError(file, reason="outside the contracts root")
    return candidate


# ── Routes ───────────────────────────────────────────────────────────────────


@router.get("/scan", response_model_by_alias=True)
def scan_contract(
    file: str | None = Query(None, description="Contract path relative to the contracts root"),
    settings: Settings = Depends(get_app_settings),
) -> ScanResponse:
    """Run the analyzer on a contract file and return the saved report."""
    if not file:
        raise UsageError("Missing 'file' query parameter")

    path = _resolve_contract(settings, file)
    result = QuantumRiskAnalyzer(settings=settings).run(path)
    report = result.report

    return ScanResponse(
        contract=report.contract,
        risk_score=report.risk_score,
        ecrecover_count=report.ecrecover_count,
        public_key_exposure_count=report.public_key_exposure_count,
        warnings=report.warnings,
        report_file=result.report_path.name if result.report_path else "",
    )


@router.get("/reports/latest", response_model_by_alias=True)
def latest_report(store: ReportStore = Depends(get_store)) -> AnalysisReport:
    """Most recent saved report."""
    report = store.latest()
    if report is None:
        raise NotFoundError(str(store.directory), reason="no analysis reports found")
    return report


@router.get("/risk-summary", response_model_by_alias=True)
def risk_summary(store: ReportStore = Depends(get_store)) -> RiskSummary:
    """Aggregate risk over every saved report."""
    return store.summary()
