"""Quantum-risk analyzer — orchestrates load, parse, match, score and write.

Single-pass pipeline, one input file per invocation:
  1. Load the contract source (NotFoundError on a bad path)
  2. Tolerant parse into a SyntaxTree (ParseError when nothing is recoverable)
  3. Walk the tree once, applying the pattern rule table
  4. Score the per-kind counts and build the immutable report
  5. Persist the report under a unique, sortable name (WriteError on failure)

A failed run never leaves a report behind.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from pqscan.analyzer.matcher import PatternMatcher
from pqscan.analyzer.rules import default_rules
from pqscan.analyzer.scorer import RiskWeights, build_report
from pqscan.analyzer.source_loader import SolidityParser, load_source
from pqscan.analyzer.syntax_tree import ParseDiagnostic
from pqscan.core.config import Settings, get_settings
from pqscan.core.errors import AnalyzerError
from pqscan.core.types import AnalysisReport, Finding, SourceUnit
from pqscan.reports.store import ReportStore

logger = logging.getLogger(__name__)


@dataclass
class AnalysisRun:
    """Outcome of one completed invocation."""

    report: AnalysisReport
    report_path: Path | None = None
    findings: list[Finding] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    duration_ms: int = 0


class QuantumRiskAnalyzer:
    """Scan one Solidity file for quantum-risk patterns and persist a report."""

    def __init__(
        self,
        settings: Settings | None = None,
        matcher: PatternMatcher | None = None,
        weights: RiskWeights | None = None,
        store: ReportStore | None = None,
        parser: SolidityParser | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._matcher = matcher or PatternMatcher(default_rules(self._settings.byte_type_set()))
        self._weights = weights or self._settings.risk_weights()
        self._store = store or ReportStore(self._settings.report_dir, self._settings.report_suffix)
        self._parser = parser or SolidityParser()

    @property
    def store(self) -> ReportStore:
        return self._store

    def analyze_source(self, unit: SourceUnit) -> AnalysisRun:
        """Parse, match and score an already-loaded source unit. Writes nothing."""
        tree = self._parser.parse(unit)
        match = self._matcher.match(tree)
        report = build_report(unit.basename, match, self._weights)
        return AnalysisRun(report=report, findings=match.findings, diagnostics=tree.diagnostics)

    def analyze(self, path: str | Path | None) -> AnalysisRun:
        """Load and analyze a contract file without persisting the report."""
        return self.analyze_source(load_source(path))

    def run(self, path: str | Path | None) -> AnalysisRun:
        """Full pipeline: analyze the file and write exactly one report.

        Raises:
            UsageError, NotFoundError, ParseError: the run failed, nothing written
            WriteError: analysis succeeded but the report could not be saved
        """
        start = time.monotonic()
        logger.info("Analyzing %s", path)
        try:
            result = self.analyze(path)
            result.report_path = self._store.write(result.report)
        except AnalyzerError as exc:
            logger.error(
                "Analysis of %s failed: %s", path, exc.message,
                extra={"error_code": exc.code.value},
            )
            raise

        result.duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Analysis complete: risk score %d (%d ecrecover, %d key exposure)",
            result.report.risk_score,
            result.report.ecrecover_count,
            result.report.public_key_exposure_count,
            extra={
                "contract": result.report.contract,
                "report_path": str(result.report_path),
                "duration_ms": result.duration_ms,
            },
        )
        return result


def analyze_contract(path: str | Path, settings: Settings | None = None) -> AnalysisRun:
    """Convenience function: run the full pipeline with default components."""
    return QuantumRiskAnalyzer(settings=settings).run(path)
