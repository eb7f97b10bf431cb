"""Report persistence in a flat output directory.

Reports are named ``<token><suffix>`` where ``token`` is a 13-digit, zero-padded
epoch-millisecond value that strictly increases within a process. Sorting the
file names therefore yields chronological order and the last entry is the
latest report.

Writes are all-or-nothing: the JSON is written to a hidden temporary file in
the same directory and hard-linked into place, which fails instead of
overwriting when another process already claimed the name.

Ordering is exact within one process only. A burst of writes bumps the token
ahead of the wall clock, so a report written later by a different process in
that window can sort before an earlier one from the bursting process.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import time
from pathlib import Path

from pydantic import ValidationError

from pqscan.core.errors import WriteError
from pqscan.core.types import AnalysisReport, ReportDigest, RiskSummary

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = "-analysis.json"
TOKEN_WIDTH = 13
_MAX_CLAIM_ATTEMPTS = 1000

_token_lock = threading.Lock()
_last_token = 0


def next_token() -> int:
    """Return an epoch-millisecond token greater than any previously issued."""
    global _last_token
    with _token_lock:
        token = max(time.time_ns() // 1_000_000, _last_token + 1)
        _last_token = token
        return token


def report_filename(token: int, suffix: str = DEFAULT_SUFFIX) -> str:
    return f"{token:0{TOKEN_WIDTH}d}{suffix}"


class ReportStore:
    """Write, list and aggregate analysis reports in one directory."""

    def __init__(self, directory: str | Path, suffix: str = DEFAULT_SUFFIX) -> None:
        self.directory = Path(directory)
        self.suffix = suffix

    # ── Writing ──────────────────────────────────────────────────────

    def write(self, report: AnalysisReport) -> Path:
        """Persist a report under a fresh name and return its path.

        Raises:
            WriteError: the directory cannot be created or written to
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(
                f"cannot create report directory {self.directory}: {exc.strerror or exc}",
                directory=str(self.directory),
            ) from exc

        payload = report.to_json()
        tmp_path: Path | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".", suffix=".tmp", dir=self.directory)
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            target = self._claim(tmp_path)
        except OSError as exc:
            raise WriteError(
                f"cannot write report to {self.directory}: {exc.strerror or exc}",
                directory=str(self.directory),
            ) from exc
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

        logger.info(
            "Report saved to %s", target,
            extra={"contract": report.contract, "report_path": str(target)},
        )
        return target

    def _claim(self, tmp_path: Path) -> Path:
        for _ in range(_MAX_CLAIM_ATTEMPTS):
            target = self.directory / report_filename(next_token(), self.suffix)
            try:
                os.link(tmp_path, target)
            except FileExistsError:
                logger.debug("Report name %s already taken, retrying", target.name)
                continue
            return target
        raise WriteError(
            f"could not claim a unique report name in {self.directory}",
            directory=str(self.directory),
        )

    # ── Reading ──────────────────────────────────────────────────────

    def list_reports(self) -> list[Path]:
        """Report files in chronological order (oldest first)."""
        if not self.directory.is_dir():
            return []
        return sorted(
            (p for p in self.directory.iterdir() if p.is_file() and p.name.endswith(self.suffix)),
            key=lambda p: p.name,
        )

    def load(self, path: str | Path) -> AnalysisReport:
        return AnalysisReport.model_validate_json(Path(path).read_text(encoding="utf-8"))

    def _load_readable(self, path: Path) -> AnalysisReport | None:
        try:
            return self.load(path)
        except (OSError, ValidationError) as exc:
            logger.warning("Skipping unreadable report %s: %s", path.name, exc)
            return None

    def latest_path(self) -> Path | None:
        reports = self.list_reports()
        return reports[-1] if reports else None

    def latest(self) -> AnalysisReport | None:
        """Most recent readable report, or None when the directory holds none.

        Corrupt or truncated files are skipped in favour of the next older one.
        """
        for path in reversed(self.list_reports()):
            report = self._load_readable(path)
            if report is not None:
                return report
        return None

    def summary(self) -> RiskSummary:
        """Aggregate risk over every readable report in the directory."""
        digests: list[ReportDigest] = []
        for path in self.list_reports():
            report = self._load_readable(path)
            if report is None:
                continue
            digests.append(ReportDigest(
                contract=report.contract,
                risk_score=report.risk_score,
                ecrecover_count=report.ecrecover_count,
                public_key_exposure_count=report.public_key_exposure_count,
            ))

        if not digests:
            return RiskSummary()

        avg = sum(d.risk_score for d in digests) / len(digests)
        return RiskSummary(total_reports=len(digests), avg_risk=avg, reports=digests)
