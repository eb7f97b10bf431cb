"""Shared enums and types used across the analyzer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ────────────────────────────────────────────────────────────────────


class FindingKind(str, enum.Enum):
    """Kind of quantum-risk pattern a finding belongs to."""

    ECRECOVER_USAGE = "ECRECOVER_USAGE"
    KEY_EXPOSURE = "KEY_EXPOSURE"


class NodeCategory(str, enum.Enum):
    """Syntax-tree node categories the pattern rules are keyed on."""

    CALL = "call"
    DECLARATION = "declaration"


class DeclarationScope(str, enum.Enum):
    """Where a declaration lives in the contract."""

    STATE = "state"
    LOCAL = "local"
    PARAMETER = "parameter"


# ── Source / tree values ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class SourceUnit:
    """Raw text of one contract file plus its identification."""

    path: Path
    text: str

    @property
    def basename(self) -> str:
        return self.path.name

    @property
    def line_count(self) -> int:
        return self.text.count("\n") + 1 if self.text else 0


@dataclass(frozen=True)
class Location:
    """Source position reported by the parser (1-based line, 0-based column)."""

    line: int
    column: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Finding:
    """One occurrence of a recognized risk pattern."""

    kind: FindingKind
    message: str
    name: str = ""
    location: Location | None = None


@dataclass
class MatchResult:
    """Ordered findings and per-kind counts from one traversal."""

    findings: list[Finding] = field(default_factory=list)
    counts: dict[FindingKind, int] = field(default_factory=dict)

    def add(self, finding: Finding) -> None:
        self.findings.append(finding)
        self.counts[finding.kind] = self.counts.get(finding.kind, 0) + 1

    def count(self, kind: FindingKind) -> int:
        return self.counts.get(kind, 0)

    @property
    def messages(self) -> list[str]:
        return [f.message for f in self.findings]


# ── Report schemas ───────────────────────────────────────────────────────────


class AnalysisReport(BaseModel):
    """Persisted analysis artifact.

    Field aliases are the on-disk contract read by collaborators; they must not
    change without a schema version bump.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    contract: str
    ecrecover_count: int = Field(default=0, ge=0, alias="ecrecoverCount")
    public_key_exposure_count: int = Field(default=0, ge=0, alias="publicKeyExposureCount")
    risk_score: int = Field(default=0, ge=0, le=100, alias="riskScore")
    warnings: list[str] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class ReportDigest(BaseModel):
    """Per-report line of the aggregate risk summary."""

    model_config = ConfigDict(populate_by_name=True)

    contract: str
    risk_score: int = Field(alias="riskScore")
    ecrecover_count: int = Field(alias="ecrecoverCount")
    public_key_exposure_count: int = Field(alias="publicKeyExposureCount")


class RiskSummary(BaseModel):
    """Aggregate over every report in the output directory."""

    model_config = ConfigDict(populate_by_name=True)

    total_reports: int = Field(default=0, alias="totalReports")
    avg_risk: float = Field(default=0.0, alias="avgRisk")
    reports: list[ReportDigest] = Field(default_factory=list)
