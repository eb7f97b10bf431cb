"""Risk scoring — weighted sum of finding counts with a hard ceiling."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, Field, field_validator

from pqscan.core.types import AnalysisReport, FindingKind, MatchResult

DEFAULT_WEIGHT_TABLE: dict[FindingKind, int] = {
    FindingKind.ECRECOVER_USAGE: 50,
    FindingKind.KEY_EXPOSURE: 10,
}

DEFAULT_CEILING = 100


class RiskWeights(BaseModel):
    """Per-kind weights and the score ceiling."""

    weights: dict[FindingKind, int] = Field(default_factory=lambda: dict(DEFAULT_WEIGHT_TABLE))
    ceiling: int = Field(default=DEFAULT_CEILING, ge=0, le=100)

    @field_validator("weights")
    @classmethod
    def _non_negative(cls, v: dict[FindingKind, int]) -> dict[FindingKind, int]:
        negative = [k.value for k, w in v.items() if w < 0]
        if negative:
            raise ValueError(f"weights must be non-negative: {', '.join(negative)}")
        return v

    def weight(self, kind: FindingKind) -> int:
        return self.weights.get(kind, 0)


DEFAULT_WEIGHTS = RiskWeights()


def score(counts: Mapping[FindingKind, int], weights: RiskWeights = DEFAULT_WEIGHTS) -> int:
    """Return ``min(ceiling, sum(weight * count))``."""
    raw = sum(weights.weight(kind) * count for kind, count in counts.items())
    return min(weights.ceiling, raw)


def build_report(
    contract: str,
    match: MatchResult,
    weights: RiskWeights = DEFAULT_WEIGHTS,
) -> AnalysisReport:
    """Turn one run's match result into the immutable report."""
    return AnalysisReport(
        contract=contract,
        ecrecover_count=match.count(FindingKind.ECRECOVER_USAGE),
        public_key_exposure_count=match.count(FindingKind.KEY_EXPOSURE),
        risk_score=score(match.counts, weights),
        warnings=match.messages,
    )
