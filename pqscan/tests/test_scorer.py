"""Tests for pqscan.analyzer.scorer — weighted score, ceiling and report building."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pqscan.analyzer.scorer import (
    DEFAULT_WEIGHT_TABLE,
    DEFAULT_WEIGHTS,
    RiskWeights,
    build_report,
    score,
)
from pqscan.core.types import Finding, FindingKind, MatchResult

E = FindingKind.ECRECOVER_USAGE
K = FindingKind.KEY_EXPOSURE


class TestScore:
    def test_default_weight_table(self):
        assert DEFAULT_WEIGHT_TABLE == {E: 50, K: 10}
        assert DEFAULT_WEIGHTS.ceiling == 100

    def test_zero_counts(self):
        assert score({E: 0, K: 0}) == 0
        assert score({}) == 0

    @pytest.mark.parametrize("n, expected", [(0, 0), (1, 50), (2, 100), (3, 100), (40, 100)])
    def test_ecrecover_only(self, n: int, expected: int):
        assert score({E: n, K: 0}) == expected

    @pytest.mark.parametrize("m, expected", [(0, 0), (1, 10), (5, 50), (10, 100), (11, 100)])
    def test_key_exposure_only(self, m: int, expected: int):
        assert score({E: 0, K: m}) == expected

    def test_mixed(self):
        assert score({E: 1, K: 1}) == 60

    def test_monotonic_and_clamped(self):
        previous = -1
        for n in range(5):
            for m in range(12):
                value = score({E: n, K: m})
                assert 0 <= value <= 100
                assert value >= score({E: max(n - 1, 0), K: m})
                assert value >= score({E: n, K: max(m - 1, 0)})
            assert value >= previous
            previous = value

    def test_custom_weights(self):
        weights = RiskWeights(weights={E: 30, K: 5}, ceiling=80)
        assert score({E: 2, K: 3}, weights) == 75
        assert score({E: 3, K: 0}, weights) == 80

    def test_unknown_kind_weighs_nothing(self):
        weights = RiskWeights(weights={E: 50})
        assert score({K: 4}, weights) == 0


class TestRiskWeights:
    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            RiskWeights(weights={E: -1})

    def test_ceiling_above_100_rejected(self):
        with pytest.raises(ValidationError):
            RiskWeights(ceiling=150)


class TestBuildReport:
    def test_report_fields(self):
        match = MatchResult()
        match.add(Finding(kind=K, message="key warning", name="pubKey"))
        match.add(Finding(kind=E, message="ecrecover warning", name="ecrecover"))

        report = build_report("Wallet.sol", match)

        assert report.contract == "Wallet.sol"
        assert report.ecrecover_count == 1
        assert report.public_key_exposure_count == 1
        assert report.risk_score == 60
        assert report.warnings == ["key warning", "ecrecover warning"]

    def test_clean_report(self):
        report = build_report("Clean.sol", MatchResult())
        assert report.risk_score == 0
        assert report.warnings == []

    def test_report_is_immutable(self):
        report = build_report("Clean.sol", MatchResult())
        with pytest.raises(ValidationError):
            report.risk_score = 10
