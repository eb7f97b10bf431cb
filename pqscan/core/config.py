"""Core configuration for the pqscan analyzer."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from pqscan.analyzer.scorer import RiskWeights
from pqscan.core.types import FindingKind


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PQSCAN_",
        case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "pqscan"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ── Reports ──────────────────────────────────────────────────────────
    report_dir: str = "report-output"
    report_suffix: str = "-analysis.json"

    # ── Risk policy ──────────────────────────────────────────────────────
    ecrecover_weight: int = 50
    key_exposure_weight: int = 10
    risk_score_ceiling: int = 100
    byte_types: str = "bytes32,bytes"

    # ── HTTP facade ──────────────────────────────────────────────────────
    api_host: str = "127.0.0.1"
    api_port: int = 5000
    contracts_root: str = "."

    def risk_weights(self) -> RiskWeights:
        """Build the weight table the scorer applies."""
        return RiskWeights(
            weights={
                FindingKind.ECRECOVER_USAGE: self.ecrecover_weight,
                FindingKind.KEY_EXPOSURE: self.key_exposure_weight,
            },
            ceiling=self.risk_score_ceiling,
        )

    def byte_type_set(self) -> frozenset[str]:
        return frozenset(t.strip() for t in self.byte_types.split(",") if t.strip())


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
