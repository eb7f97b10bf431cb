"""Shared fixtures for the pqscan test suite."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from pqscan.core.config import Settings, get_settings
from pqscan.core.types import SourceUnit


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Reset cached settings and root logging handlers around every test."""
    get_settings.cache_clear()
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    get_settings.cache_clear()


@pytest.fixture
def report_dir(tmp_path: Path) -> Path:
    return tmp_path / "report-output"


@pytest.fixture
def settings(tmp_path: Path, report_dir: Path) -> Settings:
    return Settings(report_dir=str(report_dir), contracts_root=str(tmp_path))


@pytest.fixture
def write_contract(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write Solidity source to ``tmp_path/<name>`` and return the path."""

    def _write(source: str, name: str = "Contract.sol") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_unit() -> Callable[[str, str], SourceUnit]:
    def _make(source: str, name: str = "Contract.sol") -> SourceUnit:
        return SourceUnit(path=Path(name), text=source)

    return _make
