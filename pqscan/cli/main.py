"""pqscan CLI — quantum-risk scanner for Solidity contracts.

Usage:
    pqscan scan <path>              Analyze a contract and save a JSON report
    pqscan report latest            Print the most recent report
    pqscan report list              List saved reports, oldest first
    pqscan summary                  Aggregate risk over all saved reports
    pqscan config                   Show current configuration
    pqscan serve                    Run the HTTP API

Examples:
    pqscan scan ./contracts/Wallet.sol
    pqscan scan ./contracts/Wallet.sol --format json --report-dir /tmp/reports
    pqscan report latest
"""

from __future__ import annotations

import argparse
import json
import sys

from pqscan import __version__
from pqscan.core.errors import AnalyzerError, UsageError
from pqscan.core.types import AnalysisReport


# ── Coloured output helpers ──────────────────────────────────────────────────

_RESET = "\033[0m"
_BOLD = "\033[1m"
_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _c(text: str, code: str) -> str:
    return f"{code}{text}{_RESET}"


def _score_color(score: int) -> str:
    if score >= 50:
        return _RED
    if score > 0:
        return _YELLOW
    return _GREEN


# ── Banner ───────────────────────────────────────────────────────────────────

BANNER = rf"""
{_BOLD}{_CYAN}
 _ __   __ _ ___  ___ __ _ _ __
| '_ \ / _` / __|/ __/ _` | '_ \
| |_) | (_| \__ \ (_| (_| | | | |
| .__/ \__, |___/\___\__,_|_| |_|
|_|       |_|{_RESET}
  {_DIM}Quantum-risk scanner for Solidity — v{__version__}{_RESET}
"""


# ── CLI argument parser ─────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pqscan",
        description="pqscan — quantum-risk static analyzer for Solidity",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--no-banner", action="store_true", help="Suppress the startup banner")
    parser.add_argument("--quiet", "-q", action="store_true", help="Minimal output")

    sub = parser.add_subparsers(dest="command")

    # ── scan ─────────────────────────────────────────────────────────────────
    scan_p = sub.add_parser("scan", help="Analyze a Solidity file")
    scan_p.add_argument("path", nargs="?", help="Path to the .sol file")
    scan_p.add_argument("--report-dir", help="Directory to write the report to")
    scan_p.add_argument(
        "--format",
        "-f",
        default="summary",
        choices=["summary", "json"],
        help="Console output format (default: summary)",
    )
    scan_p.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Only print the saved report path",
    )

    # ── report ───────────────────────────────────────────────────────────────
    report_p = sub.add_parser("report", help="Read saved reports")
    report_p.add_argument("which", choices=["latest", "list"], help="'latest' or 'list'")
    report_p.add_argument("--report-dir", help="Report directory")

    # ── summary ──────────────────────────────────────────────────────────────
    summary_p = sub.add_parser("summary", help="Aggregate risk over saved reports")
    summary_p.add_argument("--report-dir", help="Report directory")

    # ── config ───────────────────────────────────────────────────────────────
    sub.add_parser("config", help="Show current configuration")

    # ── serve ────────────────────────────────────────────────────────────────
    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", help="Bind address")
    serve_p.add_argument("--port", type=int, help="Bind port")

    return parser


def _settings_for(args: argparse.Namespace):
    from pqscan.core.config import get_settings

    settings = get_settings()
    report_dir = getattr(args, "report_dir", None)
    if report_dir:
        settings = settings.model_copy(update={"report_dir": report_dir})
    return settings


def _store_for(args: argparse.Namespace):
    from pqscan.reports.store import ReportStore

    settings = _settings_for(args)
    return ReportStore(settings.report_dir, settings.report_suffix)


# ── Scan command ─────────────────────────────────────────────────────────────


def _print_summary(report: AnalysisReport, report_path: str, quiet: bool = False) -> None:
    print(f"\n{_BOLD}Analysis complete{_RESET}")
    print(f"  Result saved to: {_c(report_path, _CYAN)}")
    if quiet:
        return

    score_text = _c(f"{report.risk_score}/100", _score_color(report.risk_score))
    print(f"\n  Contract:             {report.contract}")
    print(f"  Risk score:           {score_text}")
    print(f"  ecrecover calls:      {report.ecrecover_count}")
    print(f"  Public key exposures: {report.public_key_exposure_count}")

    if not report.warnings:
        print(_c("\n  ✓ No quantum-risk patterns found.", _GREEN))
        print()
        return

    print(f"\n  {_BOLD}Warnings{_RESET}")
    for i, warning in enumerate(report.warnings, 1):
        print(f"  {_DIM}{i:>3}.{_RESET} {_c(warning, _YELLOW)}")
    print()


def _print_error(exc: AnalyzerError) -> None:
    print(_c(f"Error [{exc.code.value}]: {exc.message}", _RED), file=sys.stderr)


def _run_scan(args: argparse.Namespace) -> int:
    """Analyze one contract and save its report."""
    from pqscan.analyzer.analyzer import QuantumRiskAnalyzer

    if not args.path:
        _print_error(UsageError("provide the path of a contract to scan."))
        print("  Usage: pqscan scan <path_to_contract.sol>", file=sys.stderr)
        return EXIT_USAGE

    analyzer = QuantumRiskAnalyzer(settings=_settings_for(args))
    try:
        result = analyzer.run(args.path)
    except AnalyzerError as exc:
        _print_error(exc)
        return exc.exit_code

    if args.format == "json":
        print(result.report.to_json())
    else:
        _print_summary(result.report, str(result.report_path), quiet=args.quiet)
    return EXIT_OK


# ── Report commands ──────────────────────────────────────────────────────────


def _run_report(args: argparse.Namespace) -> int:
    """Print the latest report or list saved reports."""
    store = _store_for(args)

    if args.which == "list":
        for path in store.list_reports():
            print(path.name)
        return EXIT_OK

    report = store.latest()
    if report is None:
        print(_c(f"No analysis reports found in {store.directory}", _YELLOW), file=sys.stderr)
        return EXIT_FAILED
    print(report.to_json())
    return EXIT_OK


def _run_summary(args: argparse.Namespace) -> int:
    summary = _store_for(args).summary()
    print(json.dumps(summary.model_dump(by_alias=True), indent=2))
    return EXIT_OK


# ── Config command ───────────────────────────────────────────────────────────


def _run_config() -> int:
    """Print current settings."""
    from pqscan.core.config import get_settings

    s = get_settings()
    print(f"\n{_BOLD}pqscan Configuration{_RESET}\n")
    for field_name in sorted(type(s).model_fields.keys()):
        val = getattr(s, field_name, "")
        print(f"  {_DIM}{field_name}:{_RESET}  {val}")
    print()
    return EXIT_OK


# ── Serve command ────────────────────────────────────────────────────────────


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from pqscan.api.main import create_app

    settings = _settings_for(args)
    uvicorn.run(
        create_app(settings),
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
    )
    return EXIT_OK


# ── Entrypoint ───────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"pqscan {__version__}")
        return EXIT_OK

    from pqscan.core.config import get_settings
    from pqscan.core.logging import setup_logging

    settings = get_settings()
    setup_logging(
        env=settings.app_env,
        log_level="DEBUG" if settings.debug else ("WARNING" if args.quiet else settings.log_level),
    )

    if not args.no_banner and not args.quiet:
        print(BANNER, file=sys.stderr)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    if args.command == "scan":
        return _run_scan(args)

    if args.command == "report":
        return _run_report(args)

    if args.command == "summary":
        return _run_summary(args)

    if args.command == "config":
        return _run_config()

    if args.command == "serve":
        return _run_serve(args)

    parser.print_help()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
