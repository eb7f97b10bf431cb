"""Error taxonomy for the analyzer.

Every failure an invocation can end in is one of four kinds, each tagged with a
stable code so callers can branch on it without parsing messages:

    UsageError     no input path supplied
    NotFoundError  input path is not a readable file
    ParseError     the parser could not recover any tree
    WriteError     the report could not be persisted
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes surfaced to the CLI and the HTTP layer."""

    USAGE_ERROR = "USAGE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    PARSE_ERROR = "PARSE_ERROR"
    WRITE_ERROR = "WRITE_ERROR"


class AnalyzerError(Exception):
    """Base class for analyzer failures with a structured code + message."""

    code: ErrorCode = ErrorCode.USAGE_ERROR
    exit_code: int = 1
    http_status: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class UsageError(AnalyzerError):
    """The caller did not supply a contract path."""

    code = ErrorCode.USAGE_ERROR
    exit_code = 2
    http_status = 400


class NotFoundError(AnalyzerError):
    """The contract path does not resolve to a readable file."""

    code = ErrorCode.NOT_FOUND
    exit_code = 1
    http_status = 404

    def __init__(self, path: str, reason: str = "file not found") -> None:
        super().__init__(f"{reason}: {path}", details={"path": path})
        self.path = path


class ParseError(AnalyzerError):
    """The parser produced no usable tree. Carries the diagnostic verbatim."""

    code = ErrorCode.PARSE_ERROR
    exit_code = 1
    http_status = 422

    def __init__(
        self,
        message: str,
        contract: str = "",
        diagnostics: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            message,
            details={"contract": contract, "diagnostics": diagnostics or []},
        )
        self.contract = contract
        self.diagnostics = diagnostics or []


class WriteError(AnalyzerError):
    """Analysis succeeded but the report could not be persisted."""

    code = ErrorCode.WRITE_ERROR
    exit_code = 3
    http_status = 500

    def __init__(self, message: str, directory: str = "") -> None:
        super().__init__(message, details={"directory": directory})
        self.directory = directory
