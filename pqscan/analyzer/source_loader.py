"""Source loading and tolerant Solidity parsing.

``load_source`` reads one contract file; ``parse_source`` runs the ANTLR
Solidity grammar with error recovery so that comments, dialect drift and
locally malformed code still yield a best-effort tree. Syntax errors are
collected as diagnostics instead of being printed by ANTLR's console listener.

A parse is fatal (``ParseError``) only when no tree can be built: the AST
builder fails on the recovered parse tree, or recovery kept nothing structural
while reporting syntax errors.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

from antlr4 import CommonTokenStream, InputStream
from antlr4.error.ErrorListener import ErrorListener
from solidity_parser.parser import AstVisitor, Node
from solidity_parser.solidity_antlr4.SolidityLexer import SolidityLexer
from solidity_parser.solidity_antlr4.SolidityParser import SolidityParser as _AntlrSolidityParser

from pqscan.analyzer.syntax_tree import ParseDiagnostic, SyntaxTree
from pqscan.core.errors import NotFoundError, ParseError, UsageError
from pqscan.core.types import SourceUnit

logger = logging.getLogger(__name__)

_ENABLE_LOC_LOCK = threading.Lock()


# ── Loading ──────────────────────────────────────────────────────────────────


def load_source(path: str | Path | None) -> SourceUnit:
    """Read a contract file in full.

    Raises:
        UsageError: no path supplied
        NotFoundError: the path is not a readable UTF-8 file
    """
    if path is None or str(path).strip() == "":
        raise UsageError("no contract path supplied")

    resolved = Path(path).expanduser()
    if not resolved.exists():
        raise NotFoundError(str(path))
    if not resolved.is_file():
        raise NotFoundError(str(path), reason="not a regular file")

    try:
        with resolved.open("r", encoding="utf-8") as fh:
            text = fh.read()
    except UnicodeDecodeError as exc:
        raise NotFoundError(str(path), reason=f"not a UTF-8 text file ({exc.reason})") from exc
    except OSError as exc:
        raise NotFoundError(str(path), reason=f"unreadable ({exc.strerror or exc})") from exc

    return SourceUnit(path=resolved, text=text)


# ── Parsing ──────────────────────────────────────────────────────────────────


class _DiagnosticCollector(ErrorListener):
    """ANTLR error listener that records syntax errors instead of printing them."""

    def __init__(self) -> None:
        super().__init__()
        self.diagnostics: list[ParseDiagnostic] = []

    def syntaxError(self, recognizer, offendingSymbol, line, column, msg, e):  # noqa: N802
        self.diagnostics.append(ParseDiagnostic(line=line, column=column, message=msg))


class SolidityParser:
    """Tolerant Solidity parser producing a ``SyntaxTree``.

    Node positions are attached when the recovered parse tree allows it. ANTLR
    can leave a context without a stop token after recovery; the tree is then
    rebuilt without positions rather than failing the run.
    """

    def __init__(self, with_locations: bool = True) -> None:
        self._with_locations = with_locations

    def parse(self, unit: SourceUnit) -> SyntaxTree:
        collector = _DiagnosticCollector()

        lexer = SolidityLexer(InputStream(unit.text))
        lexer.removeErrorListeners()
        lexer.addErrorListener(collector)

        parser = _AntlrSolidityParser(CommonTokenStream(lexer))
        parser.removeErrorListeners()
        parser.addErrorListener(collector)

        try:
            parse_tree = parser.sourceUnit()
        except Exception as exc:  # recovery gave up inside the generated parser
            raise ParseError(
                f"Parsing failed: {collector.diagnostics[0] if collector.diagnostics else exc}",
                contract=unit.basename,
                diagnostics=[d.to_dict() for d in collector.diagnostics],
            ) from exc

        root = self._build_ast(parse_tree, unit, collector.diagnostics)

        tree = SyntaxTree(root=root, source_name=unit.basename, diagnostics=collector.diagnostics)

        if tree.diagnostics and not tree.top_level_units:
            raise ParseError(
                f"Parsing failed: {tree.diagnostics[0]}",
                contract=unit.basename,
                diagnostics=[d.to_dict() for d in tree.diagnostics],
            )

        for diag in tree.diagnostics:
            logger.warning(
                "Recovered from syntax error at %s", diag, extra={"contract": unit.basename}
            )
        return tree

    def _build_ast(
        self,
        parse_tree: Any,
        unit: SourceUnit,
        diagnostics: list[ParseDiagnostic],
    ) -> dict[str, Any]:
        attempts = [True, False] if self._with_locations else [False]
        last_exc: Exception | None = None
        # Node.ENABLE_LOC is a class-wide switch; hold it for the whole visit
        with _ENABLE_LOC_LOCK:
            previous = Node.ENABLE_LOC
            try:
                for with_loc in attempts:
                    Node.ENABLE_LOC = with_loc
                    try:
                        root = AstVisitor().visit(parse_tree)
                    except Exception as exc:  # AST builder cannot walk the recovered tree
                        last_exc = exc
                        logger.debug(
                            "AST build failed (locations=%s): %s", with_loc, exc,
                            extra={"contract": unit.basename},
                        )
                        continue
                    if isinstance(root, dict):
                        return root
            finally:
                Node.ENABLE_LOC = previous

        detail = str(diagnostics[0]) if diagnostics else f"{type(last_exc).__name__}: {last_exc}"
        raise ParseError(
            f"Parsing failed: {detail}",
            contract=unit.basename,
            diagnostics=[d.to_dict() for d in diagnostics],
        ) from last_exc


def parse_source(unit: SourceUnit) -> SyntaxTree:
    """Convenience function to parse a loaded source unit."""
    return SolidityParser().parse(unit)
