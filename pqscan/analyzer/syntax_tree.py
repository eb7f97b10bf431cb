"""Typed view over the Solidity parser's AST.

The parser emits plain dict nodes keyed by ``type``. The walker here normalizes
the two node families the pattern rules care about into a closed set of
dataclasses:

  - ``CallNode``         function-call expressions (``FunctionCall``)
  - ``DeclarationNode``  state variables, local variables and parameters

Traversal order is pre-order depth-first with children in source order, so the
sequence of yielded nodes (and therefore the order of findings) is reproducible
for identical input.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Union

from pqscan.core.types import DeclarationScope, Location, NodeCategory

# Raw node types that declare a named, typed value
_DECLARATION_TYPES = {
    "VariableDeclaration": DeclarationScope.LOCAL,
    "Parameter": DeclarationScope.PARAMETER,
    "EventParameter": DeclarationScope.PARAMETER,
}

# Keys never holding child nodes
_SKIP_KEYS = frozenset({"type", "loc", "range"})


@dataclass(frozen=True)
class CallNode:
    """A function-call expression."""

    callee: str
    callee_type: str
    location: Location | None = None

    category = NodeCategory.CALL

    @property
    def name(self) -> str:
        return self.callee


@dataclass(frozen=True)
class DeclarationNode:
    """A variable, state variable or parameter declaration."""

    name: str
    type_name: str
    scope: DeclarationScope
    location: Location | None = None

    category = NodeCategory.DECLARATION


TreeNode = Union[CallNode, DeclarationNode]


@dataclass(frozen=True)
class ParseDiagnostic:
    """A syntax error the parser recovered from (or failed on)."""

    line: int
    column: int
    message: str

    def __str__(self) -> str:
        return f"line {self.line}:{self.column} {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"line": self.line, "column": self.column, "message": self.message}


@dataclass
class SyntaxTree:
    """Best-effort parse of one source unit."""

    root: dict[str, Any]
    source_name: str = ""
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.diagnostics

    @property
    def top_level_units(self) -> list[dict[str, Any]]:
        """Structural children of the source unit (pragmas, contracts, ...)."""
        children = self.root.get("children") or []
        return [c for c in children if isinstance(c, dict) and c.get("type")]

    def walk(self) -> Iterator[TreeNode]:
        """Yield typed nodes in pre-order depth-first order.

        Every raw node reachable from the root is visited exactly once, even
        when the parser shares one sub-tree between two parents (state variable
        initializers are referenced from both the declaration and its wrapper).
        """
        seen: set[int] = set()
        stack: list[Any] = [self.root]

        while stack:
            raw = stack.pop()
            if isinstance(raw, list):
                stack.extend(reversed(raw))
                continue
            if not isinstance(raw, dict) or id(raw) in seen:
                continue
            seen.add(id(raw))

            node = _classify(raw)
            if node is not None:
                yield node

            children = [v for k, v in raw.items() if k not in _SKIP_KEYS and isinstance(v, (dict, list))]
            stack.extend(reversed(children))

    def calls(self) -> list[CallNode]:
        return [n for n in self.walk() if isinstance(n, CallNode)]

    def declarations(self) -> list[DeclarationNode]:
        return [n for n in self.walk() if isinstance(n, DeclarationNode)]


# ── Normalization helpers ────────────────────────────────────────────────────


def _classify(raw: dict[str, Any]) -> TreeNode | None:
    nt = raw.get("type", "")

    if nt == "FunctionCall":
        expression = raw.get("expression") or {}
        if not isinstance(expression, dict):
            expression = {}
        return CallNode(
            callee=expression.get("name") or "",
            callee_type=expression.get("type", ""),
            location=_location(raw),
        )

    if nt in _DECLARATION_TYPES:
        scope = _DECLARATION_TYPES[nt]
        if raw.get("isStateVar"):
            scope = DeclarationScope.STATE
        return DeclarationNode(
            name=raw.get("name") or "",
            type_name=type_name_to_str(raw.get("typeName")),
            scope=scope,
            location=_location(raw),
        )

    return None


def _location(raw: dict[str, Any]) -> Location | None:
    loc = raw.get("loc")
    if not isinstance(loc, dict):
        return None
    start = loc.get("start") or {}
    line = start.get("line")
    if line is None:
        return None
    return Location(line=int(line), column=int(start.get("column") or 0))


def type_name_to_str(type_node: Any) -> str:
    """Convert a parser TypeName node to a human-readable string."""
    if not isinstance(type_node, dict):
        return str(type_node) if type_node else ""
    nt = type_node.get("type", "")

    if nt == "ElementaryTypeName":
        return type_node.get("name", "")

    if nt == "UserDefinedTypeName":
        return type_node.get("namePath", "") or type_node.get("name", "")

    if nt == "Mapping":
        key = type_name_to_str(type_node.get("keyType"))
        val = type_name_to_str(type_node.get("valueType"))
        return f"mapping({key} => {val})"

    if nt == "ArrayTypeName":
        base = type_name_to_str(type_node.get("baseTypeName"))
        length = type_node.get("length")
        if isinstance(length, dict):
            length = length.get("number") or length.get("name") or ""
        return f"{base}[{length or ''}]"

    if nt == "FunctionTypeName":
        return "function(...)"

    return str(type_node.get("name", ""))
