"""Quantum-risk pattern rules.

A rule is a ``(category, predicate, kind, message)`` entry. The matcher applies
every rule registered for a node's category, so new patterns are added here as
table entries without touching the traversal.

The key-exposure rule is a naming-convention heuristic: a ``bytes`` field called
``keystone`` is a false positive and a key stored as ``uint256`` is missed.
Stricter matching belongs in an additional rule, not a replacement.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from pqscan.analyzer.syntax_tree import CallNode, DeclarationNode, TreeNode
from pqscan.core.types import Finding, FindingKind, NodeCategory

# Raw byte-sequence types a public key is typically stored in
DEFAULT_BYTE_TYPES: frozenset[str] = frozenset({"bytes32", "bytes"})

# Lower-cased identifier fragments marking a key-like field
KEY_NAME_MARKERS: tuple[str, ...] = ("pub", "key")

ECRECOVER_MESSAGE = "⚠ Uses ecrecover — vulnerable to quantum attacks"
KEY_EXPOSURE_MESSAGE = "⚠ Exposes raw public key bytes '{name}' — harvestable for quantum key recovery"


@dataclass(frozen=True)
class PatternRule:
    """One entry of the rule table."""

    rule_id: str
    category: NodeCategory
    predicate: Callable[[TreeNode], bool]
    kind: FindingKind
    message: str

    def applies_to(self, node: TreeNode) -> bool:
        return node.category == self.category and self.predicate(node)

    def to_finding(self, node: TreeNode) -> Finding:
        return Finding(
            kind=self.kind,
            message=self.message.format(name=node.name),
            name=node.name,
            location=node.location,
        )


# ── Predicates ───────────────────────────────────────────────────────────────


def is_ecrecover_call(node: TreeNode) -> bool:
    """Bare ``ecrecover(...)`` call; member access such as ``lib.ecrecover`` is not matched."""
    return (
        isinstance(node, CallNode)
        and node.callee_type == "Identifier"
        and node.callee == "ecrecover"
    )


def key_exposure_predicate(byte_types: Iterable[str] = DEFAULT_BYTE_TYPES) -> Callable[[TreeNode], bool]:
    """Build the raw-bytes + key-like-name predicate for a set of byte types."""
    types = frozenset(byte_types)

    def predicate(node: TreeNode) -> bool:
        if not isinstance(node, DeclarationNode) or node.type_name not in types:
            return False
        lowered = node.name.lower()
        return any(marker in lowered for marker in KEY_NAME_MARKERS)

    return predicate


# ── Rule table ───────────────────────────────────────────────────────────────


def default_rules(byte_types: Iterable[str] = DEFAULT_BYTE_TYPES) -> list[PatternRule]:
    """Return the built-in rule table."""
    return [
        PatternRule(
            rule_id="PQ-001",
            category=NodeCategory.CALL,
            predicate=is_ecrecover_call,
            kind=FindingKind.ECRECOVER_USAGE,
            message=ECRECOVER_MESSAGE,
        ),
        PatternRule(
            rule_id="PQ-002",
            category=NodeCategory.DECLARATION,
            predicate=key_exposure_predicate(byte_types),
            kind=FindingKind.KEY_EXPOSURE,
            message=KEY_EXPOSURE_MESSAGE,
        ),
    ]


DEFAULT_RULES: tuple[PatternRule, ...] = tuple(default_rules())
