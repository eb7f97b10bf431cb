"""Pattern matcher — applies the rule table during a single tree walk."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pqscan.analyzer.rules import DEFAULT_RULES, PatternRule
from pqscan.analyzer.syntax_tree import SyntaxTree
from pqscan.core.types import MatchResult, NodeCategory

logger = logging.getLogger(__name__)


class PatternMatcher:
    """Walk a ``SyntaxTree`` once and collect findings for every matching rule.

    Rules are dispatched by node category; within a category they run in table
    order, so a node matched by two rules yields two findings in that order.
    """

    def __init__(self, rules: Iterable[PatternRule] | None = None) -> None:
        self._rules = list(DEFAULT_RULES if rules is None else rules)
        self._by_category: dict[NodeCategory, list[PatternRule]] = {}
        for rule in self._rules:
            self._by_category.setdefault(rule.category, []).append(rule)

    @property
    def rules(self) -> list[PatternRule]:
        return list(self._rules)

    def match(self, tree: SyntaxTree) -> MatchResult:
        result = MatchResult()
        for rule in self._rules:
            result.counts.setdefault(rule.kind, 0)

        for node in tree.walk():
            for rule in self._by_category.get(node.category, ()):
                if not rule.applies_to(node):
                    continue
                finding = rule.to_finding(node)
                result.add(finding)
                logger.debug(
                    "%s matched %r at %s", rule.rule_id, finding.name, finding.location or "?",
                    extra={"contract": tree.source_name, "finding_kind": finding.kind.value},
                )

        return result
