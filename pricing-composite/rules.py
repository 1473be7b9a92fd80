"""Executable invariants for price trees.

Each rule is a named check over the root of a tree that returns the
locations of the nodes breaking it; an empty list means the rule holds.
Conformance tests and the counterexample search run the same checks.
A rule that raises is reported as failed with the exception text, never
propagated.

Locations are written from the root down, e.g. ``root[2][0]`` is the first
child of the root's third child.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterator

from composite import Container, PricedItem, StructuralViolationError


# ---------------------------------------------------------------------------
# Rule: a named, executable check over a tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """A named validation rule for price trees."""

    id: str
    name: str
    description: str
    check: Callable[[PricedItem], list[str]]


def located(
    node: PricedItem,
    path: str = "root",
    ancestors: tuple[Container, ...] = (),
) -> Iterator[tuple[str, PricedItem]]:
    """Pre-order ``(location, node)`` pairs; raises on a containment cycle."""
    if not isinstance(node, Container):
        yield path, node
        return
    if any(node is a for a in ancestors):
        raise StructuralViolationError(ancestors[-1], node)
    yield path, node
    for i, child in enumerate(node.children):
        yield from located(child, f"{path}[{i}]", ancestors + (node,))


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------

def _acyclic(root: PricedItem) -> list[str]:
    try:
        for _ in located(root):
            pass
    except StructuralViolationError as e:
        return [str(e)]
    return []


def _leaf_prices_valid(root: PricedItem) -> list[str]:
    return [
        f"{path}: {node.name!r} priced {node.price}"
        for path, node in located(root)
        if not isinstance(node, Container)
        and (math.isnan(node.price) or node.price < 0)
    ]


def _container_price_is_child_sum(root: PricedItem) -> list[str]:
    bad = []
    for path, node in located(root):
        if not isinstance(node, Container):
            continue
        expected = math.fsum(child.price for child in node.children)
        actual = node.price
        if actual != expected:
            bad.append(f"{path}: price {actual}, children sum to {expected}")
    return bad


def _container_name_reports_count(root: PricedItem) -> list[str]:
    bad = []
    for path, node in located(root):
        if not isinstance(node, Container):
            continue
        if node.name != f"a container with {len(node.children)} items":
            bad.append(f"{path}: {node.name!r} with {len(node.children)} children")
    return bad


def _reads_are_idempotent(root: PricedItem) -> list[str]:
    first = (root.name, root.price)
    second = (root.name, root.price)
    if first != second:
        return [f"root: read {first}, then {second}"]
    return []


# ---------------------------------------------------------------------------
# Rule set
# ---------------------------------------------------------------------------

TREE_RULES: list[Rule] = [
    Rule(
        id="TREE-ACYCLIC",
        name="tree_is_acyclic",
        description="No container contains itself, directly or transitively",
        check=_acyclic,
    ),
    Rule(
        id="LEAF-PRICE",
        name="leaf_prices_valid",
        description="Every leaf price is a number >= 0",
        check=_leaf_prices_valid,
    ),
    Rule(
        id="BOX-PRICE-SUM",
        name="container_price_is_child_sum",
        description="Every container's price equals the sum of its children's prices",
        check=_container_price_is_child_sum,
    ),
    Rule(
        id="BOX-NAME-COUNT",
        name="container_name_reports_count",
        description="Every container's name reports its direct child count",
        check=_container_name_reports_count,
    ),
    Rule(
        id="READ-IDEMPOTENT",
        name="reads_are_idempotent",
        description="Reading name and price twice yields identical results",
        check=_reads_are_idempotent,
    ),
]


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuleOutcome:
    """One rule's verdict on one tree."""

    rule: Rule
    offenders: tuple[str, ...] = ()
    error: str | None = None

    @property
    def passed(self) -> bool:
        return self.error is None and not self.offenders


@dataclass(frozen=True)
class TreeReport:
    outcomes: list[RuleOutcome]

    @property
    def passed(self) -> bool:
        return all(o.passed for o in self.outcomes)

    @property
    def failures(self) -> list[RuleOutcome]:
        return [o for o in self.outcomes if not o.passed]

    def offenders(self, rule_id: str) -> tuple[str, ...]:
        for o in self.outcomes:
            if o.rule.id == rule_id:
                return o.offenders
        raise KeyError(rule_id)

    def summary(self) -> str:
        failures = self.failures
        if not failures:
            return f"Tree satisfies all {len(self.outcomes)} rules"
        lines = [f"Tree breaks {len(failures)} of {len(self.outcomes)} rules:"]
        for o in failures:
            lines.append(f"  [{o.rule.id}] {o.rule.description}")
            if o.error is not None:
                lines.append(f"      could not check: {o.error}")
            for where in o.offenders:
                lines.append(f"      at {where}")
        return "\n".join(lines)


def validate_tree(root: PricedItem) -> TreeReport:
    """Check ``root`` against every rule in TREE_RULES."""
    outcomes = []
    for rule in TREE_RULES:
        try:
            outcomes.append(RuleOutcome(rule, tuple(rule.check(root))))
        except Exception as e:
            outcomes.append(RuleOutcome(rule, error=f"{type(e).__name__}: {e}"))
    return TreeReport(outcomes)
