"""Counterexample search over randomly generated price trees.

This module runs independently of the test suite.  It builds random trees
from a seeded generator and searches for:

1. Rule violations: any rule in ``rules.TREE_RULES`` that fails.
2. Order dependence: permuting a container's children changes its price
   or name.
3. Stale reads: adding a child after a price read does not move the next
   read by exactly the child's price.
4. Missing structural errors: a cycle-forming ``add`` that is accepted.

Run directly::

    cd pricing-composite
    python -m validation.counterexample_search
"""
from __future__ import annotations

import random
import sys
from dataclasses import dataclass, field

sys.path.insert(0, ".")

from composite import Container, Leaf, PricedItem, StructuralViolationError, walk
from rules import validate_tree


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Counterexample:
    category: str
    tree: str
    expected: str
    actual: str
    description: str


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0

    @property
    def passed(self) -> bool:
        return len(self.counterexamples) == 0

    def summary(self) -> str:
        lines = [
            "Counterexample Search Report",
            "=" * 40,
            f"Total checks: {self.checks_run}",
            f"Counterexamples found: {len(self.counterexamples)}",
        ]
        if self.counterexamples:
            lines.append("")
            for i, cx in enumerate(self.counterexamples, 1):
                lines.append(f"  [{i}] {cx.category}")
                lines.append(f"      Tree:     {cx.tree}")
                lines.append(f"      Expected: {cx.expected}")
                lines.append(f"      Actual:   {cx.actual}")
                lines.append(f"      {cx.description}")
        else:
            lines.append("\nNo counterexamples found.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Tree generation
# ---------------------------------------------------------------------------

def random_leaf(rng: random.Random) -> Leaf:
    cents = rng.randint(0, 200_000)
    return Leaf(f"item-{rng.randint(0, 9999)}", cents / 100)


def random_tree(rng: random.Random, max_depth: int, max_width: int) -> Container:
    root = Container()
    for _ in range(rng.randint(0, max_width)):
        if max_depth > 1 and rng.random() < 0.3:
            root.add(random_tree(rng, max_depth - 1, max_width))
        else:
            root.add(random_leaf(rng))
    return root


def describe(item: PricedItem) -> str:
    nodes = sum(1 for _ in walk(item))
    return f"{item.name}, {nodes} nodes, price={item.price}"


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def search_rule_violations(tree: Container, rng: random.Random) -> tuple[list[Counterexample], int]:
    """Run every tree rule."""
    report = validate_tree(tree)
    cxs = [
        Counterexample(
            category="rule_violation",
            tree=describe(tree),
            expected=f.rule.description,
            actual="; ".join(f.offenders) or f.error or "rule failed",
            description=f"Rule '{f.rule.id}' violated",
        )
        for f in report.failures
    ]
    return cxs, len(report.outcomes)


def search_order_dependence(tree: Container, rng: random.Random) -> tuple[list[Counterexample], int]:
    """Rebuild every container with shuffled children and compare."""
    cxs: list[Counterexample] = []
    checks = 0

    for _, node in walk(tree):
        if not isinstance(node, Container):
            continue
        children = list(node.children)
        rng.shuffle(children)
        shuffled = Container()
        for child in children:
            shuffled.add(child)

        checks += 1
        if (shuffled.price, shuffled.name) != (node.price, node.name):
            cxs.append(Counterexample(
                category="order_dependence",
                tree=describe(node),
                expected=f"{node.name}, price={node.price}",
                actual=f"{shuffled.name}, price={shuffled.price}",
                description="Permuting children changed the container's reads",
            ))

    return cxs, checks


def search_stale_reads(tree: Container, rng: random.Random) -> tuple[list[Counterexample], int]:
    """Add a leaf after a read and check the next read moved by its price."""
    before = tree.price
    extra = random_leaf(rng)
    tree.add(extra)
    after = tree.price

    if abs(after - (before + extra.price)) > 1e-6:
        return [Counterexample(
            category="stale_read",
            tree=describe(tree),
            expected=f"price={before + extra.price}",
            actual=f"price={after}",
            description="Price read after add does not reflect the new child",
        )], 1
    return [], 1


def search_missing_structural_errors(tree: Container, rng: random.Random) -> tuple[list[Counterexample], int]:
    """Try to close a cycle at every nested container."""
    cxs: list[Counterexample] = []
    checks = 0
    tree_desc = describe(tree)

    for _, node in walk(tree):
        if not isinstance(node, Container):
            continue
        checks += 1
        try:
            node.add(tree)
        except StructuralViolationError:
            continue
        cxs.append(Counterexample(
            category="missing_error",
            tree=tree_desc,
            expected="StructuralViolationError",
            actual="add accepted",
            description="A cycle-forming add was not rejected",
        ))
        # The tree is now cyclic; stop walking it.
        break

    return cxs, checks


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

def run_search(seed: int, trees: int, max_depth: int, max_width: int) -> SearchReport:
    """Run the complete search for one configuration."""
    rng = random.Random(seed)
    report = SearchReport()

    for _ in range(trees):
        tree = random_tree(rng, max_depth, max_width)
        for search_fn in (
            search_rule_violations,
            search_order_dependence,
            search_missing_structural_errors,
            search_stale_reads,
        ):
            cxs, checks = search_fn(tree, rng)
            report.counterexamples.extend(cxs)
            report.checks_run += checks
            if cxs:
                break

    return report


def main() -> None:
    """Run the search across several tree shapes."""
    configs = [
        ("flat, wide      ", 1, 200, 1, 20),
        ("deep, narrow    ", 2, 200, 8, 2),
        ("balanced        ", 3, 200, 4, 5),
    ]

    all_passed = True
    for name, seed, trees, depth, width in configs:
        print(f"\n--- Configuration: {name} ---")
        report = run_search(seed, trees, depth, width)
        print(report.summary())
        if not report.passed:
            all_passed = False

    print("\n" + "=" * 40)
    if all_passed:
        print("ALL CONFIGURATIONS PASSED")
    else:
        print("SOME CONFIGURATIONS HAD COUNTEREXAMPLES")
        sys.exit(1)


if __name__ == "__main__":
    main()
