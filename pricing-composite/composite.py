"""Composite price tree.

A tree of priced items where leaves are individual products and containers
hold any mix of leaves and other containers.  Both variants expose the same
two read-only attributes, ``name`` and ``price``, so code that walks a tree
never needs to know which one it holds.

A container's price is never stored: every read sums the current children,
recursing into nested containers.  The containment relation must form a
tree.  ``Container.add`` rejects cycles by default; with
``CyclePolicy.UNCHECKED`` that responsibility moves to whoever builds the
tree, and ``price`` on a cyclic tree does not terminate normally.
"""
from __future__ import annotations

import logging
import math
import threading
from enum import Enum, auto
from typing import Iterator, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Held across the cycle check and append of every checked add.
_structure_lock = threading.Lock()


# ---------------------------------------------------------------------------
# Shared capability
# ---------------------------------------------------------------------------

@runtime_checkable
class PricedItem(Protocol):
    """Anything that can sit in a price tree."""

    @property
    def name(self) -> str: ...

    @property
    def price(self) -> float: ...


class CyclePolicy(Enum):
    """What ``Container.add`` does about containment cycles."""

    REJECT = auto()      # Walk the new child's subtree, refuse cycles
    UNCHECKED = auto()   # Append blindly; acyclicity is the caller's job


class StructuralViolationError(Exception):
    """Raised when a containment would make the tree cyclic."""

    def __init__(self, container: Container, item: PricedItem) -> None:
        self.container = container
        self.item = item
        if item is container:
            msg = f"Cannot add {container.name!r} to itself"
        else:
            msg = (
                f"Cannot add {item.name!r}: it already contains "
                f"{container.name!r}"
            )
        super().__init__(msg)


# ---------------------------------------------------------------------------
# Leaf: a single sellable unit
# ---------------------------------------------------------------------------

class Leaf(BaseModel):
    """An atomic priced entity with a fixed name and price."""

    model_config = ConfigDict(frozen=True)

    name: str
    price: float = Field(..., ge=0)

    def __init__(self, name: str, price: float) -> None:
        super().__init__(name=name, price=price)

    @field_validator("price")
    @classmethod
    def price_not_nan(cls, v: float) -> float:
        if math.isnan(v):
            raise ValueError("Leaf price must be a number >= 0, got NaN")
        return v


# ---------------------------------------------------------------------------
# Container: a group of priced items
# ---------------------------------------------------------------------------

class Container:
    """An ordered collection of priced items, itself a priced item."""

    def __init__(self, *, cycle_policy: CyclePolicy = CyclePolicy.REJECT) -> None:
        self.cycle_policy = cycle_policy
        self._children: list[PricedItem] = []
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<Container items={len(self)}>"

    def __bool__(self) -> bool:
        # An empty container is still an item.
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._children)

    def __iter__(self) -> Iterator[PricedItem]:
        return iter(self.children)

    @property
    def children(self) -> tuple[PricedItem, ...]:
        """Snapshot of the direct children in insertion order."""
        with self._lock:
            return tuple(self._children)

    @property
    def name(self) -> str:
        return f"a container with {len(self)} items"

    @property
    def price(self) -> float:
        return math.fsum(child.price for child in self.children)

    def contains(self, item: PricedItem) -> bool:
        """True if ``item`` appears anywhere below this container."""
        return any(node is item for _, node in walk(self) if node is not self)

    def add(self, item: PricedItem) -> None:
        """Append ``item`` as the last direct child."""
        if not isinstance(item, (Leaf, Container)):
            raise TypeError(
                f"Expected a Leaf or Container, got {type(item).__name__}"
            )
        if self.cycle_policy == CyclePolicy.UNCHECKED:
            self._append(item)
            return

        with _structure_lock:
            if item is self:
                raise StructuralViolationError(self, item)
            if isinstance(item, Container) and item.contains(self):
                raise StructuralViolationError(self, item)
            self._append(item)

    def _append(self, item: PricedItem) -> None:
        logger.debug("Adding %s to %s", item.name, self.name)
        with self._lock:
            self._children.append(item)


# ---------------------------------------------------------------------------
# Traversal helpers
# ---------------------------------------------------------------------------

def walk(item: PricedItem) -> Iterator[tuple[int, PricedItem]]:
    """Depth-first pre-order traversal yielding ``(depth, node)``.

    Raises StructuralViolationError when a container is re-entered while it
    is still on the current path.
    """
    path: list[Container] = []
    stack: list[tuple[int, PricedItem | None]] = [(0, item)]

    while stack:
        depth, node = stack.pop()
        # None marks the end of a container's subtree.
        if node is None:
            path.pop()
            continue

        if isinstance(node, Container):
            if any(node is p for p in path):
                raise StructuralViolationError(path[-1], node)
            yield depth, node
            path.append(node)
            stack.append((depth, None))
            for child in reversed(node.children):
                stack.append((depth + 1, child))
        else:
            yield depth, node


def count_leaves(item: PricedItem) -> int:
    """Number of leaf occurrences in the subtree rooted at ``item``."""
    return sum(1 for _, node in walk(item) if not isinstance(node, Container))


def render(item: PricedItem, indent: str = "  ") -> str:
    """Indented ``name: price`` listing, one line per node."""
    return "\n".join(
        f"{indent * depth}{node.name}: {node.price:.2f}"
        for depth, node in walk(item)
    )
