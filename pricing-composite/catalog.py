"""Build live price trees from payloads, and describe trees as payloads.

Every mutation goes through ``Container.add``, so a built tree obeys the
same cycle policy and logging as one assembled by hand.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter

from composite import Container, CyclePolicy, Leaf, PricedItem, walk
from models import ContainerPayload, ItemPayload, LeafPayload

logger = logging.getLogger(__name__)

_item_adapter: TypeAdapter[ItemPayload] = TypeAdapter(ItemPayload)


def parse(data: dict[str, Any]) -> LeafPayload | ContainerPayload:
    """Validate a plain dict into a payload."""
    return _item_adapter.validate_python(data)


def build(
    payload: LeafPayload | ContainerPayload | dict[str, Any],
    *,
    cycle_policy: CyclePolicy = CyclePolicy.REJECT,
) -> PricedItem:
    """Construct a Leaf or Container tree from a payload."""
    if isinstance(payload, dict):
        payload = parse(payload)

    if isinstance(payload, LeafPayload):
        return Leaf(payload.name, payload.price)

    container = Container(cycle_policy=cycle_policy)
    for child in payload.children:
        container.add(build(child, cycle_policy=cycle_policy))
    return container


def load_json(
    text: str | bytes,
    *,
    cycle_policy: CyclePolicy = CyclePolicy.REJECT,
) -> PricedItem:
    """Validate JSON text and build the tree it describes."""
    payload = _item_adapter.validate_json(text)
    item = build(payload, cycle_policy=cycle_policy)
    logger.info("Loaded %s priced at %s", item.name, item.price)
    return item


def snapshot(item: PricedItem) -> LeafPayload | ContainerPayload:
    """Describe an existing tree as payload data.

    Raises StructuralViolationError if the tree is cyclic.
    """
    # Validate acyclicity up front so the recursion below always terminates.
    for _ in walk(item):
        pass
    return _snapshot(item)


def _snapshot(item: PricedItem) -> LeafPayload | ContainerPayload:
    if isinstance(item, Container):
        return ContainerPayload(children=[_snapshot(c) for c in item.children])
    return LeafPayload(name=item.name, price=item.price)
