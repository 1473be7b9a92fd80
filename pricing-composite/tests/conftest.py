"""Shared fixtures for price tree tests."""

from __future__ import annotations

import pytest

from composite import Container, Leaf


@pytest.fixture
def gum() -> Leaf:
    return Leaf("Bubble gum", 0.5)


@pytest.fixture
def phone() -> Leaf:
    return Leaf("Samsung Note 20", 1005)


@pytest.fixture
def tv_box() -> Container:
    """The inner box: two TVs."""
    box = Container()
    box.add(Leaf("Samsung TV 20in", 300))
    box.add(Leaf("Samsung TV 50in", 800))
    return box


@pytest.fixture
def outer_box(gum, phone, tv_box) -> Container:
    """Gum and a phone, with the TV box nested inside."""
    box = Container()
    box.add(gum)
    box.add(phone)
    box.add(tv_box)
    return box


@pytest.fixture
def deep_tree() -> Container:
    """Four levels: root > mid > inner > leaves, plus a leaf at each level."""
    inner = Container()
    inner.add(Leaf("screw", 0.25))
    inner.add(Leaf("bolt", 0.75))

    mid = Container()
    mid.add(Leaf("bracket", 4))
    mid.add(inner)

    root = Container()
    root.add(Leaf("manual", 10))
    root.add(mid)
    return root
