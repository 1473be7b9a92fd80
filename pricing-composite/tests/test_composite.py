"""Tests for leaves, containers, cycle handling and traversal."""

from __future__ import annotations

import logging
import threading

import pytest
from pydantic import ValidationError

from composite import (
    Container,
    CyclePolicy,
    Leaf,
    PricedItem,
    StructuralViolationError,
    count_leaves,
    render,
    walk,
)


class TestLeaf:

    def test_name_and_price(self, gum):
        assert gum.name == "Bubble gum"
        assert gum.price == 0.5

    def test_keyword_construction(self):
        leaf = Leaf(name="widget", price=3)
        assert leaf.name == "widget"
        assert leaf.price == 3

    def test_zero_price_allowed(self):
        assert Leaf("freebie", 0).price == 0

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Leaf("refund", -1)

    def test_nan_price_rejected(self):
        with pytest.raises(ValidationError):
            Leaf("broken", float("nan"))

    def test_infinite_price_accepted(self):
        leaf = Leaf("priceless", float("inf"))
        assert leaf.price == float("inf")
        box = Container()
        box.add(leaf)
        box.add(Leaf("gum", 0.5))
        assert box.price == float("inf")

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_any_name_kept_verbatim(self, name):
        leaf = Leaf(name, 1)
        assert leaf.name == name
        assert leaf.price == 1

    def test_is_immutable(self, gum):
        with pytest.raises(ValidationError):
            gum.price = 100
        with pytest.raises(ValidationError):
            gum.name = "caviar"
        assert gum.price == 0.5

    def test_is_priced_item(self, gum):
        assert isinstance(gum, PricedItem)


class TestContainerBasics:

    def test_empty_container(self):
        box = Container()
        assert box.price == 0
        assert box.name == "a container with 0 items"
        assert len(box) == 0
        assert box.children == ()

    def test_empty_container_is_truthy(self):
        box = Container()
        assert box
        items = [Leaf("gum", 0.5), box]
        assert [i for i in items if i] == items

    def test_is_priced_item(self):
        assert isinstance(Container(), PricedItem)

    def test_add_appends_in_order(self, gum, phone):
        box = Container()
        box.add(phone)
        box.add(gum)
        assert box.children == (phone, gum)
        assert list(box) == [phone, gum]

    def test_name_counts_direct_children_only(self, outer_box):
        assert outer_box.name == "a container with 3 items"

    def test_children_is_a_snapshot(self, gum, phone):
        box = Container()
        box.add(gum)
        snap = box.children
        box.add(phone)
        assert snap == (gum,)
        assert len(box) == 2

    def test_add_rejects_non_items(self):
        box = Container()
        with pytest.raises(TypeError):
            box.add(42)
        with pytest.raises(TypeError):
            box.add({"name": "x", "price": 1})
        assert len(box) == 0

    def test_repr(self, tv_box):
        assert repr(tv_box) == "<Container items=2>"


class TestContainerPrice:

    def test_reference_scenario(self, outer_box):
        assert outer_box.price == 2105.5
        assert outer_box.name == "a container with 3 items"

    def test_nested_sum(self, tv_box):
        assert tv_box.price == 1100

    def test_three_levels(self, deep_tree):
        assert deep_tree.price == 15
        mid = deep_tree.children[1]
        assert mid.price == 5
        assert mid.children[1].price == 1

    def test_price_reflects_later_add(self, tv_box):
        before = tv_box.price
        tv_box.add(Leaf("remote", 25))
        assert tv_box.price == before + 25

    def test_nested_add_visible_from_root(self, outer_box, tv_box):
        before = outer_box.price
        tv_box.add(Leaf("wall mount", 49.5))
        assert outer_box.price == before + 49.5
        assert outer_box.name == "a container with 3 items"

    def test_shared_child_summed_wherever_it_appears(self, phone):
        a = Container()
        b = Container()
        a.add(phone)
        b.add(phone)
        b.add(phone)
        assert a.price == 1005
        assert b.price == 2010

    def test_shared_container_summed_twice(self, tv_box):
        root = Container()
        root.add(tv_box)
        root.add(tv_box)
        assert root.price == 2200
        assert root.name == "a container with 2 items"


class TestCycleRejection:

    def test_self_add_rejected(self):
        box = Container()
        with pytest.raises(StructuralViolationError, match="to itself"):
            box.add(box)
        assert len(box) == 0

    def test_direct_cycle_rejected(self, tv_box):
        outer = Container()
        outer.add(tv_box)
        with pytest.raises(StructuralViolationError) as exc_info:
            tv_box.add(outer)
        assert exc_info.value.container is tv_box
        assert exc_info.value.item is outer
        assert len(tv_box) == 2

    def test_transitive_cycle_rejected(self, deep_tree):
        inner = deep_tree.children[1].children[1]
        with pytest.raises(StructuralViolationError):
            inner.add(deep_tree)

    def test_sibling_add_allowed(self, deep_tree):
        mid = deep_tree.children[1]
        other = Container()
        other.add(mid)
        assert other.price == mid.price

    def test_contains(self, deep_tree):
        mid = deep_tree.children[1]
        inner = mid.children[1]
        assert deep_tree.contains(inner)
        assert mid.contains(inner)
        assert not inner.contains(mid)
        assert not deep_tree.contains(deep_tree)


class TestUncheckedPolicy:

    def test_self_add_accepted(self):
        box = Container(cycle_policy=CyclePolicy.UNCHECKED)
        box.add(box)
        assert len(box) == 1
        assert box.name == "a container with 1 items"

    def test_walk_detects_cycle(self):
        a = Container(cycle_policy=CyclePolicy.UNCHECKED)
        b = Container(cycle_policy=CyclePolicy.UNCHECKED)
        a.add(b)
        b.add(a)
        with pytest.raises(StructuralViolationError):
            list(walk(a))

    def test_acyclic_tree_behaves_normally(self, gum):
        box = Container(cycle_policy=CyclePolicy.UNCHECKED)
        box.add(gum)
        assert box.price == 0.5


class TestWalk:

    def test_preorder_with_depths(self, outer_box, gum, phone, tv_box):
        nodes = list(walk(outer_box))
        assert [d for d, _ in nodes] == [0, 1, 1, 1, 2, 2]
        assert nodes[0][1] is outer_box
        assert nodes[1][1] is gum
        assert nodes[2][1] is phone
        assert nodes[3][1] is tv_box

    def test_walk_leaf(self, gum):
        assert list(walk(gum)) == [(0, gum)]

    def test_count_leaves(self, outer_box, deep_tree):
        assert count_leaves(outer_box) == 4
        assert count_leaves(deep_tree) == 4
        assert count_leaves(Container()) == 0

    def test_render(self, outer_box):
        assert render(outer_box).splitlines() == [
            "a container with 3 items: 2105.50",
            "  Bubble gum: 0.50",
            "  Samsung Note 20: 1005.00",
            "  a container with 2 items: 1100.00",
            "    Samsung TV 20in: 300.00",
            "    Samsung TV 50in: 800.00",
        ]


class TestLogging:

    def test_add_logs_item_name(self, gum, caplog):
        box = Container()
        with caplog.at_level(logging.DEBUG, logger="composite"):
            box.add(gum)
        assert "Adding Bubble gum" in caplog.text


class TestConcurrentAdds:

    def test_parallel_adds_are_all_kept(self):
        box = Container()
        per_thread = 200

        def worker():
            for _ in range(per_thread):
                box.add(Leaf("coin", 1))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(box) == 8 * per_thread
        assert box.price == 8 * per_thread

    @pytest.mark.parametrize("round_", range(200))
    def test_crossing_adds_cannot_close_a_cycle(self, round_):
        a = Container()
        b = Container()
        barrier = threading.Barrier(2)
        rejected: list[StructuralViolationError] = []

        def attach(parent, child):
            barrier.wait()
            try:
                parent.add(child)
            except StructuralViolationError as e:
                rejected.append(e)

        threads = [
            threading.Thread(target=attach, args=(a, b)),
            threading.Thread(target=attach, args=(b, a)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(rejected) == 1
        assert len(a) + len(b) == 1
        assert a.contains(b) != b.contains(a)
