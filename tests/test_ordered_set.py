from __future__ import annotations

from question_flow.ordered_set import OrderedSet


def test_keeps_first_occurrence_order() -> None:
    items = OrderedSet(["b", "a", "b", "c", "a"])

    assert items.as_tuple() == ("b", "a", "c")
    assert len(items) == 3
    assert "c" in items


def test_update_union_merges() -> None:
    items = OrderedSet(["a1"])
    items.update(["a2", "a1", "a3"])

    assert list(items) == ["a1", "a2", "a3"]
    assert items.add("a1") is False
    assert items.add("a4") is True


def test_discard_all_removes_only_present_items() -> None:
    items = OrderedSet(["q2", "q3", "q4"])
    items.discard_all(["q3", "q9"])

    assert items.as_tuple() == ("q2", "q4")
    assert "q3" not in items
    items.add("q3")
    assert items.as_tuple() == ("q2", "q4", "q3")


def test_intersection_follows_own_order() -> None:
    assert OrderedSet(["x", "y", "z"]).intersection(["z", "x"]) == ("x", "z")


def test_empty_set_is_falsy() -> None:
    items = OrderedSet(["a"])
    items.clear()

    assert not items
    assert items.as_tuple() == ()
