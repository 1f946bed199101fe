from __future__ import annotations

import warnings

import pytest

from tweakable.config import TweakableConfig
from tweakable.editors import Color
from tweakable.errors import SiteCollisionError, TweakableTypeError
from tweakable.root import RootState, TweakableRoot
from tweakable.site_key import SiteKey
from tweakable.tree import Component, Group, Static, Tweakable


def _padding_and_color():
    padding = Tweakable("padding", 10, lambda p: {"padding": p})
    color = padding.tweakable("color", Color("white"), lambda out, c: {**out, "color": c})
    return padding, color


def test_root_starts_idle_and_settles_after_render() -> None:
    _, tree = _padding_and_color()
    root = TweakableRoot(tree)

    assert root.state is RootState.IDLE
    root.render()
    assert root.state is RootState.SETTLED
    assert root.pass_count == 1


def test_edit_scenario_padding_and_color() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)

    assert root.render() == {"padding": 10, "color": "white"}
    assert len(root.definitions) == 2
    assert dict(root.values) == {padding.key: 10, tree.key: "white"}

    assert root.edit(padding.key, 20) is True

    assert dict(root.values) == {padding.key: 20, tree.key: "white"}
    assert root.output == {"padding": 20, "color": "white"}


def test_edit_triggers_exactly_one_pass() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()

    root.edit(padding.key, 30)

    assert root.pass_count == 2


def test_defaults_are_stable_across_passes_without_edits() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)

    for _ in range(3):
        root.render()
        assert root.values[padding.key] == 10
        assert root.output["padding"] == 10


def test_edited_value_is_retained_across_passes() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()
    root.edit(padding.key, 42)

    root.render()
    root.render()

    assert root.values[padding.key] == 42
    assert root.output["padding"] == 42


def test_rebuilding_the_tree_each_pass_keeps_site_identity() -> None:
    def body():
        return Tweakable("gain", 1.0, lambda g: g * 2)

    root = TweakableRoot(body)
    root.render()
    (key,) = list(root.definitions)

    root.edit(key, 4.0)

    assert root.output == 8.0
    assert list(root.definitions) == [key]


def test_unmounted_site_is_dropped_and_remounts_at_default() -> None:
    mounted = {"extra": True}
    extra = Tweakable("extra", 5, lambda v: v)
    base = Tweakable("base", 1, lambda v: v)

    def body():
        return Group(base, extra) if mounted["extra"] else Group(base)

    root = TweakableRoot(body)
    root.render()
    root.edit(extra.key, 50)
    assert root.output == [1, 50]

    mounted["extra"] = False
    root.render()
    assert extra.key not in root.definitions
    assert extra.key not in root.values

    mounted["extra"] = True
    root.render()
    assert root.values[extra.key] == 5
    assert root.output == [1, 5]


def test_stale_edit_is_dropped_silently() -> None:
    mounted = {"on": True}
    node = Tweakable("n", 1, lambda v: v)

    root = TweakableRoot(lambda: node if mounted["on"] else Static(None))
    root.render()
    cell = root.cell(node.key)
    mounted["on"] = False
    root.render()
    passes = root.pass_count

    assert root.edit(node.key, 9) is False
    cell.value = 9

    assert root.pass_count == passes
    assert root.cell(node.key) is None
    assert cell.value == 1


def test_edit_before_first_render_is_dropped() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)

    assert root.edit(padding.key, 20) is False
    assert root.state is RootState.IDLE


def test_edit_with_wrong_type_is_fatal() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()

    with pytest.raises(TweakableTypeError):
        root.edit(padding.key, "wide")
    assert root.values[padding.key] == 10


def test_bool_is_not_accepted_for_a_numeric_site() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()

    with pytest.raises(TweakableTypeError):
        root.edit(padding.key, True)
    assert type(root.output["padding"]) is int
    assert root.values[padding.key] == 10


def test_edit_during_pass_is_coalesced_into_one_follow_up_pass() -> None:
    node = Tweakable("n", 1, lambda v: v)
    calls = []
    root = None

    def body():
        calls.append(len(calls))
        if len(calls) == 2:
            root.edit(node.key, 5)
        return node

    root = TweakableRoot(body)
    root.render()
    root.edit(node.key, 3)

    assert len(calls) == 3
    assert root.output == 5
    assert root.values[node.key] == 5


def test_failed_pass_leaves_previous_tables_in_place() -> None:
    fail = {"now": False}
    node = Tweakable("n", 1, lambda v: v)
    other = Tweakable("other", 2, lambda v: v)

    def body():
        if fail["now"]:
            return Group(other, Component(lambda: 1 / 0))
        return Group(node)

    root = TweakableRoot(body)
    root.render()
    before = (root.definitions, root.values, root.output)

    fail["now"] = True
    with pytest.raises(ZeroDivisionError):
        root.render()

    assert (root.definitions, root.values, root.output) == before
    assert other.key not in root.definitions
    assert root.state is RootState.SETTLED


def test_events_of_a_failed_render_are_not_reported_later() -> None:
    def content(p):
        if p == 13:
            raise RuntimeError("unlucky padding")
        return p

    node = Tweakable("padding", 10, content)
    root = TweakableRoot(node)
    root.render()
    seen = []
    root.add_hook(seen.append)

    with pytest.raises(RuntimeError):
        root.edit(node.key, 13)
    assert seen == []

    root.edit(node.key, 12)

    assert [(event.old, event.new) for event in seen] == [(13, 12)]


def test_editor_entries_are_sorted_by_site_key() -> None:
    late = Tweakable("late", 1, lambda v: v, key=SiteKey("a.x", 10, 2))
    early = Tweakable("early", 2, lambda v: v, key=SiteKey("a.x", 5, 1))
    root = TweakableRoot(Group(late, early))
    root.render()

    assert [desc.label for _, desc in root.editor_entries()] == ["early", "late"]


def test_editors_are_built_lazily_in_display_order() -> None:
    built = []

    def editor(label, cell):
        built.append(label)
        return (label, cell.value)

    late = Tweakable("late", 1, lambda v: v, editor, key=SiteKey("a.x", 10, 2))
    early = Tweakable("early", 2, lambda v: v, editor, key=SiteKey("a.x", 5, 1))
    root = TweakableRoot(Group(late, early))
    root.render()
    assert built == []

    editors = root.editors()

    assert [widget for _, widget in editors] == [("early", 2), ("late", 1)]


def test_editors_are_reused_and_release_replaced_widgets() -> None:
    key = SiteKey.named("padding")
    label = {"now": "padding"}
    pushed = []

    def editor(name, cell):
        cell.watch(lambda v: pushed.append((name, v)))
        return name

    root = TweakableRoot(lambda: Tweakable(label["now"], 10, lambda p: p, editor, key=key))
    root.render()

    first = root.editors()
    for _ in range(4):
        assert root.editors() == first
    assert root.cell(key).watcher_count == 1

    label["now"] = "gap"
    root.render()
    assert root.editors() == [(key, "gap")]
    assert root.cell(key).watcher_count == 1

    pushed.clear()
    root.edit(key, 4)
    assert pushed == [("gap", 4)]


def test_grouping_does_not_change_collected_definitions() -> None:
    a = Tweakable("a", 1, lambda v: v)
    b = Tweakable("b", 2, lambda v: v)
    c = Tweakable("c", 3, lambda v: v)

    left = TweakableRoot(Group(Group(a, b), c))
    right = TweakableRoot(Group(a, Group(b, c)))
    flat = TweakableRoot(Group(a, b, c))
    for root in (left, right, flat):
        root.render()

    labels = [[desc.label for desc in root.definitions.values()] for root in (left, right, flat)]
    assert labels[0] == labels[1] == labels[2] == ["a", "b", "c"]


def test_duplicate_key_in_one_pass_keeps_last_in_traversal_order() -> None:
    key = SiteKey.named("shared")
    first = Tweakable("first", 1, lambda v: v, key=key)
    second = Tweakable("second", 2, lambda v: v, key=key)
    root = TweakableRoot(Group(first, second))

    root.render()

    assert root.definitions[key].label == "second"
    assert root.values[key] == 2


def test_raise_policy_fails_the_pass_on_duplicate_keys() -> None:
    key = SiteKey.named("shared")
    tree = Group(Tweakable("first", 1, lambda v: v, key=key), Tweakable("second", 2, lambda v: v, key=key))
    root = TweakableRoot(tree, TweakableConfig(collision_policy="raise"))

    with pytest.raises(SiteCollisionError):
        root.render()
    assert root.state is RootState.IDLE
    assert len(root.definitions) == 0


def test_unknown_collision_policy_is_rejected() -> None:
    with pytest.raises(ValueError):
        TweakableConfig(collision_policy="ignore")  # type: ignore[arg-type]


def test_reset_restores_defaults_and_reports_events() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()
    root.edit(padding.key, 99)
    root.edit(tree.key, Color("blue"))
    events = []
    root.add_hook(events.append)

    root.reset(padding.key)
    assert root.values[padding.key] == 10
    assert root.values[tree.key] == "blue"

    root.reset()
    assert root.output == {"padding": 10, "color": "white"}
    assert [(event.label, event.reason) for event in events] == [
        ("padding", "reset"),
        ("padding", "reset"),
        ("color", "reset"),
    ]


def test_cell_writes_dispatch_edits_and_refresh_watchers() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()
    cell = root.cell(padding.key)
    seen = []
    cell.watch(seen.append)

    cell.value = 15

    assert root.output["padding"] == 15
    assert seen == [15]
    assert root.cell(padding.key) is cell


def test_hooks_receive_edit_events_after_render() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()
    seen = []

    def hook(event):
        seen.append((event.key, event.old, event.new, root.output["padding"]))

    hook_id = root.add_hook(hook)
    root.edit(padding.key, 12)

    assert hook_id == "hook:1"
    assert seen == [(padding.key, 10, 12, 12)]


def test_explicit_hook_namespace_id_bumps_auto_counter() -> None:
    root = TweakableRoot(Static(None))

    explicit = root.add_hook(lambda _event: None, hook_id="hook:10")
    auto = root.add_hook(lambda _event: None)

    assert explicit == "hook:10"
    assert auto == "hook:11"


def test_unhashable_hook_id_raises_type_error() -> None:
    root = TweakableRoot(Static(None))

    with pytest.raises(TypeError):
        root.add_hook(lambda _event: None, hook_id=[])


def test_failing_hook_warns_without_blocking_other_hooks() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()
    ok_calls = []

    def failing_hook(_event):
        raise RuntimeError("intentional hook failure")

    root.add_hook(failing_hook, hook_id="fail-hook")
    root.add_hook(lambda event: ok_calls.append(event.new), hook_id="ok-hook")

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        root.edit(padding.key, 25)

    assert ok_calls == [25]
    assert any("Hook fail-hook failed" in str(w.message) for w in caught)


def test_removed_hook_is_not_called() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()
    calls = []
    hook_id = root.add_hook(calls.append)
    root.remove_hook(hook_id)

    root.edit(padding.key, 11)

    assert calls == []
    assert root.get_hooks() == {}


def test_snapshot_supports_label_lookup() -> None:
    padding, tree = _padding_and_color()
    root = TweakableRoot(tree)
    root.render()
    root.edit(padding.key, 20)

    snap = root.snapshot()

    assert list(snap) == sorted([padding.key, tree.key])
    assert snap["padding"]["value"] == 20
    assert snap["padding"]["default"] == 10
    assert snap.value_map()["color"] == "white"
    assert snap[tree.key]["caption"] == tree.key.caption


def test_snapshot_rejects_ambiguous_labels() -> None:
    first = Tweakable("padding", 1, lambda v: v)
    second = Tweakable("padding", 2, lambda v: v)
    root = TweakableRoot(Group(first, second))
    root.render()

    snap = root.snapshot()

    with pytest.raises(KeyError, match="Ambiguous label"):
        snap["padding"]
    assert snap[second.key]["value"] == 2


def test_content_must_be_view_or_callable() -> None:
    with pytest.raises(TypeError):
        TweakableRoot(42)
