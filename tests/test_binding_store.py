"""Tests for BindingStore path-level notification."""
import pytest

from canvasstate import BindingStore, DuplicateIdError, LayoutItem, NotFoundError, resolve_path


def make_item(item_id, rect=(0, 0, 1, 1), props=None, name="clock"):
    return LayoutItem(id=item_id, name=name, rect=rect, props=props or {})


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, value):
        self.calls.append(value)


class TestResolvePath:

    def test_attribute_then_mapping(self):
        item = make_item("a", props={"title": "T"})
        assert resolve_path(item, ["props", "title"]) == "T"

    def test_missing_is_none(self):
        item = make_item("a")
        assert resolve_path(item, ["props", "nope"]) is None
        assert resolve_path(item, ["nope"]) is None

    def test_mapping_entity(self):
        assert resolve_path({"rect": [1]}, ["rect"]) == [1]


class TestRegistration:

    def test_names_follow_insertion_order(self, store):
        items = store.collection("layout-items")
        for item_id in ["c", "a", "b"]:
            items.register_raw(item_id, make_item(item_id))
        assert items.names() == ("c", "a", "b")

    def test_overwrite_keeps_position_and_replaces(self, items):
        replacement = make_item("a", rect=(9, 9, 1, 1))
        items.register_raw("a", replacement)
        assert items.names() == ("a", "b")
        assert items.get("a") is replacement

    def test_overwrite_refused_when_requested(self, items):
        original = items.get("a")
        with pytest.raises(DuplicateIdError):
            items.register_raw("a", make_item("a"), overwrite=False)
        assert items.get("a") is original

    def test_unregister_absent_is_noop(self, items):
        names = Recorder()
        items.use_binding_names(names)
        items.unregister_raw("missing")
        assert names.calls == []
        assert items.names() == ("a", "b")

    def test_sequence_consistency(self, store):
        items = store.collection("layout-items")
        binding = items.use_binding_names()
        expected = []
        ops = [("reg", "x"), ("reg", "y"), ("unreg", "x"), ("upd", "y"), ("reg", "z"), ("reg", "x"), ("unreg", "q")]
        for op, item_id in ops:
            if op == "reg":
                items.register_raw(item_id, make_item(item_id))
                if item_id not in expected:
                    expected.append(item_id)
            elif op == "unreg":
                items.unregister_raw(item_id)
                if item_id in expected:
                    expected.remove(item_id)
            else:
                items.update(item_id, lambda i: i.with_rect((1, 1, 1, 1)))
            assert binding.value == tuple(expected)
        assert items.names() == ("y", "z", "x")

    def test_collections_are_independent(self, store):
        store.register_raw("one", "a", make_item("a"))
        assert "a" not in store.collection("two")
        assert store.collection_names() == ["one", "two"]


class TestNamesBinding:

    def test_fires_on_insert_and_remove_not_update(self, items):
        recorder = Recorder()
        items.use_binding_names(recorder)

        items.update("a", lambda i: i.with_rect((2, 2, 1, 1)))
        assert recorder.calls == []

        items.register_raw("c", make_item("c"))
        items.unregister_raw("a")
        assert recorder.calls == [("a", "b", "c"), ("b", "c")]

    def test_closed_binding_is_silent(self, items):
        recorder = Recorder()
        with items.use_binding_names(recorder) as binding:
            pass
        assert binding.closed
        items.register_raw("c", make_item("c"))
        assert recorder.calls == []
        assert items.subscriber_count() == 0


class TestValuePathBinding:

    def test_initial_value(self, items):
        binding = items.use_binding_value_path("a", ["rect"])
        assert binding.value == (0, 0, 4, 2)

    def test_rect_update_does_not_reach_props_or_other_items(self, items):
        rect_a, props_a, rect_b = Recorder(), Recorder(), Recorder()
        items.use_binding_value_path("a", ["rect"], rect_a)
        items.use_binding_value_path("a", ["props"], props_a)
        items.use_binding_value_path("b", ["rect"], rect_b)

        items.update("a", lambda i: i.with_rect((1, 1, 4, 2)))

        assert rect_a.calls == [(1, 1, 4, 2)]
        assert props_a.calls == []
        assert rect_b.calls == []

    def test_structurally_equal_value_does_not_fire(self, items):
        props = Recorder()
        items.use_binding_value_path("a", ["props"], props)
        items.update("a", lambda i: i.with_props({"tz": "UTC"}))
        assert props.calls == []

    def test_nested_path_granularity(self, items):
        tz, other = Recorder(), Recorder()
        items.use_binding_value_path("a", ["props", "tz"], tz)
        items.use_binding_value_path("a", ["props", "title"], other)
        items.update("a", lambda i: i.with_prop("tz", "CET"))
        assert tz.calls == ["CET"]
        assert other.calls == []

    def test_register_notifies_all_paths_of_id(self, items):
        rect, props = Recorder(), Recorder()
        items.use_binding_value_path("a", ["rect"], rect)
        items.use_binding_value_path("a", ["props"], props)
        items.register_raw("a", make_item("a", rect=(0, 0, 4, 2), props={"tz": "UTC"}))
        assert rect.calls == [(0, 0, 4, 2)]
        assert props.calls == [{"tz": "UTC"}]

    def test_binding_before_registration(self, store):
        items = store.collection("layout-items")
        recorder = Recorder()
        binding = items.use_binding_value_path("late", ["name"], recorder)
        assert binding.value is None
        items.register_raw("late", make_item("late", name="notes"))
        assert recorder.calls == ["notes"]
        assert binding.value == "notes"

    def test_immutable_binding_ignores_changes(self, items):
        binding = items.use_immutable_binding_value_path("a", ["name"])
        items.register_raw("a", make_item("a", name="notes"))
        assert binding.value == "clock"

    def test_failing_callback_does_not_stop_pass(self, items):
        def broken(value):
            raise RuntimeError("boom")

        recorder = Recorder()
        items.use_binding_value_path("a", ["rect"], broken)
        items.use_binding_value_path("a", ["rect"], recorder)
        items.update("a", lambda i: i.with_rect((3, 3, 1, 1)))
        assert recorder.calls == [(3, 3, 1, 1)]


class TestUpdate:

    def test_missing_id(self, items):
        with pytest.raises(NotFoundError):
            items.update("missing", lambda i: i)

    def test_not_found_is_key_error(self, items):
        with pytest.raises(KeyError):
            items.update("missing", lambda i: i)

    def test_returns_new_item_and_bumps_token(self, items):
        token = items.token
        new = items.update("a", lambda i: i.with_prop("k", 1))
        assert items.get("a") is new
        assert items.token == token + 1

    def test_rejects_id_change(self, items):
        original = items.get("a")
        with pytest.raises(ValueError):
            items.update("a", lambda i: i.copy_as("other"))
        assert items.get("a") is original

    def test_rejects_none(self, items):
        with pytest.raises(ValueError):
            items.update("a", lambda i: None)

    def test_store_level_delegation(self, store, items):
        store.update("layout-items", "a", lambda i: i.with_prop("k", 1))
        assert items.get("a").props["k"] == 1


class TestMutationFromSubscriber:

    def test_later_bindings_end_on_current_value(self, items):
        def normalize(props):
            if props["tz"] != props["tz"].upper():
                items.update("a", lambda i: i.with_prop("tz", props["tz"].upper()))

        early = items.use_binding_value_path("a", ["props"], normalize)
        late_calls = Recorder()
        late = items.use_binding_value_path("a", ["props"], late_calls)

        items.update("a", lambda i: i.with_prop("tz", "cet"))

        assert items.get("a").props == {"tz": "CET"}
        assert early.value == {"tz": "CET"}
        assert late.value == items.get("a").props
        assert late_calls.calls == [{"tz": "cet"}, {"tz": "CET"}]

    def test_nested_passes_delivered_in_mutation_order(self, items):
        order = []

        def on_names(names):
            order.append(("names", names))
            if "c" not in items:
                items.register_raw("c", make_item("c"))

        items.use_binding_names(on_names)
        items.use_binding_names(lambda names: order.append(("second", names)))

        items.unregister_raw("b")

        assert order == [
            ("names", ("a",)),
            ("second", ("a",)),
            ("names", ("a", "c")),
            ("second", ("a", "c")),
        ]
