"""Tests for LayoutItem, widget references and the layout.json codec."""
import json

import pytest

from canvasstate import (
    InternalRef,
    InvalidRectError,
    LayoutFormatError,
    LayoutItem,
    RegisteredRef,
    dump_layout,
    load_layout,
    parse_widget_ref,
)


class TestWidgetRef:

    def test_internal(self):
        ref = parse_widget_ref("internal:Title")
        assert ref == InternalRef("Title")
        assert ref.name == "internal:Title"

    def test_registered(self):
        ref = parse_widget_ref("clock")
        assert ref == RegisteredRef("clock")
        assert ref.name == "clock"

    @pytest.mark.parametrize("name", ["", "internal:", None])
    def test_invalid(self, name):
        with pytest.raises(ValueError):
            parse_widget_ref(name)


class TestLayoutItem:

    def test_ref_decided_at_construction(self):
        item = LayoutItem(id="t", name="internal:Title", rect=(0, 0, 1, 1))
        assert item.ref == InternalRef("Title")

    def test_props_never_absent(self):
        item = LayoutItem(id="t", name="clock", rect=(0, 0, 1, 1), props=None)
        assert item.props == {}

    def test_rect_normalized_to_tuple(self):
        item = LayoutItem(id="t", name="clock", rect=[1, 2, 3, 4])
        assert item.rect == (1, 2, 3, 4)

    def test_rejects_invalid_rect(self):
        with pytest.raises(InvalidRectError):
            LayoutItem(id="t", name="clock", rect=(0, 0, 0, 1))

    def test_is_immutable(self):
        item = LayoutItem(id="t", name="clock", rect=(0, 0, 1, 1))
        with pytest.raises(AttributeError):
            item.rect = (1, 1, 1, 1)

    def test_with_prop_leaves_original(self):
        item = LayoutItem(id="t", name="clock", rect=(0, 0, 1, 1), props={"a": 1})
        changed = item.with_prop("b", 2)
        assert changed.props == {"a": 1, "b": 2}
        assert item.props == {"a": 1}

    def test_copy_as_deep_copies_props(self):
        item = LayoutItem(id="t", name="clock", rect=(0, 0, 1, 1), props={"nested": {"k": 1}})
        clone = item.copy_as("t2")
        clone.props["nested"]["k"] = 2
        assert item.props["nested"]["k"] == 1
        assert clone.id == "t2" and clone.rect == item.rect


class TestLayoutCodec:

    def test_record_format(self):
        item = LayoutItem(id="t", name="clock", rect=(0, 1, 2, 3), props={"tz": "UTC"})
        assert json.loads(dump_layout([item])) == [
            {"id": "t", "name": "clock", "rect": [0, 1, 2, 3], "props": {"tz": "UTC"}}
        ]

    def test_load_preserves_order_and_unknown_props(self):
        text = json.dumps([
            {"id": "z", "name": "clock", "rect": [0, 0, 1, 1], "props": {"future": [1, 2]}},
            {"id": "a", "name": "internal:Title", "rect": [1, 1, 1, 1], "extra": True},
        ])
        items = load_layout(text)
        assert [i.id for i in items] == ["z", "a"]
        assert items[0].props == {"future": [1, 2]}
        assert items[1].props == {}

    @pytest.mark.parametrize("text", [
        "not json",
        "{}",
        '[{"id": "a", "name": "clock"}]',
        '[{"id": "a", "name": "clock", "rect": [0, 0, 0, 0]}]',
        '[{"id": "a", "name": "clock", "rect": [0, 0, 1, 1]}, {"id": "a", "name": "clock", "rect": [0, 0, 1, 1]}]',
        '[3]',
    ])
    def test_malformed(self, text):
        with pytest.raises(LayoutFormatError):
            load_layout(text)
