"""
Layout item and widget reference dataclasses, plus the layout.json codec.

Design Philosophy: Correct by Construction
- Immutable items (frozen dataclass); changes go through replace()
- props is always a dict, never None
- Widget reference kind is decided once, at construction, not re-parsed per render
"""

import copy
import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Union

from canvasstate.errors import LayoutFormatError
from canvasstate.rect import Rect, validate_rect

INTERNAL_PREFIX = "internal:"


@dataclass(frozen=True)
class InternalRef:
    """Reference to a built-in component, written as ``internal:<tag>``."""
    tag: str

    @property
    def name(self) -> str:
        return f"{INTERNAL_PREFIX}{self.tag}"


@dataclass(frozen=True)
class RegisteredRef:
    """Reference to a widget in the WidgetRegistry."""
    widget_name: str

    @property
    def name(self) -> str:
        return self.widget_name


WidgetRef = Union[InternalRef, RegisteredRef]


def parse_widget_ref(name: str) -> WidgetRef:
    """Classify a widget type name.

    >>> parse_widget_ref("internal:Title")
    InternalRef(tag='Title')
    >>> parse_widget_ref("clock")
    RegisteredRef(widget_name='clock')
    """
    if not isinstance(name, str) or not name:
        raise ValueError(f"Widget name must be a non-empty string, got {name!r}")
    if name.startswith(INTERNAL_PREFIX):
        tag = name[len(INTERNAL_PREFIX):]
        if not tag:
            raise ValueError(f"Internal widget name has no tag: {name!r}")
        return InternalRef(tag)
    return RegisteredRef(name)


@dataclass(frozen=True)
class LayoutItem:
    """A placed widget instance.

    Attributes:
        id: Stable identifier, unique within its collection
        name: Widget type tag (registry key or ``internal:<tag>``)
        rect: (x, y, width, height) in grid cells
        props: Widget configuration, owned by this item
        ref: Derived from name at construction
    """
    id: str
    name: str
    rect: Rect
    props: Dict[str, Any] = field(default_factory=dict)
    ref: WidgetRef = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"LayoutItem id must be a non-empty string, got {self.id!r}")
        object.__setattr__(self, 'rect', validate_rect(self.rect))
        if self.props is None:
            object.__setattr__(self, 'props', {})
        elif not isinstance(self.props, dict):
            object.__setattr__(self, 'props', dict(self.props))
        object.__setattr__(self, 'ref', parse_widget_ref(self.name))

    def with_rect(self, rect: Rect) -> 'LayoutItem':
        return replace(self, rect=rect)

    def with_props(self, props: Dict[str, Any]) -> 'LayoutItem':
        return replace(self, props=props)

    def with_prop(self, key: str, value: Any) -> 'LayoutItem':
        """Copy with one props key set; other keys are shared, not copied."""
        return replace(self, props={**self.props, key: value})

    def copy_as(self, new_id: str, rect: Optional[Rect] = None) -> 'LayoutItem':
        """Independent copy under a new id (props deep-copied)."""
        return LayoutItem(
            id=new_id,
            name=self.name,
            rect=self.rect if rect is None else rect,
            props=copy.deepcopy(self.props),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Export to a JSON-serializable layout record."""
        return {
            'id': self.id,
            'name': self.name,
            'rect': list(self.rect),
            'props': self.props,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayoutItem':
        """Import from a layout record. Unknown record keys are ignored."""
        if not isinstance(data, dict):
            raise LayoutFormatError(f"Layout record must be an object, got {type(data).__name__}")
        try:
            return cls(
                id=data['id'],
                name=data['name'],
                rect=data['rect'],
                props=data.get('props') or {},
            )
        except KeyError as e:
            raise LayoutFormatError(f"Layout record missing field {e.args[0]!r}: {data!r}") from None
        except (TypeError, ValueError) as e:
            raise LayoutFormatError(f"Invalid layout record {data!r}: {e}") from e


def dump_layout(items: Iterable[LayoutItem], indent: Optional[int] = 2) -> str:
    """Serialize items, in the given order, to the layout.json format."""
    return json.dumps([item.to_dict() for item in items], indent=indent)


def load_layout(text: str) -> List[LayoutItem]:
    """Parse a layout.json document. Duplicate ids are rejected."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LayoutFormatError(f"Layout is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise LayoutFormatError(f"Layout must be a JSON array, got {type(data).__name__}")

    items = [LayoutItem.from_dict(record) for record in data]
    seen = set()
    for item in items:
        if item.id in seen:
            raise LayoutFormatError(f"Duplicate item id in layout: {item.id!r}")
        seen.add(item.id)
    return items
