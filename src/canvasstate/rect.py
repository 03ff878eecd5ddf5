"""Pure geometry on grid rectangles (x, y, width, height in grid cells)."""

from typing import Callable, Sequence, Tuple

from canvasstate.errors import InvalidRectError

Rect = Tuple[int, int, int, int]
Delta = Tuple[int, int]


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_rect(rect: Sequence[int]) -> Rect:
    """Return rect as a tuple, raising InvalidRectError if it breaks grid invariants.

    Origin must be non-negative, size at least one cell.
    """
    try:
        values = tuple(rect)
    except TypeError:
        raise InvalidRectError(f"Rect must be a sequence of 4 integers, got {rect!r}") from None

    if len(values) != 4 or not all(_is_int(v) for v in values):
        raise InvalidRectError(f"Rect must be a sequence of 4 integers, got {rect!r}")

    x, y, width, height = values
    if x < 0 or y < 0:
        raise InvalidRectError(f"Rect origin must be non-negative, got {values!r}")
    if width < 1 or height < 1:
        raise InvalidRectError(f"Rect size must be at least 1x1, got {values!r}")
    return values


def move(rect: Rect, delta: Delta) -> Rect:
    """Translate rect by (dx, dy); size is unchanged."""
    x, y, width, height = rect
    dx, dy = delta
    return validate_rect((x + dx, y + dy, width, height))


def resize(rect: Rect, delta: Delta) -> Rect:
    """Grow (or shrink) rect by (dw, dh); origin is unchanged."""
    x, y, width, height = rect
    dw, dh = delta
    return validate_rect((x, y, width + dw, height + dh))


def offset_by(delta: Delta) -> Callable[[Rect], Rect]:
    """Build a rect transform that moves by delta, e.g. for duplication."""
    def transform(rect: Rect) -> Rect:
        return move(rect, delta)
    return transform
