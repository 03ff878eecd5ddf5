"""
Error taxonomy for the canvas state runtime.

Errors are raised where they are detected and propagate to the caller.
Only subscriber callbacks are guarded (see binding_store).
"""


class CanvasStateError(Exception):
    """Base class for all canvasstate errors."""


class NotFoundError(CanvasStateError, KeyError):
    """Update/duplicate targets an id that is not registered."""

    def __init__(self, item_id: str, collection: str = ""):
        self.item_id = item_id
        self.collection = collection
        where = f" in collection {collection!r}" if collection else ""
        super().__init__(f"No item with id {item_id!r}{where}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class UnknownWidgetError(CanvasStateError, LookupError):
    """Widget name matches neither an internal tag nor a registered widget."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown widget {name}")


class DuplicateIdError(CanvasStateError, ValueError):
    """An id (or widget name) is already taken and overwriting was not requested."""


class InvalidRectError(CanvasStateError, ValueError):
    """Rect is not four integers with non-negative origin and positive size."""


class LayoutFormatError(CanvasStateError, ValueError):
    """Persisted layout document is malformed."""


class CommandDisabledError(CanvasStateError):
    """A command was run while its enabled predicate is false."""


class LoadCancelledError(CanvasStateError, RuntimeError):
    """A widget module load was cancelled before it settled."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Load for {key!r} was cancelled")
