"""
BindingStore: keyed entity store with attribute-path subscriptions.

Entities live in named collections (e.g. "layout-items"), keyed by a stable id.
Consumers bind either to the id enumeration of a collection or to a single
attribute path of one entity:

    items = store.collection("layout-items")
    names = items.use_binding_names(on_names)                  # insert/remove only
    rect = items.use_binding_value_path("a", ["rect"], on_rect)  # rect of "a" only

Granularity: update() compares only the sub-value addressed by each subscribed
path before and after the transform, so an unrelated attribute change never
reaches a dependent binding.

Thread safety: Not thread-safe (all operations expected on the event loop thread).
Mutations are synchronous; the notification pass completes before they return.
A mutation made by a subscriber while a pass is running is applied to the
store at once, but its notifications are queued and delivered after the
current pass, so bindings see values in mutation order.
"""
import logging
from collections import deque
from collections.abc import Mapping
from typing import (
    Any, Callable, Deque, Dict, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar,
)

from canvasstate.errors import DuplicateIdError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar('T')

Path = Tuple[str, ...]
NamesCallback = Callable[[Tuple[str, ...]], None]
ValueCallback = Callable[[Any], None]


def resolve_path(entity: Any, path: Sequence[str]) -> Any:
    """Resolve a shallow path on an entity; missing values resolve to None.

    The first element is an attribute (or mapping key, for dict entities);
    later elements index into mappings.
    """
    value = entity
    for i, key in enumerate(path):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(key)
        elif i == 0:
            value = getattr(value, key, None)
        else:
            return None
    return value


def _changed(old: Any, new: Any) -> bool:
    """Reference/structural inequality."""
    if old is new:
        return False
    try:
        return bool(old != new)
    except Exception:
        # Values whose __eq__ cannot answer are treated as changed
        return True


class Binding:
    """Base class for live bindings. Closing detaches it from the collection."""

    def __init__(self, collection: 'BindingCollection', callback: Optional[Callable]):
        self._collection = collection
        self._callback = callback
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._collection._detach(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _fire(self, value: Any) -> None:
        if self._callback is None or self.closed:
            return
        try:
            self._callback(value)
        except Exception as e:
            logger.warning(f"Error in binding callback for {self!r}: {e}")


class NamesBinding(Binding):
    """Ordered ids of a collection; refreshed on insert/remove only."""

    def __init__(self, collection: 'BindingCollection', callback: Optional[NamesCallback]):
        super().__init__(collection, callback)
        self.value: Tuple[str, ...] = collection.names()

    def _set(self, names: Tuple[str, ...]) -> None:
        self.value = names
        self._fire(names)

    def __repr__(self) -> str:
        return f"NamesBinding(collection={self._collection.name!r})"


class ValuePathBinding(Binding):
    """Value at one attribute path of one entity."""

    def __init__(
        self,
        collection: 'BindingCollection',
        item_id: str,
        path: Path,
        callback: Optional[ValueCallback],
        immutable: bool = False,
    ):
        super().__init__(collection, callback)
        self.item_id = item_id
        self.path = path
        self.immutable = immutable
        self.value: Any = collection.get_path(item_id, path)

    def _set(self, value: Any) -> None:
        self.value = value
        self._fire(value)

    def __repr__(self) -> str:
        return (f"ValuePathBinding(collection={self._collection.name!r}, "
                f"id={self.item_id!r}, path={list(self.path)!r})")


class BindingCollection(Generic[T]):
    """One named collection of entities keyed by id.

    Ids keep insertion order; overwriting an id keeps its position.
    """

    def __init__(self, name: str):
        self.name = name
        self._items: Dict[str, T] = {}
        self._names_bindings: List[NamesBinding] = []
        # id -> bindings on that id, in subscription order
        self._path_bindings: Dict[str, List[ValuePathBinding]] = {}
        self._token: int = 0
        # Pending notification passes, FIFO
        self._queue: Deque[Callable[[], None]] = deque()
        self._notifying = False

    # ========== READ ==========

    @property
    def token(self) -> int:
        """Mutation counter for cache invalidation."""
        return self._token

    def get(self, item_id: str) -> Optional[T]:
        return self._items.get(item_id)

    def require(self, item_id: str) -> T:
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFoundError(item_id, self.name) from None

    def get_path(self, item_id: str, path: Sequence[str]) -> Any:
        item = self._items.get(item_id)
        return None if item is None else resolve_path(item, path)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._items)

    def items(self) -> List[T]:
        return list(self._items.values())

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    # ========== MUTATE ==========

    def register_raw(self, item_id: str, item: T, overwrite: bool = True) -> None:
        """Insert item under item_id.

        Args:
            item_id: Key for the item
            item: The entity
            overwrite: If True (default), an existing id is replaced (last write
                       wins, no merge). If False, DuplicateIdError is raised and
                       nothing changes.
        """
        existed = item_id in self._items
        if existed:
            if not overwrite:
                raise DuplicateIdError(f"Item {item_id!r} already registered in {self.name!r}")
            logger.warning(f"Overwriting existing item {item_id!r} in collection {self.name!r}")

        self._items[item_id] = item
        self._token += 1
        logger.debug(f"Registered item: collection={self.name}, id={item_id}")

        # Every path of this id is (potentially) new
        deliveries = [
            (binding, resolve_path(item, binding.path))
            for binding in self._path_bindings.get(item_id, ())
            if not binding.immutable
        ]
        names = self.names()

        def notify() -> None:
            for binding, value in deliveries:
                binding._set(value)
            self._notify_names(names)

        self._dispatch(notify)

    def unregister_raw(self, item_id: str) -> None:
        """Remove item_id. No-op if it is not registered."""
        if item_id not in self._items:
            logger.debug(f"unregister_raw: {item_id!r} not in {self.name!r}, ignoring")
            return
        del self._items[item_id]
        self._token += 1
        logger.debug(f"Unregistered item: collection={self.name}, id={item_id}")
        names = self.names()
        self._dispatch(lambda: self._notify_names(names))

    def update(self, item_id: str, transform: Callable[[T], T]) -> T:
        """Replace item_id with transform(item) and notify changed paths only.

        Raises:
            NotFoundError: item_id is not registered
            ValueError: transform returned None or an entity with a different id
        """
        old = self.require(item_id)
        new = transform(old)
        if new is None:
            raise ValueError(f"Transform for {item_id!r} returned None")
        new_id = resolve_path(new, ('id',))
        if new_id is not None and new_id != item_id:
            raise ValueError(f"Transform changed id of {item_id!r} to {new_id!r}")

        self._items[item_id] = new
        self._token += 1

        bindings = self._path_bindings.get(item_id, ())
        changed = []
        for binding in list(bindings):
            if binding.immutable:
                continue
            before = resolve_path(old, binding.path)
            after = resolve_path(new, binding.path)
            if _changed(before, after):
                changed.append((binding, after))

        if changed:
            logger.debug(f"update {self.name}/{item_id}: notifying {len(changed)} path binding(s)")

            def notify() -> None:
                for binding, after in changed:
                    binding._set(after)

            self._dispatch(notify)
        return new

    # ========== BIND ==========

    def use_binding_names(self, callback: Optional[NamesCallback] = None) -> NamesBinding:
        """Bind to the ordered id sequence. Fires on insert/remove, not on updates."""
        binding = NamesBinding(self, callback)
        self._names_bindings.append(binding)
        return binding

    def use_binding_value_path(
        self,
        item_id: str,
        path: Sequence[str],
        callback: Optional[ValueCallback] = None,
    ) -> ValuePathBinding:
        """Bind to one attribute path of one item. Fires only when that value changes."""
        binding = ValuePathBinding(self, item_id, tuple(path), callback)
        self._path_bindings.setdefault(item_id, []).append(binding)
        return binding

    def use_immutable_binding_value_path(self, item_id: str, path: Sequence[str]) -> ValuePathBinding:
        """Read a path once; later changes are ignored for the binding's lifetime.

        For attributes fixed after creation, e.g. ``["name"]``.
        """
        return ValuePathBinding(self, item_id, tuple(path), None, immutable=True)

    # ========== INTERNAL ==========

    def _dispatch(self, notify: Callable[[], None]) -> None:
        """Run a notification pass, or queue it if one is already running."""
        self._queue.append(notify)
        if self._notifying:
            return
        self._notifying = True
        try:
            while self._queue:
                self._queue.popleft()()
        finally:
            self._notifying = False

    def _notify_names(self, names: Tuple[str, ...]) -> None:
        for binding in list(self._names_bindings):
            binding._set(names)

    def _detach(self, binding: Binding) -> None:
        if isinstance(binding, NamesBinding):
            if binding in self._names_bindings:
                self._names_bindings.remove(binding)
            return
        bindings = self._path_bindings.get(binding.item_id)
        if bindings and binding in bindings:
            bindings.remove(binding)
            if not bindings:
                del self._path_bindings[binding.item_id]

    def subscriber_count(self) -> int:
        """Number of live bindings. Useful for leak checks."""
        return len(self._names_bindings) + sum(len(b) for b in self._path_bindings.values())


class BindingStore:
    """Named collections of BindingCollection, created on first use.

    Collection-level operations are also exposed keyed by collection name so
    callers holding only the store can use them directly.
    """

    def __init__(self):
        self._collections: Dict[str, BindingCollection] = {}

    def collection(self, name: str) -> BindingCollection:
        if name not in self._collections:
            self._collections[name] = BindingCollection(name)
            logger.debug(f"Created binding collection: {name}")
        return self._collections[name]

    def collection_names(self) -> List[str]:
        return list(self._collections)

    def register_raw(self, collection: str, item_id: str, item: Any, overwrite: bool = True) -> None:
        self.collection(collection).register_raw(item_id, item, overwrite=overwrite)

    def unregister_raw(self, collection: str, item_id: str) -> None:
        self.collection(collection).unregister_raw(item_id)

    def update(self, collection: str, item_id: str, transform: Callable[[Any], Any]) -> Any:
        return self.collection(collection).update(item_id, transform)

    def use_binding_names(self, collection: str, callback: Optional[NamesCallback] = None) -> NamesBinding:
        return self.collection(collection).use_binding_names(callback)

    def use_binding_value_path(
        self,
        collection: str,
        item_id: str,
        path: Sequence[str],
        callback: Optional[ValueCallback] = None,
    ) -> ValuePathBinding:
        return self.collection(collection).use_binding_value_path(item_id, path, callback)

    def use_immutable_binding_value_path(self, collection: str, item_id: str, path: Sequence[str]) -> ValuePathBinding:
        return self.collection(collection).use_immutable_binding_value_path(item_id, path)
