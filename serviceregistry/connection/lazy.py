"""Lazily materialized collections owned by a revision.

A collection is in one of three states:

- ABSENT: nothing backs it (e.g. metadata of a draft revision)
- UNLOADED: a loader is bound but has not been called yet
- LOADED: items are in memory, possibly none

Projections branch on whether a collection is present, never on whether
it happens to be empty.
"""

from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")

Loader = Callable[[], Iterable[T]]


class CollectionState(str, Enum):
    """Materialization state of a LazyCollection."""

    ABSENT = "absent"
    UNLOADED = "unloaded"
    LOADED = "loaded"


class LazyCollection(Generic[T]):
    """Ordered collection loaded from a store at most once."""

    def __init__(
        self,
        state: CollectionState,
        *,
        loader: Loader[T] | None = None,
        items: Iterable[T] = (),
    ) -> None:
        if state == CollectionState.UNLOADED and loader is None:
            raise ValueError("An unloaded collection needs a loader")
        self._state = state
        self._loader = loader
        self._items: list[T] = list(items)
        # Leading items known to be written to the backing store
        self._synced = 0

    @classmethod
    def absent(cls) -> "LazyCollection[T]":
        return cls(CollectionState.ABSENT)

    @classmethod
    def deferred(cls, loader: Loader[T]) -> "LazyCollection[T]":
        return cls(CollectionState.UNLOADED, loader=loader)

    @classmethod
    def loaded(cls, items: Iterable[T] = ()) -> "LazyCollection[T]":
        return cls(CollectionState.LOADED, items=items)

    @property
    def state(self) -> CollectionState:
        return self._state

    @property
    def is_present(self) -> bool:
        """True when the collection is backed, loaded or not."""
        return self._state != CollectionState.ABSENT

    @property
    def is_loaded(self) -> bool:
        return self._state == CollectionState.LOADED

    def items(self) -> tuple[T, ...]:
        """Return the items, calling the loader on first access.

        Loader errors propagate and leave the collection unloaded.
        """
        if self._state == CollectionState.UNLOADED:
            if self._loader is None:
                raise RuntimeError("Unloaded collection lost its loader")
            self._items = list(self._loader())
            self._synced = len(self._items)
            self._state = CollectionState.LOADED
            self._loader = None
        return tuple(self._items)

    def append(self, item: T) -> None:
        """Append an item, loading stored items first so none are lost."""
        if self._state == CollectionState.ABSENT:
            self._state = CollectionState.LOADED
        elif self._state == CollectionState.UNLOADED:
            self.items()
        self._items.append(item)

    @property
    def synced_count(self) -> int:
        """Number of leading items already in the store.

        Items read through the loader count as synced; appended ones do not until
        mark_synced() is called after writing them.
        """
        return self._synced

    def unsynced(self) -> tuple[T, ...]:
        """Items appended since the collection was loaded or last synced."""
        return tuple(self._items[self._synced :])

    def mark_synced(self) -> None:
        """Record that every current item has been written to the store."""
        self._synced = len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self.items())

    def __repr__(self) -> str:
        if self._state == CollectionState.LOADED:
            return f"LazyCollection(loaded, {len(self._items)} items)"
        return f"LazyCollection({self._state.value})"
