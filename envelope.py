"""
Collection envelopes.

An envelope exposes the whole collection contract while every call is
forwarded to one wrapped collection. Subclasses only describe how to build
that collection (``_materialize``); the refresh policy decides whether it is
built again for each call or once for the envelope's lifetime.

Envelopes are not thread-safe.
"""

import logging
from abc import abstractmethod
from collections.abc import Collection, Iterable, MutableSequence, MutableSet, Sequence
from typing import Any, Iterator, List, Optional

from lazy import LazySequence, replayable
from models import RefreshPolicy, get_settings
from utils import (
    LOGGER_NAME,
    Unchecked,
    UnsupportedOperationError,
    structural_equals,
    structural_hash,
)

logger = logging.getLogger(f"{LOGGER_NAME}.envelope")

_MISSING = object()


class ReadOnlyList(Sequence):
    """
    Sequence over a list with no mutation API.

    Backing type for collections materialized from a source description:
    mutating them through an envelope raises UnsupportedOperationError.
    """

    __slots__ = ('_data',)

    def __init__(self, data: list):
        self._data = data

    def __getitem__(self, index):
        return self._data[index]

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator:
        return iter(self._data)

    def __contains__(self, item) -> bool:
        return item in self._data

    def __repr__(self) -> str:
        return repr(self._data)

    def __eq__(self, other) -> bool:
        return structural_equals(self, other)

    def __hash__(self) -> int:
        return structural_hash(self)


def _concrete(value) -> Collection:
    if isinstance(value, LazySequence):
        return ReadOnlyList(value.to_list())
    if isinstance(value, Collection):
        return value
    return ReadOnlyList(list(value))


class CollectionEnvelope(Collection):
    """
    Base collection decorator.

    Subclasses implement ``_materialize``. ``refresh`` may be set per class
    or per instance; ``None`` falls back to the configured default.
    """

    refresh: Optional[RefreshPolicy] = None

    def __init__(self, refresh: Optional[RefreshPolicy] = None):
        if refresh is not None:
            self.refresh = RefreshPolicy(refresh)
        self._cached = _MISSING

    @abstractmethod
    def _materialize(self) -> Collection:
        """Build the wrapped collection from the source description"""

    # ---------- backing collection ----------

    def _policy(self) -> RefreshPolicy:
        return self.refresh or get_settings().default_refresh

    def _collection(self) -> Collection:
        if self._policy() is RefreshPolicy.CACHE:
            if self._cached is _MISSING:
                self._cached = self._build()
            return self._cached
        return self._build()

    def _build(self) -> Collection:
        col = self._materialize()
        logger.debug(f"{type(self).__name__}: materialized {type(col).__name__}")
        return col

    def _backing(self, items: Iterable) -> Collection:
        """Cached envelopes keep a mutable list, recomputed ones a read-only one"""
        if self._policy() is RefreshPolicy.CACHE:
            return items.to_list() if isinstance(items, LazySequence) else list(items)
        return _concrete(items)

    def _mutable(self, operation: str):
        col = self._collection()
        if not isinstance(col, (MutableSequence, MutableSet)):
            raise UnsupportedOperationError(
                f"{operation}() is not supported by {type(col).__name__}"
            )
        return col

    # ---------- queries ----------

    def size(self) -> int:
        return len(self._collection())

    def is_empty(self) -> bool:
        return len(self._collection()) == 0

    def contains(self, item) -> bool:
        return item in self._collection()

    def contains_all(self, items: Iterable) -> bool:
        col = self._collection()
        return all(item in col for item in items)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator:
        return iter(self._collection())

    def __contains__(self, item) -> bool:
        return self.contains(item)

    # ---------- mutation ----------

    def add(self, item) -> bool:
        col = self._mutable("add")
        if isinstance(col, MutableSet):
            before = len(col)
            col.add(item)
            return len(col) != before
        col.append(item)
        return True

    def remove(self, item) -> bool:
        col = self._mutable("remove")
        if isinstance(col, MutableSet):
            if item not in col:
                return False
            col.discard(item)
            return True
        try:
            col.remove(item)
        except ValueError:
            return False
        return True

    def add_all(self, items: Iterable) -> bool:
        col = self._mutable("add_all")
        items = list(items)
        if isinstance(col, MutableSet):
            before = len(col)
            for item in items:
                col.add(item)
            return len(col) != before
        col.extend(items)
        return bool(items)

    def remove_all(self, items: Iterable) -> bool:
        targets = list(items)
        return self._keep("remove_all", lambda element: element not in targets)

    def retain_all(self, items: Iterable) -> bool:
        targets = list(items)
        return self._keep("retain_all", lambda element: element in targets)

    def clear(self):
        self._mutable("clear").clear()

    def _keep(self, operation: str, predicate) -> bool:
        col = self._mutable(operation)
        if isinstance(col, MutableSet):
            dropped = [element for element in col if not predicate(element)]
            for element in dropped:
                col.discard(element)
            return bool(dropped)
        kept = [element for element in col if predicate(element)]
        if len(kept) == len(col):
            return False
        col.clear()
        col.extend(kept)
        return True

    # ---------- snapshots ----------

    def to_array(self, template: Optional[List[Any]] = None) -> List[Any]:
        """
        Snapshot of the elements as a list.

        A template at least as long as the collection is filled in place,
        with the slot after the last element set to None, and returned.
        """
        snapshot = list(self._collection())
        if template is None or len(template) < len(snapshot):
            return snapshot
        template[:len(snapshot)] = snapshot
        if len(template) > len(snapshot):
            template[len(snapshot)] = None
        return template

    def __str__(self) -> str:
        return str(self._collection())

    def __repr__(self) -> str:
        try:
            col = self._collection()
        except Exception as exc:
            logger.debug(f"{type(self).__name__}: repr without a collection: {exc!r}")
            return f"{type(self).__name__}(<unevaluated>)"
        return f"{type(self).__name__}({col!r})"

    # ---------- structural identity ----------

    def __eq__(self, other) -> bool:
        if other is self:
            return True
        # One snapshot for both the size check and the pairwise walk
        try:
            col = self._collection()
        except Exception as exc:
            logger.debug(f"{type(self).__name__}: equality without a collection: {exc!r}")
            return False
        return structural_equals(col, other)

    def __hash__(self) -> int:
        return structural_hash(self._collection())


class CollectionOf(CollectionEnvelope):
    """
    Envelope over a concrete collection, a deferred supplier or an iterable.

    A concrete collection is wrapped as-is. A zero-argument callable is
    evaluated through Unchecked when a collection operation needs it, so its
    failures surface as EvaluationError. A one-shot iterator is replayed,
    so every rebuild sees the same elements. Other iterables are copied into
    a read-only list whenever the collection is rebuilt.
    """

    def __init__(self, source, refresh: Optional[RefreshPolicy] = None):
        super().__init__(refresh)
        self._source = replayable(source)

    @classmethod
    def of(cls, *items) -> "CollectionOf":
        return cls(ReadOnlyList(list(items)))

    def _materialize(self) -> Collection:
        source = self._source
        if callable(source) and not isinstance(source, Iterable):
            return _concrete(Unchecked(source).value())
        return _concrete(source)
