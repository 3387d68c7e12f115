"""
Collection decorators built on CollectionEnvelope.

Each one materializes a lazy sequence decorator into its backing collection
when a collection operation is invoked.
"""

from typing import Any, Callable, Optional, TypeVar

from envelope import CollectionEnvelope
from lazy import Filtered, Head, Mapped, replayable
from models import RefreshPolicy
from utils import resolve_count

T = TypeVar("T")


class HeadOf(CollectionEnvelope):
    """
    The first num elements of a source collection or iterable.

    Fewer elements in the source means all of them; the rest of the source
    is never pulled, so infinite iterables are fine.
    """

    def __init__(self, num: int, source, refresh: Optional[RefreshPolicy] = None):
        super().__init__(refresh)
        self._num = resolve_count(num, "head")
        self._source = replayable(source)

    @classmethod
    def of(cls, num: int, *items) -> "HeadOf":
        return cls(num, items)

    def _materialize(self):
        return self._backing(Head(self._num, self._source))


class MappedOf(CollectionEnvelope):
    """Collection of fn applied to each source element, in source order"""

    def __init__(self, fn: Callable[[T], Any], source,
                 refresh: Optional[RefreshPolicy] = None):
        super().__init__(refresh)
        self._fn = fn
        self._source = replayable(source)

    def _materialize(self):
        return self._backing(Mapped(self._fn, self._source))


class FilteredOf(CollectionEnvelope):

    def __init__(self, pred: Callable[[T], bool], source,
                 refresh: Optional[RefreshPolicy] = None):
        super().__init__(refresh)
        self._pred = pred
        self._source = replayable(source)

    def _materialize(self):
        return self._backing(Filtered(self._pred, self._source))
