import logging
from collections.abc import Collection, Iterable, Iterator
from itertools import islice
from typing import Any, Callable, List, Optional, Tuple, TypeVar

from utils import LOGGER_NAME, resolve_count, structural_equals, structural_hash

T = TypeVar("T")

logger = logging.getLogger(f"{LOGGER_NAME}.lazy")

_MISSING = object()


class LazySequence(Collection):
    """
    A chainable, lazy sequence. Transformations are stored and applied
    only when you iterate, and every traversal rebuilds the pipeline from
    the source, so transforms run again on each pass.

    The source may be any iterable or a zero-argument callable returning a
    fresh iterable per traversal. A one-shot iterator as source yields its
    elements on the first traversal only.
    """

    def __init__(self, source, ops: Optional[List[Tuple[str, Any]]] = None):
        self._source = source
        self._ops = list(ops or [])    # sequence of ("op_name", callable/arg)

    # --------- chainable operators (lazy) ----------
    def map(self, fn: Callable[[T], Any]) -> "LazySequence":
        return self._with_op(("map", fn))

    def filter(self, pred: Callable[[T], bool]) -> "LazySequence":
        return self._with_op(("filter", pred))

    def skip(self, n: int) -> "LazySequence":
        return self._with_op(("skip", resolve_count(n, "skip")))

    def take(self, n: int) -> "LazySequence":
        return self._with_op(("take", resolve_count(n, "take")))

    # --------- forcing evaluation ----------
    def to_list(self) -> list:
        # list(self) would call __len__ first and traverse twice
        return [item for item in self]

    def reduce(self, fn, initial=_MISSING):
        """Fold items left to right; raises TypeError when empty without initial"""
        it = iter(self)
        acc = initial
        if acc is _MISSING:
            try:
                acc = next(it)
            except StopIteration:
                raise TypeError("reduce() of empty sequence with no initial value") from None
        for item in it:
            acc = fn(acc, item)
        return acc

    def count(self) -> int:
        count = 0
        for _ in self:
            count += 1
        return count

    def first(self, default=None):
        for item in self:
            return item
        return default

    # --------- collection protocol ----------
    def __iter__(self) -> Iterator:
        it = iter(self._open())
        for op, arg in self._ops:
            if op == "map":
                it = map(arg, it)
            elif op == "filter":
                it = filter(arg, it)
            elif op == "skip":
                it = islice(it, arg, None)
            elif op == "take":
                it = islice(it, arg)
            else:
                raise ValueError(f"Unknown op: {op}")
        yield from it

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, item) -> bool:
        return any(x is item or x == item for x in self)

    def __eq__(self, other) -> bool:
        return structural_equals(self, other)

    def __hash__(self) -> int:
        return structural_hash(self)

    # --------- helpers ----------
    def _open(self) -> Iterable:
        source = self._source
        if callable(source) and not isinstance(source, Iterable):
            logger.debug(f"{type(self).__name__}: opening deferred source")
            return source()
        return source

    def _with_op(self, op_tuple) -> "LazySequence":
        return LazySequence(self._source, self._ops + [op_tuple])


class IterableOf(LazySequence):
    """Restartable sequence over literal items: IterableOf(1, 2, 3)"""

    def __init__(self, *items):
        super().__init__(items)


class Mapped(LazySequence):
    """
    Element-wise transform of a source sequence.

    fn is applied on every traversal, once per visited element, and its
    results are never cached: a transform with side effects fires again
    each time the view is walked (len() and equality walk it too). A failure
    raised by fn surfaces unmodified when the failing element is reached.
    """

    def __init__(self, fn: Callable[[T], Any], source):
        super().__init__(source, [("map", fn)])


class Filtered(LazySequence):
    """Elements of the source for which pred is truthy"""

    def __init__(self, pred: Callable[[T], bool], source):
        super().__init__(source, [("filter", pred)])


class Head(LazySequence):
    """
    The first num elements of the source.

    Stops pulling from the source as soon as num elements were produced, so
    it is safe over infinite iterables.
    """

    def __init__(self, num: int, source):
        super().__init__(source, [("take", resolve_count(num, "head"))])


class Skipped(LazySequence):
    """The source without its first num elements"""

    def __init__(self, num: int, source):
        super().__init__(source, [("skip", resolve_count(num, "skip"))])


class Replayed(LazySequence):
    """
    Re-traversable view over a one-shot iterator.

    Elements are pulled from the iterator only when a traversal first needs
    them and are kept for every later traversal, so a bounded walk over an
    infinite iterator stays bounded.
    """

    def __init__(self, iterator: Iterator):
        super().__init__(self._replay)
        self._iterator = iterator
        self._seen = []

    def _replay(self):
        index = 0
        while True:
            if index == len(self._seen):
                try:
                    self._seen.append(next(self._iterator))
                except StopIteration:
                    return
            yield self._seen[index]
            index += 1


def replayable(source):
    """Wrap one-shot iterators in Replayed; other sources pass through"""
    if isinstance(source, Iterator):
        return Replayed(source)
    return source
