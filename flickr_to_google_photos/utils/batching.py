"""
Chunking and order-preserving deduplication helpers.
"""
from typing import Hashable, Iterable, Iterator, List, Sequence, TypeVar

T = TypeVar('T')
H = TypeVar('H', bound=Hashable)


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """
    Yield consecutive slices of ``items`` holding at most ``size`` elements.

    The number of slices is ``ceil(len(items) / size)``; an empty sequence
    yields nothing.
    """
    if size < 1:
        raise ValueError("size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def dedupe_preserving_order(items: Iterable[H]) -> List[H]:
    """Drop repeated items, keeping the first occurrence of each in order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
