"""
Helpers for splitting work into fixed-size batches.
"""

from itertools import islice
from typing import Iterable, Iterator, TypeVar

T = TypeVar("T")


def chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """
    Yield successive lists of at most `size` items.

    Raises:
        ValueError: If size is not positive
    """
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    iterator = iter(items)
    while batch := list(islice(iterator, size)):
        yield batch


def unique_in_order(items: Iterable[T]) -> list[T]:
    """Drop duplicates, keeping first appearance order."""
    return list(dict.fromkeys(items))
