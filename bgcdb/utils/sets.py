"""
Set algebra over entry ID lists.

Inputs may be unsorted and contain duplicates; every result is deduplicated.

- intersect: elements of b that are also in a, in b's order
- union: elements of either, sorted ascending
- difference: elements of a that are not in b, in a's order
"""

from __future__ import annotations

from typing import Iterable, List

import numpy as np
from numpy.typing import NDArray


def _as_ids(values: Iterable[int]) -> NDArray:
    """Convert an ID sequence to an int64 array (empty input stays integer)."""
    if isinstance(values, np.ndarray):
        return values.astype(np.int64, copy=False)
    return np.fromiter(values, dtype=np.int64)


def _unique_in_order(ids: NDArray) -> NDArray:
    """Drop repeated IDs, keeping the first occurrence of each."""
    if ids.size == 0:
        return ids
    _, first = np.unique(ids, return_index=True)
    return ids[np.sort(first)]


def intersect(a: Iterable[int], b: Iterable[int]) -> List[int]:
    """
    Intersection of two ID lists.

    Args:
        a: IDs to test membership against
        b: IDs whose order the result follows

    Returns:
        Deduplicated IDs present in both, in order of first appearance in b
    """
    a_ids = _as_ids(a)
    b_ids = _as_ids(b)
    hits = b_ids[np.isin(b_ids, a_ids)]
    return _unique_in_order(hits).tolist()


def union(a: Iterable[int], b: Iterable[int]) -> List[int]:
    """
    Union of two ID lists, sorted ascending.

    Input order and duplicates are discarded.
    """
    return np.union1d(_as_ids(a), _as_ids(b)).tolist()


def difference(a: Iterable[int], b: Iterable[int]) -> List[int]:
    """
    IDs of a that are not in b.

    Args:
        a: IDs to keep, in this order
        b: IDs to remove

    Returns:
        Deduplicated IDs of a missing from b, in order of first appearance in a
    """
    a_ids = _as_ids(a)
    b_ids = _as_ids(b)
    kept = a_ids[~np.isin(a_ids, b_ids)]
    return _unique_in_order(kept).tolist()
