"""Enumeration of candidate mine patterns around a revealed cell."""

from collections import defaultdict
from typing import DefaultDict, FrozenSet, Hashable, Iterable, List, Tuple, TypeVar

from .errors import InvalidArityError

T = TypeVar("T", bound=Hashable)


def _pairs(pool: Tuple[T, ...]) -> List[Tuple[T, T]]:
    """Return every 2-subset of pool as an ordered pair (earlier, later)."""
    return [
        (pool[i], later)
        for i in range(len(pool))
        for later in pool[i + 1:]
    ]


def _extend(
    chains: List[Tuple[T, ...]],
    successors: DefaultDict[T, List[T]],
    k: int,
) -> List[Tuple[T, ...]]:
    """Grow chains one element at a time until each holds k elements."""
    while chains and len(chains[0]) < k:
        chains = [
            chain + (nxt,)
            for chain in chains
            for nxt in successors[chain[-1]]
        ]
    return chains


def k_subsets(items: Iterable[T], k: int) -> List[FrozenSet[T]]:
    """
    Return every distinct k-element subset of items.

    The 2-subsets are built first; each chain is then extended with the second
    element of a pair whose first element equals the chain's last element.
    Because pairs always point forward in input order, every subset is produced
    by exactly one chain, giving C(n, k) results with no duplicates.

    Args:
        items: Elements to choose from. Duplicates are ignored and input order
            is kept, so the output order is deterministic.
        k: Subset size.

    Returns:
        A list of frozensets. For ``k == 0`` the list is empty rather than
        holding a single empty set.

    Raises:
        InvalidArityError: If k < 0 or k > number of distinct items.
    """
    pool: Tuple[T, ...] = tuple(dict.fromkeys(items))
    n = len(pool)

    if k < 0 or k > n:
        raise InvalidArityError(k, n)
    if k == n:
        return [frozenset(pool)] if n else []
    if k == 0:
        return []
    if k == 1:
        return [frozenset((item,)) for item in pool]

    pairs = _pairs(pool)
    successors: DefaultDict[T, List[T]] = defaultdict(list)
    for head, tail in pairs:
        successors[head].append(tail)

    return [frozenset(chain) for chain in _extend(list(pairs), successors, k)]
