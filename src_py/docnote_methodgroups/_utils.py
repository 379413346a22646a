from __future__ import annotations

from collections.abc import Callable
from collections.abc import Hashable
from collections.abc import Iterable
from typing import Any


def group_by[T, K: Hashable](
        items: Iterable[T],
        key_fn: Callable[[T], K],
        *,
        sort_key: Callable[[K], Any] | None = None
        ) -> list[tuple[K, list[T]]]:
    """Groups ``items`` by the key computed by ``key_fn``, returning
    ``(key, members)`` pairs sorted by key. Members retain the order in
    which they were first encountered.

    If the keys don't have a natural ordering (or if you want a
    different one), pass ``sort_key``; it gets applied to the group
    key, not to the members.
    """
    groups: dict[K, list[T]] = {}
    for item in items:
        groups.setdefault(key_fn(item), []).append(item)

    if sort_key is None:
        return sorted(groups.items(), key=lambda pair: pair[0])
    else:
        return sorted(groups.items(), key=lambda pair: sort_key(pair[0]))
