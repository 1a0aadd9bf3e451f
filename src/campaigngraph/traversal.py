"""Graph traversal helpers shared by the location tree and quest graph.

Edges are always resolved through an id index built for the current call, so
the helpers here only ever see string ids and a ``neighbours`` callback. Every
walk keeps a visited set, which bounds it by the number of distinct ids even
when the stored data already contains a cycle.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, Protocol, TypeVar


class _Identified(Protocol):
    @property
    def id(self) -> str: ...


_EntityT = TypeVar("_EntityT", bound=_Identified)

Neighbours = Callable[[str], Iterable[str]]


def index_by_id(entities: Iterable[_EntityT]) -> dict[str, _EntityT]:
    """Return a lookup table keyed by entity id.

    When the snapshot contains the same id more than once the first record
    wins, matching a linear ``find`` over the collection.
    """

    index: dict[str, _EntityT] = {}
    for entity in entities:
        index.setdefault(entity.id, entity)
    return index


def walk_depth_first(
    start_ids: Iterable[str],
    neighbours: Neighbours,
    *,
    exclude: Iterable[str] = (),
) -> Iterator[str]:
    """Yield every id reachable from ``start_ids`` in depth-first pre-order.

    Args:
        start_ids: Ids to begin the walk from, visited in the given order.
        neighbours: Callback returning the outgoing edges for an id. Unknown ids
            should return an empty iterable.
        exclude: Ids treated as already visited. They are never yielded and the
            walk does not continue through them.
    """

    visited: set[str] = set(exclude)
    frontier: list[str] = list(reversed(tuple(start_ids)))

    while frontier:
        current = frontier.pop()
        if current in visited:
            continue

        visited.add(current)
        yield current
        frontier.extend(
            target for target in reversed(tuple(neighbours(current)))
            if target not in visited
        )


def find_cycle(start: str, neighbours: Neighbours) -> tuple[str, ...]:
    """Return the ids forming the first cycle reachable from ``start``.

    The search keeps the current path on an explicit stack. Reaching an id that
    is still on the path closes a cycle, and the returned tuple runs from that
    id to the last id before the back edge. An empty tuple means every path
    from ``start`` terminates.
    """

    visited: set[str] = {start}
    path: list[str] = [start]
    on_path: set[str] = {start}
    pending: list[Iterator[str]] = [iter(neighbours(start))]

    while pending:
        try:
            target = next(pending[-1])
        except StopIteration:
            pending.pop()
            on_path.discard(path.pop())
            continue

        if target in on_path:
            return tuple(path[path.index(target):])
        if target in visited:
            continue

        visited.add(target)
        path.append(target)
        on_path.add(target)
        pending.append(iter(neighbours(target)))

    return ()


__all__ = ["Neighbours", "find_cycle", "index_by_id", "walk_depth_first"]
