"""Hierarchy construction and traversal over location snapshots.

Every function takes the full collection of locations as an argument and
builds a throwaway id index for the call. Dangling references are tolerated
here: a missing child is omitted and a missing parent ends a breadcrumb.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Literal, Mapping, Sequence

from .errors import HierarchyCycleError
from .models import Location, sort_timestamp
from .traversal import index_by_id, walk_depth_first

logger = logging.getLogger(__name__)

LocationSortKey = Literal[
    "name",
    "type",
    "population",
    "created_at",
    "updated_at",
    "sub_location_count",
]


@dataclass
class HierarchyNode:
    """A location placed in the forest along with its resolved children."""

    location: Location
    depth: int
    children: list["HierarchyNode"] = field(default_factory=list)

    def iter_nodes(self) -> list["HierarchyNode"]:
        """Return this node and every node below it in pre-order."""

        ordered: list[HierarchyNode] = []
        stack = [self]
        while stack:
            node = stack.pop()
            ordered.append(node)
            stack.extend(reversed(node.children))
        return ordered


@dataclass(frozen=True)
class MovePlan:
    """Field updates required to reparent a location.

    ``old_parent_sub_locations`` and ``new_parent_sub_locations`` are ``None``
    when there is no (resolvable) parent on that side of the move.
    """

    location_id: str
    old_parent_id: str | None
    new_parent_id: str | None
    old_parent_sub_locations: tuple[str, ...] | None
    new_parent_sub_locations: tuple[str, ...] | None

    @property
    def changes_parent(self) -> bool:
        return self.old_parent_id != self.new_parent_id


@dataclass(frozen=True)
class LocationFilter:
    """Criteria accepted by :func:`filter_locations`.

    Unset fields do not constrain the result. ``parent_location_id`` uses the
    ``match_parent`` flag so that filtering for root locations (parent
    ``None``) is distinguishable from not filtering by parent at all.
    """

    types: tuple[str, ...] = ()
    match_parent: bool = False
    parent_location_id: str | None = None
    has_sub_locations: bool | None = None
    min_population: int | None = None
    max_population: int | None = None


def build_hierarchy(locations: Sequence[Location]) -> list[HierarchyNode]:
    """Arrange ``locations`` into a forest rooted at parentless locations.

    Children are resolved through ``sub_locations`` in their stored order and
    ids that do not exist in ``locations`` are skipped. Each location is placed
    at most once: a sub-location listed twice, or under a second parent, stays
    where the depth-first walk first placed it.

    Raises:
        HierarchyCycleError: If a location lists one of its own ancestors as a
            sub-location.
    """

    index = index_by_id(locations)
    placed: set[str] = set()
    roots: list[HierarchyNode] = []

    for location in locations:
        if not location.is_root or location.id in placed:
            continue

        root = HierarchyNode(location=location, depth=0)
        roots.append(root)
        placed.add(location.id)
        path = [root]
        on_path = {location.id}
        pending = [iter(location.sub_locations)]
        while pending:
            child_id = next(pending[-1], None)
            if child_id is None:
                pending.pop()
                on_path.discard(path.pop().location.id)
                continue

            child = index.get(child_id)
            if child is None:
                logger.debug(
                    "Skipping unknown sub-location '%s' of '%s'",
                    child_id,
                    path[-1].location.id,
                )
                continue

            if child_id in on_path:
                logger.warning(
                    "Sub-location '%s' of '%s' is one of its ancestors",
                    child_id,
                    path[-1].location.id,
                )
                raise HierarchyCycleError(
                    child_id, tuple(node.location.id for node in path)
                )

            if child_id in placed:
                logger.debug(
                    "Skipping sub-location '%s' of '%s'; already placed",
                    child_id,
                    path[-1].location.id,
                )
                continue

            child_node = HierarchyNode(location=child, depth=len(path))
            path[-1].children.append(child_node)
            placed.add(child_id)
            path.append(child_node)
            on_path.add(child_id)
            pending.append(iter(child.sub_locations))

    return roots


def breadcrumb(location: Location, locations: Sequence[Location]) -> list[Location]:
    """Return the ancestor path of ``location`` ordered root first.

    The walk follows ``parent_location_id`` and stops at a root, at a parent id
    that cannot be resolved, or at an id it has already visited. The returned
    list always ends with ``location``.
    """

    index = index_by_id(locations)
    path = [location]
    seen = {location.id}
    current = location

    while current.parent_location_id is not None:
        parent = index.get(current.parent_location_id)
        if parent is None:
            logger.debug(
                "Breadcrumb for '%s' stopped at dangling parent '%s'",
                location.id,
                current.parent_location_id,
            )
            break
        if parent.id in seen:
            logger.warning(
                "Breadcrumb for '%s' found a parent cycle at '%s'",
                location.id,
                parent.id,
            )
            break

        seen.add(parent.id)
        path.append(parent)
        current = parent

    path.reverse()
    return path


def descendants(location: Location, locations: Sequence[Location]) -> list[Location]:
    """Return every location below ``location`` in depth-first pre-order.

    ``location`` itself is never part of the result, even if the stored
    sub-location references loop back to it.
    """

    index = index_by_id(locations)

    def _sub_locations(location_id: str) -> tuple[str, ...]:
        found = index.get(location_id)
        return found.sub_locations if found is not None else ()

    return [
        index[location_id]
        for location_id in walk_depth_first(
            location.sub_locations, _sub_locations, exclude=(location.id,)
        )
        if location_id in index
    ]


def can_move(
    location_id: str,
    new_parent_id: str | None,
    locations: Sequence[Location],
) -> bool:
    """Return ``True`` when ``location_id`` may be placed under ``new_parent_id``.

    A move is rejected when the location would become its own parent or would
    be placed inside its own subtree. ``new_parent_id`` of ``None`` moves the
    location to the top level and is always allowed. A ``location_id`` that is
    not part of ``locations`` cannot be moved.
    """

    location = index_by_id(locations).get(location_id)
    if location is None:
        logger.debug("Rejected move of unknown location '%s'", location_id)
        return False

    if new_parent_id is None:
        return True

    if location_id == new_parent_id:
        logger.debug("Rejected move of '%s' under itself", location_id)
        return False

    if any(found.id == new_parent_id for found in descendants(location, locations)):
        logger.debug(
            "Rejected move of '%s' under its descendant '%s'",
            location_id,
            new_parent_id,
        )
        return False

    return True


def children_of(
    parent_id: str | None, locations: Sequence[Location]
) -> list[Location]:
    """Return locations whose stored parent is ``parent_id``."""

    return [
        location for location in locations if location.parent_location_id == parent_id
    ]


def plan_move(
    location_id: str,
    new_parent_id: str | None,
    locations: Sequence[Location],
) -> MovePlan | None:
    """Describe the updates needed to move ``location_id`` under ``new_parent_id``.

    The location is removed from its current parent's ``sub_locations`` and
    appended to the new parent's list. Nothing is written; the caller persists
    the plan. Returns ``None`` when :func:`can_move` rejects the move.
    """

    if not can_move(location_id, new_parent_id, locations):
        return None

    index = index_by_id(locations)
    old_parent_id = index[location_id].parent_location_id
    old_parent = index.get(old_parent_id) if old_parent_id is not None else None
    new_parent = index.get(new_parent_id) if new_parent_id is not None else None

    if old_parent_id == new_parent_id:
        unchanged = old_parent.sub_locations if old_parent is not None else None
        return MovePlan(
            location_id=location_id,
            old_parent_id=old_parent_id,
            new_parent_id=new_parent_id,
            old_parent_sub_locations=unchanged,
            new_parent_sub_locations=unchanged,
        )

    old_parent_sub_locations: tuple[str, ...] | None = None
    new_parent_sub_locations: tuple[str, ...] | None = None

    if old_parent is not None:
        old_parent_sub_locations = tuple(
            child_id for child_id in old_parent.sub_locations if child_id != location_id
        )
    if new_parent is not None:
        new_parent_sub_locations = tuple(
            child_id for child_id in new_parent.sub_locations if child_id != location_id
        ) + (location_id,)

    return MovePlan(
        location_id=location_id,
        old_parent_id=old_parent_id,
        new_parent_id=new_parent_id,
        old_parent_sub_locations=old_parent_sub_locations,
        new_parent_sub_locations=new_parent_sub_locations,
    )


def search_locations(locations: Sequence[Location], term: str) -> list[Location]:
    """Return locations whose name, description or type contains ``term``."""

    needle = term.strip().lower()
    if not needle:
        return list(locations)

    return [
        location
        for location in locations
        if needle in location.name.lower()
        or needle in location.description.lower()
        or needle in location.type.lower()
    ]


def filter_locations(
    locations: Sequence[Location], criteria: LocationFilter
) -> list[Location]:
    """Return the locations matching every populated field of ``criteria``."""

    def _matches(location: Location) -> bool:
        if criteria.types and location.type not in criteria.types:
            return False
        if (
            criteria.match_parent
            and location.parent_location_id != criteria.parent_location_id
        ):
            return False
        if (
            criteria.has_sub_locations is not None
            and bool(location.sub_locations) != criteria.has_sub_locations
        ):
            return False
        if criteria.min_population is not None or criteria.max_population is not None:
            if location.population is None:
                return False
            if (
                criteria.min_population is not None
                and location.population < criteria.min_population
            ):
                return False
            if (
                criteria.max_population is not None
                and location.population > criteria.max_population
            ):
                return False
        return True

    return [location for location in locations if _matches(location)]


_SORT_KEYS: Mapping[str, Callable[[Location], Any]] = {
    "name": lambda location: location.name.lower(),
    "type": lambda location: location.type.lower(),
    "population": lambda location: location.population or 0,
    "created_at": lambda location: sort_timestamp(location.created_at),
    "updated_at": lambda location: sort_timestamp(location.updated_at),
    "sub_location_count": lambda location: len(location.sub_locations),
}


def sort_locations(
    locations: Collection[Location],
    sort_by: LocationSortKey = "name",
    *,
    ascending: bool = True,
) -> list[Location]:
    """Return a sorted copy of ``locations``.

    Raises:
        ValueError: If ``sort_by`` is not a supported key.
    """

    key = _SORT_KEYS.get(sort_by)
    if key is None:
        raise ValueError(
            f"Unsupported sort key '{sort_by}'. "
            f"Expected one of: {', '.join(_SORT_KEYS)}."
        )
    return sorted(locations, key=key, reverse=not ascending)


def format_hierarchy(nodes: Sequence[HierarchyNode]) -> str:
    """Return an indented plain-text rendering of a location forest."""

    lines = ["Location Hierarchy", "=================="]
    for root in nodes:
        for node in root.iter_nodes():
            label = node.location.name or node.location.id
            lines.append(f"{'  ' * node.depth}- {label} [{node.location.id}]")

    if len(lines) == 2:
        lines.append("No root locations found.")

    return "\n".join(lines)


def format_breadcrumb(path: Sequence[Location]) -> str:
    """Return ``path`` joined as a breadcrumb trail."""

    return " > ".join(location.name or location.id for location in path)


__all__ = [
    "HierarchyNode",
    "LocationFilter",
    "LocationSortKey",
    "MovePlan",
    "breadcrumb",
    "build_hierarchy",
    "can_move",
    "children_of",
    "descendants",
    "filter_locations",
    "format_breadcrumb",
    "format_hierarchy",
    "plan_move",
    "search_locations",
    "sort_locations",
]
