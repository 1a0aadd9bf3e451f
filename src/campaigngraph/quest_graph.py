"""Dependency validation and progress tracking over quest snapshots.

Dependency gating is fail-closed: a dependency id that does not resolve to a
quest in the snapshot is treated as not completed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Literal, Mapping, Sequence

from .models import (
    QUEST_IMPORTANCE_LEVELS,
    QUEST_STATUSES,
    Quest,
    QuestMilestone,
    sort_timestamp,
)
from .traversal import find_cycle, index_by_id, walk_depth_first

logger = logging.getLogger(__name__)

QuestSortKey = Literal[
    "title",
    "importance",
    "status",
    "created_at",
    "completed_at",
    "progress",
]

TimelineEventType = Literal["created", "milestone_completed", "completed"]


@dataclass(frozen=True)
class DependencyValidation:
    """Verdict for a proposed dependency list."""

    is_valid: bool
    circular_dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class QuestProgress:
    """Milestone completion and dependency gate for a single quest."""

    quest_id: str
    total_milestones: int
    completed_milestones: int
    percentage: int
    can_complete: bool

    @property
    def remaining_milestones(self) -> int:
        return self.total_milestones - self.completed_milestones


@dataclass(frozen=True)
class QuestTimelineEvent:
    """A dated entry in a quest's history."""

    id: str
    quest_id: str
    type: TimelineEventType
    title: str
    description: str
    timestamp: datetime
    milestone_id: str | None = None


@dataclass(frozen=True)
class QuestFilter:
    """Criteria accepted by :func:`filter_quests`. Empty fields match all."""

    statuses: tuple[str, ...] = ()
    importance: tuple[str, ...] = ()
    location_ids: tuple[str, ...] = ()
    involved_npc_ids: tuple[str, ...] = ()
    has_dependencies: bool | None = None


def _dependencies_satisfied(quest: Quest, index: Mapping[str, Quest]) -> bool:
    for dependency_id in quest.dependencies:
        dependency = index.get(dependency_id)
        if dependency is None:
            logger.debug(
                "Quest '%s' depends on unknown quest '%s'", quest.id, dependency_id
            )
            return False
        if not dependency.is_completed:
            return False
    return True


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def validate_dependencies(
    quest_id: str,
    proposed_dependencies: Sequence[str],
    quests: Sequence[Quest],
) -> DependencyValidation:
    """Check whether ``quest_id`` may depend on ``proposed_dependencies``.

    The proposed list replaces the stored dependencies of ``quest_id`` while
    every other quest keeps its stored edges. A depth-first search from
    ``quest_id`` then looks for a path that returns to a quest already on the
    current path.

    Args:
        quest_id: The quest being created or edited. It does not need to exist
            in ``quests`` yet.
        proposed_dependencies: The dependency ids the caller wants to persist.
        quests: The current snapshot of quests.

    Returns:
        A :class:`DependencyValidation` whose ``circular_dependencies`` lists
        the quest ids on the detected cycle, or an empty tuple when valid.
    """

    index = index_by_id(quests)
    proposed = tuple(proposed_dependencies)

    def _dependencies(current_id: str) -> tuple[str, ...]:
        if current_id == quest_id:
            return proposed
        quest = index.get(current_id)
        return quest.dependencies if quest is not None else ()

    cycle = find_cycle(quest_id, _dependencies)
    if cycle:
        logger.debug(
            "Rejected dependencies %s for quest '%s'; cycle: %s",
            list(proposed),
            quest_id,
            " -> ".join(cycle),
        )
        return DependencyValidation(is_valid=False, circular_dependencies=cycle)

    return DependencyValidation(is_valid=True)


def calculate_progress(quest: Quest, quests: Sequence[Quest]) -> QuestProgress:
    """Summarise milestone completion and the dependency gate for ``quest``.

    ``percentage`` is rounded to the nearest whole number and is ``0`` for a
    quest without milestones.
    """

    total = len(quest.milestones)
    completed = sum(1 for milestone in quest.milestones if milestone.completed)
    percentage = _round_half_up(completed / total * 100) if total else 0

    return QuestProgress(
        quest_id=quest.id,
        total_milestones=total,
        completed_milestones=completed,
        percentage=percentage,
        can_complete=_dependencies_satisfied(quest, index_by_id(quests)),
    )


def can_start(quest: Quest, quests: Sequence[Quest]) -> bool:
    """Return ``True`` when every dependency of ``quest`` is completed."""

    return _dependencies_satisfied(quest, index_by_id(quests))


def get_dependent_quests(quest_id: str, quests: Sequence[Quest]) -> list[Quest]:
    """Return the quests that list ``quest_id`` as a direct dependency."""

    return [quest for quest in quests if quest_id in quest.dependencies]


def available_dependencies(quest_id: str, quests: Sequence[Quest]) -> list[Quest]:
    """Return the quests ``quest_id`` could depend on without closing a cycle.

    The quest itself and every quest that depends on it, directly or through
    other quests, are excluded.
    """

    dependents: dict[str, list[str]] = {}
    for quest in quests:
        for dependency_id in quest.dependencies:
            dependents.setdefault(dependency_id, []).append(quest.id)

    blocked = set(
        walk_depth_first(
            [quest_id], lambda current_id: dependents.get(current_id, ())
        )
    )
    return [quest for quest in quests if quest.id not in blocked]


def create_milestone(
    milestone_id: str,
    title: str,
    description: str = "",
    order: int = 0,
) -> QuestMilestone:
    """Return a new, incomplete milestone."""

    return QuestMilestone(
        id=milestone_id,
        title=title,
        description=description,
        completed=False,
        order=order,
    )


def quest_timeline(quest: Quest) -> list[QuestTimelineEvent]:
    """Return the dated events of ``quest`` in chronological order.

    Milestones without a ``completed_at`` timestamp and a completed quest
    without ``completed_at`` produce no event.
    """

    events: list[QuestTimelineEvent] = []

    if quest.created_at is not None:
        events.append(
            QuestTimelineEvent(
                id=f"{quest.id}-created",
                quest_id=quest.id,
                type="created",
                title="Quest Created",
                description=f'Quest "{quest.title}" was created',
                timestamp=quest.created_at,
            )
        )

    for milestone in quest.milestones:
        if not milestone.completed or milestone.completed_at is None:
            continue
        events.append(
            QuestTimelineEvent(
                id=f"{quest.id}-milestone-{milestone.id}",
                quest_id=quest.id,
                type="milestone_completed",
                title=f"Milestone Completed: {milestone.title}",
                description=milestone.description,
                timestamp=milestone.completed_at,
                milestone_id=milestone.id,
            )
        )

    if quest.is_completed and quest.completed_at is not None:
        events.append(
            QuestTimelineEvent(
                id=f"{quest.id}-completed",
                quest_id=quest.id,
                type="completed",
                title="Quest Completed",
                description=f'Quest "{quest.title}" was completed',
                timestamp=quest.completed_at,
            )
        )

    return sorted(events, key=lambda event: sort_timestamp(event.timestamp))


def _matches_query(quest: Quest, needle: str) -> bool:
    searchable = [quest.title, quest.description]
    for milestone in quest.milestones:
        searchable.extend((milestone.title, milestone.description))
    return any(needle in text.lower() for text in searchable)


def filter_quests(
    quests: Sequence[Quest],
    criteria: QuestFilter | None = None,
    *,
    query: str | None = None,
) -> list[Quest]:
    """Return the quests matching ``query`` and every populated criterion."""

    needle = query.strip().lower() if query else ""
    criteria = criteria or QuestFilter()

    def _matches(quest: Quest) -> bool:
        if needle and not _matches_query(quest, needle):
            return False
        if criteria.statuses and quest.status not in criteria.statuses:
            return False
        if criteria.importance and quest.importance not in criteria.importance:
            return False
        if criteria.location_ids and not set(criteria.location_ids) & set(
            quest.location_ids
        ):
            return False
        if criteria.involved_npc_ids and not set(criteria.involved_npc_ids) & set(
            quest.involved_npc_ids
        ):
            return False
        if (
            criteria.has_dependencies is not None
            and bool(quest.dependencies) != criteria.has_dependencies
        ):
            return False
        return True

    return [quest for quest in quests if _matches(quest)]


def sort_quests(
    quests: Sequence[Quest],
    sort_by: QuestSortKey = "title",
    *,
    descending: bool = False,
    all_quests: Sequence[Quest] | None = None,
) -> list[Quest]:
    """Return a sorted copy of ``quests``.

    ``all_quests`` is the snapshot used to compute progress when sorting by
    ``progress``; it defaults to ``quests``.

    Raises:
        ValueError: If ``sort_by`` is not a supported key.
    """

    snapshot = quests if all_quests is None else all_quests
    keys: Mapping[str, Callable[[Quest], Any]] = {
        "title": lambda quest: quest.title.lower(),
        "importance": lambda quest: QUEST_IMPORTANCE_LEVELS.index(quest.importance),
        "status": lambda quest: QUEST_STATUSES.index(quest.status),
        "created_at": lambda quest: sort_timestamp(quest.created_at),
        "completed_at": lambda quest: sort_timestamp(quest.completed_at),
        "progress": lambda quest: calculate_progress(quest, snapshot).percentage,
    }

    key = keys.get(sort_by)
    if key is None:
        raise ValueError(
            f"Unsupported sort key '{sort_by}'. Expected one of: {', '.join(keys)}."
        )
    return sorted(quests, key=key, reverse=descending)


def format_progress_report(progress: QuestProgress) -> str:
    """Return a human-friendly summary of a quest's progress."""

    gate = "yes" if progress.can_complete else "no (waiting on dependencies)"
    return "\n".join(
        [
            f"Quest Progress: {progress.quest_id}",
            "=" * (len(progress.quest_id) + 16),
            (
                "Milestones: "
                f"{progress.completed_milestones} / {progress.total_milestones} "
                f"({progress.percentage}%)"
            ),
            f"Dependencies satisfied: {gate}",
        ]
    )


def format_dependency_validation(quest_id: str, result: DependencyValidation) -> str:
    """Return a one-line verdict describing ``result``."""

    if result.is_valid:
        return f"Dependencies for '{quest_id}' are valid."

    cycle = " -> ".join(result.circular_dependencies + result.circular_dependencies[:1])
    return f"Circular dependency detected for '{quest_id}': {cycle}"


__all__ = [
    "DependencyValidation",
    "QuestFilter",
    "QuestProgress",
    "QuestSortKey",
    "QuestTimelineEvent",
    "available_dependencies",
    "calculate_progress",
    "can_start",
    "create_milestone",
    "filter_quests",
    "format_dependency_validation",
    "format_progress_report",
    "get_dependent_quests",
    "quest_timeline",
    "sort_quests",
    "validate_dependencies",
]
