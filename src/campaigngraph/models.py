"""Immutable entity records consumed by the integrity engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Literal, get_args

QuestStatus = Literal["not-started", "active", "completed", "failed"]
QuestImportance = Literal["low", "medium", "high"]

QUEST_STATUSES: tuple[str, ...] = get_args(QuestStatus)
QUEST_IMPORTANCE_LEVELS: tuple[str, ...] = get_args(QuestImportance)


def sort_timestamp(value: datetime | None) -> float:
    """Return ``value`` as a POSIX timestamp for ordering records.

    Naive datetimes are read as UTC so that stored values with and without an
    offset compare consistently. A missing value sorts first.
    """

    if value is None:
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _validate_id(value: str, *, field_name: str) -> str:
    """Strip and validate identifiers used as graph keys."""

    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string, got {type(value)!r}")

    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} must be a non-empty string")
    return stripped


def _validate_id_tuple(values: Iterable[str], *, field_name: str) -> tuple[str, ...]:
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of ids, not a string")
    return tuple(_validate_id(value, field_name=field_name) for value in values)


@dataclass(frozen=True)
class Location:
    """A place in the campaign world.

    ``parent_location_id`` and ``sub_locations`` describe the same relation
    from both directions. Traversals going up the tree follow the parent id,
    traversals going down follow ``sub_locations``.
    """

    id: str
    name: str = ""
    type: str = "landmark"
    description: str = ""
    parent_location_id: str | None = None
    sub_locations: tuple[str, ...] = field(default_factory=tuple)
    population: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _validate_id(self.id, field_name="id"))
        if self.parent_location_id is not None:
            object.__setattr__(
                self,
                "parent_location_id",
                _validate_id(self.parent_location_id, field_name="parent_location_id"),
            )
        object.__setattr__(
            self,
            "sub_locations",
            _validate_id_tuple(self.sub_locations, field_name="sub_locations"),
        )

    @property
    def is_root(self) -> bool:
        """Return ``True`` when the location has no parent."""

        return self.parent_location_id is None


@dataclass(frozen=True)
class QuestMilestone:
    """A single sub-step of a quest."""

    id: str
    title: str = ""
    description: str = ""
    completed: bool = False
    completed_at: datetime | None = None
    order: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _validate_id(self.id, field_name="milestone id"))


@dataclass(frozen=True)
class Quest:
    """A quest and the ids of the quests that must be completed before it."""

    id: str
    title: str = ""
    description: str = ""
    status: QuestStatus = "not-started"
    importance: QuestImportance = "medium"
    dependencies: tuple[str, ...] = field(default_factory=tuple)
    milestones: tuple[QuestMilestone, ...] = field(default_factory=tuple)
    location_ids: tuple[str, ...] = field(default_factory=tuple)
    involved_npc_ids: tuple[str, ...] = field(default_factory=tuple)
    created_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _validate_id(self.id, field_name="id"))
        if self.status not in QUEST_STATUSES:
            raise ValueError(
                f"status must be one of {', '.join(QUEST_STATUSES)}; got {self.status!r}"
            )
        if self.importance not in QUEST_IMPORTANCE_LEVELS:
            raise ValueError(
                "importance must be one of "
                f"{', '.join(QUEST_IMPORTANCE_LEVELS)}; got {self.importance!r}"
            )
        object.__setattr__(
            self,
            "dependencies",
            _validate_id_tuple(self.dependencies, field_name="dependencies"),
        )
        object.__setattr__(self, "milestones", tuple(self.milestones))
        object.__setattr__(
            self,
            "location_ids",
            _validate_id_tuple(self.location_ids, field_name="location_ids"),
        )
        object.__setattr__(
            self,
            "involved_npc_ids",
            _validate_id_tuple(self.involved_npc_ids, field_name="involved_npc_ids"),
        )

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


__all__ = [
    "Location",
    "Quest",
    "QuestMilestone",
    "QuestStatus",
    "QuestImportance",
    "QUEST_STATUSES",
    "QUEST_IMPORTANCE_LEVELS",
    "sort_timestamp",
]
