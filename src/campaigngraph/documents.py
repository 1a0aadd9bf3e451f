"""Parse campaign snapshots handed over by the document store.

Store documents use camelCase keys (``parentLocationId``, ``subLocations``,
``completedAt``...). The pydantic models below accept either the stored alias or
the Python field name and convert validated documents into the immutable
records in :mod:`campaigngraph.models`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import Location, Quest, QuestImportance, QuestMilestone, QuestStatus
from .traversal import index_by_id

logger = logging.getLogger(__name__)


class _StoreDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MilestoneDocument(_StoreDocument):
    """Stored representation of a quest milestone."""

    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    completed: bool = False
    completed_at: datetime | None = Field(default=None, alias="completedAt")
    order: int = 0

    def to_milestone(self) -> QuestMilestone:
        return QuestMilestone(
            id=self.id,
            title=self.title,
            description=self.description,
            completed=self.completed,
            completed_at=self.completed_at,
            order=self.order,
        )


class LocationDocument(_StoreDocument):
    """Stored representation of a location."""

    id: str = Field(..., min_length=1)
    name: str = ""
    type: str = "landmark"
    description: str = ""
    parent_location_id: str | None = Field(default=None, alias="parentLocationId")
    sub_locations: list[str] = Field(default_factory=list, alias="subLocations")
    population: int | None = Field(default=None, ge=0)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @field_validator("parent_location_id", mode="before")
    @classmethod
    def _blank_parent_is_root(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_location(self) -> Location:
        return Location(
            id=self.id,
            name=self.name,
            type=self.type,
            description=self.description,
            parent_location_id=self.parent_location_id,
            sub_locations=tuple(self.sub_locations),
            population=self.population,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class QuestDocument(_StoreDocument):
    """Stored representation of a quest."""

    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    status: QuestStatus = "not-started"
    importance: QuestImportance = "medium"
    dependencies: list[str] = Field(default_factory=list)
    milestones: list[MilestoneDocument] = Field(default_factory=list)
    location_ids: list[str] = Field(default_factory=list, alias="locationIds")
    involved_npc_ids: list[str] = Field(default_factory=list, alias="involvedNpcIds")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")

    def to_quest(self) -> Quest:
        ordered_milestones = sorted(self.milestones, key=lambda item: item.order)
        return Quest(
            id=self.id,
            title=self.title,
            description=self.description,
            status=self.status,
            importance=self.importance,
            dependencies=tuple(self.dependencies),
            milestones=tuple(item.to_milestone() for item in ordered_milestones),
            location_ids=tuple(self.location_ids),
            involved_npc_ids=tuple(self.involved_npc_ids),
            created_at=self.created_at,
            completed_at=self.completed_at,
        )


class CampaignDocument(_StoreDocument):
    """Top-level snapshot payload containing both entity collections."""

    locations: list[LocationDocument] = Field(default_factory=list)
    quests: list[QuestDocument] = Field(default_factory=list)


@dataclass(frozen=True)
class CampaignSnapshot:
    """An immutable view of a campaign's locations and quests."""

    locations: tuple[Location, ...] = field(default_factory=tuple)
    quests: tuple[Quest, ...] = field(default_factory=tuple)

    def location(self, location_id: str) -> Location | None:
        """Return the location with ``location_id`` or ``None``."""

        return index_by_id(self.locations).get(location_id)

    def quest(self, quest_id: str) -> Quest | None:
        """Return the quest with ``quest_id`` or ``None``."""

        return index_by_id(self.quests).get(quest_id)


def _ensure_unique(kind: str, ids: Sequence[str]) -> None:
    seen: dict[str, int] = {}
    for entity_id in ids:
        seen[entity_id] = seen.get(entity_id, 0) + 1
    duplicates = sorted(entity_id for entity_id, count in seen.items() if count > 1)
    if duplicates:
        raise ValueError(f"Duplicate {kind} ids in snapshot: {', '.join(duplicates)}")


def load_campaign_from_mapping(payload: Mapping[str, Any]) -> CampaignSnapshot:
    """Validate ``payload`` and convert it into a :class:`CampaignSnapshot`.

    Raises:
        ValueError: If the payload is not a mapping, a document fails
            validation, or an id appears twice within one collection.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("Campaign snapshots must be an object at the top level.")

    try:
        document = CampaignDocument.model_validate(dict(payload))
    except ValidationError as exc:
        raise ValueError(f"Invalid campaign snapshot: {exc}") from exc

    _ensure_unique("location", [item.id for item in document.locations])
    _ensure_unique("quest", [item.id for item in document.quests])

    snapshot = CampaignSnapshot(
        locations=tuple(item.to_location() for item in document.locations),
        quests=tuple(item.to_quest() for item in document.quests),
    )
    logger.debug(
        "Loaded campaign snapshot with %s locations and %s quests",
        len(snapshot.locations),
        len(snapshot.quests),
    )
    return snapshot


def load_campaign_from_file(path: str | Path) -> CampaignSnapshot:
    """Load a campaign snapshot from a JSON file at ``path``."""

    snapshot_path = Path(path)
    with snapshot_path.open(encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"Campaign snapshot '{snapshot_path}' is not valid JSON: {exc}"
            ) from exc

    if not isinstance(payload, Mapping):
        raise ValueError("Campaign snapshot files must contain an object at the top level.")

    return load_campaign_from_mapping(payload)


__all__ = [
    "CampaignDocument",
    "CampaignSnapshot",
    "LocationDocument",
    "MilestoneDocument",
    "QuestDocument",
    "load_campaign_from_file",
    "load_campaign_from_mapping",
]
