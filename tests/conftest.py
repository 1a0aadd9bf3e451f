"""Test configuration for the campaign integrity engine."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from datetime import datetime
from typing import Any

import pytest

from campaigngraph import Location, Quest, QuestMilestone


@pytest.fixture()
def kingdom_locations() -> list[Location]:
    """A small forest: a kingdom with nested places plus an unrelated island."""

    return [
        Location(
            id="kingdom",
            name="Kingdom",
            type="landmark",
            sub_locations=("city", "forest"),
        ),
        Location(
            id="city",
            name="Capital City",
            type="city",
            parent_location_id="kingdom",
            sub_locations=("market", "castle"),
            population=100_000,
        ),
        Location(
            id="market",
            name="Market",
            type="landmark",
            parent_location_id="city",
        ),
        Location(
            id="castle",
            name="Castle",
            type="landmark",
            parent_location_id="city",
            sub_locations=("dungeon",),
        ),
        Location(
            id="dungeon",
            name="Castle Dungeon",
            type="dungeon",
            parent_location_id="castle",
        ),
        Location(
            id="forest",
            name="Whispering Forest",
            type="landmark",
            parent_location_id="kingdom",
        ),
        Location(id="island", name="Lonely Island", type="village", population=40),
    ]


@pytest.fixture()
def campaign_quests() -> list[Quest]:
    """Three chained quests: quest3 -> quest2 -> quest1."""

    return [
        Quest(
            id="quest1",
            title="Find the Lost Sword",
            description="A legendary sword has been lost in the ancient ruins.",
            status="completed",
            importance="high",
            milestones=(
                QuestMilestone(
                    id="milestone1",
                    title="Enter the ruins",
                    completed=True,
                    completed_at=datetime(2024, 1, 1),
                    order=0,
                ),
                QuestMilestone(
                    id="milestone2",
                    title="Find the sword",
                    completed=True,
                    completed_at=datetime(2024, 1, 2),
                    order=1,
                ),
            ),
            location_ids=("loc1",),
            created_at=datetime(2023, 12, 31),
            completed_at=datetime(2024, 1, 2),
        ),
        Quest(
            id="quest2",
            title="Defeat the Dragon",
            description="A mighty dragon threatens the village.",
            status="active",
            importance="high",
            dependencies=("quest1",),
            milestones=(
                QuestMilestone(
                    id="milestone3",
                    title="Gather allies",
                    completed=True,
                    completed_at=datetime(2024, 1, 3),
                    order=0,
                ),
                QuestMilestone(
                    id="milestone4",
                    title="Confront the dragon",
                    completed=False,
                    order=1,
                ),
            ),
            location_ids=("loc2",),
            created_at=datetime(2024, 1, 1),
        ),
        Quest(
            id="quest3",
            title="Rescue the Princess",
            description="The princess has been kidnapped by bandits.",
            status="active",
            importance="medium",
            dependencies=("quest2",),
            location_ids=("loc3",),
            created_at=datetime(2024, 1, 2),
        ),
    ]


@pytest.fixture()
def campaign_payload() -> dict[str, Any]:
    """A snapshot as the document store hands it over (camelCase keys)."""

    return {
        "locations": [
            {"id": "kingdom", "name": "Kingdom", "subLocations": ["city"]},
            {
                "id": "city",
                "name": "Capital City",
                "type": "city",
                "parentLocationId": "kingdom",
                "subLocations": ["castle"],
            },
            {
                "id": "castle",
                "name": "Castle",
                "parentLocationId": "city",
                "subLocations": [],
            },
        ],
        "quests": [
            {"id": "quest1", "title": "Find the Lost Sword", "status": "completed"},
            {
                "id": "quest2",
                "title": "Defeat the Dragon",
                "status": "active",
                "dependencies": ["quest1"],
                "milestones": [
                    {"id": "m2", "title": "Confront", "completed": False, "order": 1},
                    {"id": "m1", "title": "Gather", "completed": True, "order": 0},
                ],
            },
            {
                "id": "quest3",
                "title": "Rescue the Princess",
                "status": "active",
                "dependencies": ["quest2"],
            },
        ],
    }


__all__ = ["campaign_payload", "campaign_quests", "kingdom_locations"]
