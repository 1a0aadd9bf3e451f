"""Integrity engine for campaign location hierarchies and quest dependencies."""

from .documents import (
    CampaignSnapshot,
    load_campaign_from_file,
    load_campaign_from_mapping,
)
from .errors import CampaignGraphError, HierarchyCycleError
from .location_tree import (
    HierarchyNode,
    LocationFilter,
    MovePlan,
    breadcrumb,
    build_hierarchy,
    can_move,
    children_of,
    descendants,
    filter_locations,
    plan_move,
    search_locations,
    sort_locations,
)
from .models import Location, Quest, QuestMilestone
from .quest_graph import (
    DependencyValidation,
    QuestFilter,
    QuestProgress,
    QuestTimelineEvent,
    available_dependencies,
    calculate_progress,
    can_start,
    create_milestone,
    filter_quests,
    get_dependent_quests,
    quest_timeline,
    sort_quests,
    validate_dependencies,
)
from .settings import EngineSettings

__all__ = [
    "Location",
    "Quest",
    "QuestMilestone",
    "CampaignSnapshot",
    "load_campaign_from_file",
    "load_campaign_from_mapping",
    "CampaignGraphError",
    "HierarchyCycleError",
    "HierarchyNode",
    "LocationFilter",
    "MovePlan",
    "build_hierarchy",
    "breadcrumb",
    "descendants",
    "can_move",
    "children_of",
    "plan_move",
    "filter_locations",
    "search_locations",
    "sort_locations",
    "DependencyValidation",
    "QuestFilter",
    "QuestProgress",
    "QuestTimelineEvent",
    "validate_dependencies",
    "calculate_progress",
    "can_start",
    "get_dependent_quests",
    "available_dependencies",
    "create_milestone",
    "quest_timeline",
    "filter_quests",
    "sort_quests",
    "EngineSettings",
]
