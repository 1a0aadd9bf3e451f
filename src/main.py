"""Command-line entry point for checking campaign snapshots."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from campaigngraph import (
    CampaignGraphError,
    CampaignSnapshot,
    EngineSettings,
    Location,
    Quest,
    breadcrumb,
    build_hierarchy,
    calculate_progress,
    can_move,
    get_dependent_quests,
    load_campaign_from_file,
    validate_dependencies,
)
from campaigngraph.location_tree import format_breadcrumb, format_hierarchy
from campaigngraph.logging_config import configure_logging
from campaigngraph.quest_graph import (
    format_dependency_validation,
    format_progress_report,
)
from campaigngraph.settings import LOG_LEVELS, normalise_log_level

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2


class CommandError(Exception):
    """Raised when a command cannot run against the loaded snapshot."""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Inspect a campaign snapshot: location hierarchy, move checks and "
            "quest dependency validation."
        )
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help=(
            "Path to a JSON campaign snapshot. Defaults to "
            "CAMPAIGNGRAPH_SNAPSHOT_PATH when set."
        ),
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override CAMPAIGNGRAPH_LOG_LEVEL for this run.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("hierarchy", help="Print the location forest.")

    crumb = commands.add_parser("breadcrumb", help="Print a location's ancestor path.")
    crumb.add_argument("location_id")

    move = commands.add_parser(
        "can-move",
        help="Check whether a location may be placed under a new parent.",
    )
    move.add_argument("location_id")
    move.add_argument(
        "new_parent_id",
        nargs="?",
        default=None,
        help="Target parent id. Omit to move the location to the top level.",
    )

    deps = commands.add_parser(
        "validate-deps",
        help="Check a proposed dependency list for cycles.",
    )
    deps.add_argument("quest_id")
    deps.add_argument("dependencies", nargs="*")

    progress = commands.add_parser("progress", help="Print a quest's progress.")
    progress.add_argument("quest_id")

    dependents = commands.add_parser(
        "dependents", help="List the quests waiting on a quest."
    )
    dependents.add_argument("quest_id")

    return parser


def _require_location(snapshot: CampaignSnapshot, location_id: str) -> Location:
    location = snapshot.location(location_id)
    if location is None:
        raise CommandError(f"Unknown location '{location_id}'.")
    return location


def _require_quest(snapshot: CampaignSnapshot, quest_id: str) -> Quest:
    quest = snapshot.quest(quest_id)
    if quest is None:
        raise CommandError(f"Unknown quest '{quest_id}'.")
    return quest


def _run_command(args: argparse.Namespace, snapshot: CampaignSnapshot) -> int:
    command = args.command

    if command == "hierarchy":
        print(format_hierarchy(build_hierarchy(snapshot.locations)))
        return EXIT_OK

    if command == "breadcrumb":
        location = _require_location(snapshot, args.location_id)
        print(format_breadcrumb(breadcrumb(location, snapshot.locations)))
        return EXIT_OK

    if command == "can-move":
        _require_location(snapshot, args.location_id)
        new_parent_id = (args.new_parent_id or "").strip() or None
        target = "the top level" if new_parent_id is None else new_parent_id
        if can_move(args.location_id, new_parent_id, snapshot.locations):
            print(f"'{args.location_id}' can be moved under {target}.")
            return EXIT_OK
        print(
            f"Cannot move '{args.location_id}' under {target}: "
            "it would create a circular reference."
        )
        return EXIT_REJECTED

    if command == "validate-deps":
        result = validate_dependencies(
            args.quest_id, args.dependencies, snapshot.quests
        )
        print(format_dependency_validation(args.quest_id, result))
        return EXIT_OK if result.is_valid else EXIT_REJECTED

    if command == "progress":
        quest = _require_quest(snapshot, args.quest_id)
        print(format_progress_report(calculate_progress(quest, snapshot.quests)))
        return EXIT_OK

    if command == "dependents":
        _require_quest(snapshot, args.quest_id)
        waiting = get_dependent_quests(args.quest_id, snapshot.quests)
        if not waiting:
            print(f"No quests depend on '{args.quest_id}'.")
        for quest in waiting:
            print(f"- {quest.title or quest.id} [{quest.id}] ({quest.status})")
        return EXIT_OK

    raise CommandError(f"Unsupported command '{command}'.")  # pragma: no cover


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command-line interface and return the exit status."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EngineSettings.from_env()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    configure_logging(normalise_log_level(args.log_level, default=settings.log_level))

    snapshot_path = args.snapshot or settings.snapshot_path
    if snapshot_path is None:
        print(
            "No snapshot provided. Pass --snapshot or set CAMPAIGNGRAPH_SNAPSHOT_PATH.",
            file=sys.stderr,
        )
        return EXIT_ERROR

    try:
        snapshot = load_campaign_from_file(snapshot_path)
        return _run_command(args, snapshot)
    except (OSError, ValueError, CampaignGraphError, CommandError) as exc:
        logger.debug("Command '%s' failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover - convenience CLI
    raise SystemExit(main())
