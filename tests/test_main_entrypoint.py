"""Tests covering the command-line entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator

import pytest

from main import EXIT_ERROR, EXIT_OK, EXIT_REJECTED, main


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("CAMPAIGNGRAPH_LOG_LEVEL", raising=False)
    monkeypatch.delenv("CAMPAIGNGRAPH_SNAPSHOT_PATH", raising=False)
    root = logging.getLogger()
    original_level = root.level
    yield
    for handler in list(root.handlers):
        if handler.get_name() == "campaigngraph":
            root.removeHandler(handler)
    root.setLevel(original_level)


@pytest.fixture()
def snapshot_file(tmp_path: Path, campaign_payload: dict[str, Any]) -> Path:
    path = tmp_path / "campaign.json"
    path.write_text(json.dumps(campaign_payload), encoding="utf-8")
    return path


def test_hierarchy_command_prints_forest(snapshot_file: Path, capsys) -> None:
    exit_code = main(["--snapshot", str(snapshot_file), "hierarchy"])

    output = capsys.readouterr().out
    assert exit_code == EXIT_OK
    assert "- Kingdom [kingdom]" in output
    assert "    - Castle [castle]" in output


def test_breadcrumb_command(snapshot_file: Path, capsys) -> None:
    exit_code = main(["--snapshot", str(snapshot_file), "breadcrumb", "castle"])

    assert exit_code == EXIT_OK
    assert capsys.readouterr().out.strip() == "Kingdom > Capital City > Castle"


def test_can_move_command_rejects_cycle(snapshot_file: Path, capsys) -> None:
    exit_code = main(["--snapshot", str(snapshot_file), "can-move", "kingdom", "castle"])

    assert exit_code == EXIT_REJECTED
    assert "circular reference" in capsys.readouterr().out


def test_can_move_command_allows_top_level(snapshot_file: Path, capsys) -> None:
    exit_code = main(["--snapshot", str(snapshot_file), "can-move", "castle"])

    assert exit_code == EXIT_OK
    assert "the top level" in capsys.readouterr().out


def test_can_move_command_treats_blank_parent_as_top_level(
    snapshot_file: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    requested: list[tuple[str, str | None]] = []

    def _record_move(location_id: str, new_parent_id: str | None, locations) -> bool:
        requested.append((location_id, new_parent_id))
        return True

    monkeypatch.setattr("main.can_move", _record_move)

    exit_code = main(["--snapshot", str(snapshot_file), "can-move", "castle", "  "])

    assert exit_code == EXIT_OK
    assert requested == [("castle", None)]
    assert "'castle' can be moved under the top level." in capsys.readouterr().out


def test_validate_deps_command(snapshot_file: Path, capsys) -> None:
    valid = main(["--snapshot", str(snapshot_file), "validate-deps", "quest4", "quest3"])
    cyclic = main(["--snapshot", str(snapshot_file), "validate-deps", "quest1", "quest3"])

    output = capsys.readouterr().out
    assert valid == EXIT_OK
    assert cyclic == EXIT_REJECTED
    assert "Dependencies for 'quest4' are valid." in output
    assert "quest1 -> quest3 -> quest2 -> quest1" in output


def test_progress_command(snapshot_file: Path, capsys) -> None:
    exit_code = main(["--snapshot", str(snapshot_file), "progress", "quest2"])

    output = capsys.readouterr().out
    assert exit_code == EXIT_OK
    assert "Milestones: 1 / 2 (50%)" in output
    assert "Dependencies satisfied: yes" in output


def test_dependents_command(snapshot_file: Path, capsys) -> None:
    exit_code = main(["--snapshot", str(snapshot_file), "dependents", "quest1"])
    main(["--snapshot", str(snapshot_file), "dependents", "quest3"])

    output = capsys.readouterr().out
    assert exit_code == EXIT_OK
    assert "- Defeat the Dragon [quest2] (active)" in output
    assert "No quests depend on 'quest3'." in output


def test_unknown_id_exits_with_error(snapshot_file: Path, capsys) -> None:
    exit_code = main(["--snapshot", str(snapshot_file), "progress", "quest99"])

    assert exit_code == EXIT_ERROR
    assert "Unknown quest 'quest99'." in capsys.readouterr().err


def test_snapshot_path_falls_back_to_environment(
    snapshot_file: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setenv("CAMPAIGNGRAPH_SNAPSHOT_PATH", str(snapshot_file))

    exit_code = main(["breadcrumb", "kingdom"])

    assert exit_code == EXIT_OK
    assert capsys.readouterr().out.strip() == "Kingdom"


def test_missing_snapshot_is_reported(capsys) -> None:
    exit_code = main(["hierarchy"])

    assert exit_code == EXIT_ERROR
    assert "No snapshot provided" in capsys.readouterr().err


def test_unreadable_snapshot_is_reported(tmp_path: Path, capsys) -> None:
    exit_code = main(["--snapshot", str(tmp_path / "absent.json"), "hierarchy"])

    assert exit_code == EXIT_ERROR
    assert capsys.readouterr().err.startswith("Error:")


def test_invalid_log_level_in_environment(
    snapshot_file: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setenv("CAMPAIGNGRAPH_LOG_LEVEL", "loud")

    exit_code = main(["--snapshot", str(snapshot_file), "hierarchy"])

    assert exit_code == EXIT_ERROR
    assert "Configuration error" in capsys.readouterr().err
