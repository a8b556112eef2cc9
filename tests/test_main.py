import json

import pytest

from game_state import build_initial_state
from main import flush_messages, handle_command, main, survey_tile
from simulation.scheduler import EpochScheduler, EpochState

TINY_WORLD = {"seed": 3, "map_radius": 3, "vulcanism": 1, "highest_elevation": 2.0}


@pytest.fixture
def scheduler(attributes):
    return EpochScheduler(build_initial_state(attributes))


def drain(scheduler):
    lines = []
    flush_messages(scheduler.state, lines.append)
    return lines


def test_quit(scheduler):
    assert handle_command(scheduler, "quit", []) is True


def test_unknown_command(scheduler):
    drain(scheduler)
    assert handle_command(scheduler, "dig", []) is False
    assert drain(scheduler) == ["Unknown command: dig"]


def test_step_and_run(scheduler):
    handle_command(scheduler, "step", [])
    handle_command(scheduler, "run", ["2"])
    assert scheduler.epochs == 3
    assert scheduler.idle


def test_invalid_usage(scheduler):
    drain(scheduler)
    handle_command(scheduler, "run", ["many"])
    assert drain(scheduler) == ["Invalid usage for 'run'."]
    handle_command(scheduler, "run", [])
    assert drain(scheduler) == ["Usage: run <n>"]


def test_non_positive_counts_reported(scheduler):
    drain(scheduler)
    handle_command(scheduler, "run", ["0"])
    handle_command(scheduler, "queue", ["-3"])
    assert drain(scheduler) == [
        "Epoch count must be at least 1 (got 0).",
        "Epoch count must be at least 1 (got -3).",
    ]
    assert scheduler.idle
    assert scheduler.epochs == 0


def test_queue_then_tick(scheduler):
    handle_command(scheduler, "queue", ["1"])
    handle_command(scheduler, "tick", ["2"])
    assert scheduler.current is EpochState.EPOCH_RUNNING
    drain(scheduler)
    handle_command(scheduler, "step", [])
    assert drain(scheduler) == ["Cannot step: an epoch is already in progress."]
    handle_command(scheduler, "tick", ["10"])
    assert scheduler.idle
    assert scheduler.epochs == 1


def test_cancel_with_nothing_running(scheduler):
    drain(scheduler)
    handle_command(scheduler, "cancel", [])
    assert drain(scheduler) == ["Nothing to cancel."]


def test_status(scheduler):
    drain(scheduler)
    handle_command(scheduler, "status", [])
    lines = drain(scheduler)
    assert lines[0].startswith("Epoch 0 (waiting), 0 remaining")
    assert lines[1].startswith("Terrain: ")


def test_survey(scheduler):
    state = scheduler.state
    drain(scheduler)
    survey_tile(state, 0, 0)
    survey_tile(state, 99, 99)
    lines = drain(scheduler)
    assert lines[0].startswith("Survey: Tile 0,0")
    assert lines[1] == "No tile at 99,99."


def test_main_runs_epochs(tmp_path, capsys):
    config = tmp_path / "world.json"
    config.write_text(json.dumps(TINY_WORLD))
    assert main(["--config", str(config), "--epochs", "2"]) == 0
    out = capsys.readouterr().out
    assert "Epoch 2 (waiting)" in out


def test_main_rejects_bad_config(tmp_path):
    config = tmp_path / "world.json"
    config.write_text(json.dumps({"map_radius": -1}))
    assert main(["--config", str(config)]) == 2


def test_main_missing_config(tmp_path):
    assert main(["--config", str(tmp_path / "missing.json")]) == 2
