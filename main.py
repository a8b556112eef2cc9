# main.py
"""
Terraflow - hex-grid terrain epoch simulation.
Headless runner: build a world from a config document, advance epochs and
inspect tiles from a text command console.

Rendering front ends drive the same EpochScheduler and read tiles through
WorldState.tile_snapshot.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from config import DEFAULT_CONFIG_PATH
from game_state import WorldState, build_initial_state
from simulation.scheduler import EpochScheduler
from world.attributes import ConfigError, load_world_attributes

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

HELP_TEXT = (
    "Commands: step | run <n> | queue <n> | tick [n] | cancel | "
    "status | survey <q> <r> | help | quit"
)


# =============================================================================
# Commands
# =============================================================================

def run_batch(scheduler: EpochScheduler, count: int) -> None:
    """Run ``count`` epochs to completion. Ctrl-C stops after the epoch in flight."""
    state = scheduler.state
    if count < 1:
        state.messages.append(f"Epoch count must be at least 1 (got {count}).")
        return
    if not scheduler.request_run(count):
        state.messages.append("Cannot start a run: an epoch is already in progress.")
        return
    try:
        scheduler.run_until_idle()
    except KeyboardInterrupt:
        scheduler.cancel()
        state.messages.append("Run cancelled; finishing the current epoch.")
        scheduler.run_until_idle()


def step_epoch(scheduler: EpochScheduler) -> None:
    if not scheduler.request_step():
        scheduler.state.messages.append("Cannot step: an epoch is already in progress.")
        return
    scheduler.run_until_idle()


def queue_epochs(scheduler: EpochScheduler, count: int) -> None:
    """Schedule epochs without driving them (advance with 'tick')."""
    if count < 1:
        scheduler.state.messages.append(f"Epoch count must be at least 1 (got {count}).")
    elif scheduler.request_run(count):
        scheduler.state.messages.append(f"Queued {count} epoch(s). Use 'tick' to advance.")
    else:
        scheduler.state.messages.append("Cannot queue: an epoch is already in progress.")


def tick_scheduler(scheduler: EpochScheduler, count: int = 1) -> None:
    """Perform up to ``count`` state transitions, as a render loop would."""
    done = 0
    for _ in range(count):
        if not scheduler.tick():
            break
        done += 1
    scheduler.state.messages.append(
        f"{done} transition(s); now {scheduler.current.value}, "
        f"{scheduler.epochs_to_run} epoch(s) remaining."
    )


def cancel_run(scheduler: EpochScheduler) -> None:
    if scheduler.cancel():
        scheduler.state.messages.append("Batch cancelled; the current epoch will finish.")
    else:
        scheduler.state.messages.append("Nothing to cancel.")


def show_status(scheduler: EpochScheduler) -> None:
    state = scheduler.state
    state.messages.append(
        f"Epoch {scheduler.epochs} ({scheduler.current.value}), "
        f"{scheduler.epochs_to_run} remaining, {state.tile_count} tiles"
    )
    counts = ", ".join(f"{t.label} {c}" for t, c in state.type_counts().items())
    state.messages.append(f"Terrain: {counts}")
    state.messages.append(
        f"Totals: water {state.water.sum():.2f}, soil {state.soil.sum():.2f}, "
        f"bedrock {state.bedrock.sum():.2f}, humidity {state.humidity.sum():.2f}"
    )
    ledger = state.ledger
    state.messages.append(
        f"Ledger: rained {ledger.precipitated:.2f}, evaporated {ledger.evaporated:.2f}, "
        f"eroded {ledger.eroded_bedrock:.3f}, uplifted {ledger.uplifted_bedrock:.3f}, "
        f"ocean sink {ledger.ocean_absorbed_water:.2f}, clamps {ledger.clamped}"
    )


def survey_tile(state: WorldState, q: int, r: int) -> None:
    """Survey tool - display one tile's state."""
    try:
        tile = state.survey((q, r))
    except KeyError:
        state.messages.append(f"No tile at {q},{r}.")
        return

    desc = [
        f"Tile {q},{r}",
        tile["terrain_type"].label,
        f"bedrock={tile['bedrock']:.2f}",
        f"soil={tile['soil']:.2f}",
        f"water={tile['water']:.2f}",
        f"humidity={tile['humidity']:.2f}",
        f"temp={tile['temperature']:.1f}",
    ]
    if tile["overflow_water"] > 0:
        desc.append(f"overflow={tile['overflow_water']:.3f}")
    if tile["volcano_distances"]:
        desc.append(f"volcanoes@{','.join(str(d) for d in tile['volcano_distances'])}")
    state.messages.append("Survey: " + " | ".join(desc))


def handle_command(scheduler: EpochScheduler, cmd: str, args: List[str]) -> bool:
    """Process a console command. Returns True if the console should quit."""
    state = scheduler.state
    command_map: Dict[str, Callable[[EpochScheduler, List[str]], None]] = {
        "step": lambda s, a: step_epoch(s),
        "run": lambda s, a: run_batch(s, int(a[0])) if a else s.state.messages.append("Usage: run <n>"),
        "queue": lambda s, a: queue_epochs(s, int(a[0])) if a else s.state.messages.append("Usage: queue <n>"),
        "tick": lambda s, a: tick_scheduler(s, int(a[0]) if a else 1),
        "cancel": lambda s, a: cancel_run(s),
        "status": lambda s, a: show_status(s),
        "survey": lambda s, a: survey_tile(s.state, int(a[0]), int(a[1])),
        "help": lambda s, a: s.state.messages.append(HELP_TEXT),
    }
    if cmd == "quit":
        return True
    handler = command_map.get(cmd)
    if not handler:
        state.messages.append(f"Unknown command: {cmd}")
        return False
    try:
        handler(scheduler, args)
    except (TypeError, ValueError, IndexError):
        state.messages.append(f"Invalid usage for '{cmd}'.")
    return False


def flush_messages(state: WorldState, out: Callable[[str], None] = print) -> None:
    while state.messages:
        out(state.messages.popleft())


def console(scheduler: EpochScheduler) -> None:
    """Read commands from stdin until 'quit' or end of input."""
    state = scheduler.state
    state.messages.append(HELP_TEXT)
    flush_messages(state)
    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        parts = line.split()
        if not parts:
            continue
        quit_requested = handle_command(scheduler, parts[0].lower(), parts[1:])
        flush_messages(state)
        if quit_requested:
            break


# =============================================================================
# Entry Point
# =============================================================================

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terraflow hex-grid terrain epoch simulation")
    parser.add_argument(
        "--config", default=str(DEFAULT_CONFIG_PATH),
        help="World config JSON document (default: defaults.json)"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed (overrides config)")
    parser.add_argument("--radius", type=int, default=None, help="Map radius (overrides config)")
    parser.add_argument(
        "--epochs", type=int, default=0,
        help="Epochs to run before reporting (default: 0)"
    )
    parser.add_argument(
        "--interactive", action="store_true",
        help="Open the command console after the initial run"
    )
    parser.add_argument("--verbose", action="store_true", help="Log per-phase debug output")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    overrides = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.radius is not None:
        overrides["map_radius"] = args.radius

    try:
        attributes = load_world_attributes(args.config, overrides)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    state = build_initial_state(attributes)
    scheduler = EpochScheduler(state)

    if args.epochs > 0:
        run_batch(scheduler, args.epochs)

    if args.interactive:
        console(scheduler)
    else:
        show_status(scheduler)
        flush_messages(state)
    return 0


if __name__ == "__main__":
    sys.exit(main())
