# simulation/scheduler.py
"""Epoch state machine for Terraflow.

Drives the weather/erosion pipeline through four states:

    WAITING -> EPOCH_START -> EPOCH_RUNNING -> EPOCH_FINISH -> WAITING

Each call to tick() performs at most one pending transition: the exit
phases of the old state run, then the enter phases of the new one. The
caller (a render loop, the command console, a benchmark) decides how often
to tick.

    enter EPOCH_START    precipitation, evaporation, neighbour analysis
    exit  EPOCH_START    overflow, humidity redistribution
    enter EPOCH_RUNNING  apply overflow, apply humidity, vulcanism
    exit  EPOCH_RUNNING  terrain morph
    enter EPOCH_FINISH   visual sync of changed tiles, epoch counted
    exit  EPOCH_FINISH   remaining epochs decremented
"""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

from config import TICKS_PER_EPOCH
from simulation.atmosphere import apply_humidity, evaporate, precipitate, redistribute_humidity
from simulation.surface import analyse_neighbour_heights, apply_overflow, redistribute_overflow
from simulation.vulcanism import apply_vulcanism
from world.biomes import morph_terrain

if TYPE_CHECKING:
    from game_state.state import WorldState

logger = logging.getLogger(__name__)

Phase = Tuple[str, Callable[["WorldState"], object]]
TilesChangedCallback = Callable[[List[int]], None]


class EpochState(Enum):
    WAITING = "waiting"
    EPOCH_START = "epoch_start"
    EPOCH_RUNNING = "epoch_running"
    EPOCH_FINISH = "epoch_finish"


# =============================================================================
# PHASE TABLE
# =============================================================================

PRECIPITATION: Phase = ("precipitation", precipitate)
EVAPORATION: Phase = ("evaporation", evaporate)
NEIGHBOUR_ANALYSIS: Phase = ("neighbour_analysis", analyse_neighbour_heights)
OVERFLOW: Phase = ("overflow", redistribute_overflow)
HUMIDITY_REDISTRIBUTION: Phase = ("humidity_redistribution", redistribute_humidity)
APPLY_OVERFLOW: Phase = ("apply_overflow", apply_overflow)
APPLY_HUMIDITY: Phase = ("apply_humidity", apply_humidity)
VULCANISM: Phase = ("vulcanism", apply_vulcanism)
MORPH: Phase = ("morph", morph_terrain)

ENTER_PHASES: Dict[EpochState, Tuple[Phase, ...]] = {
    EpochState.EPOCH_START: (PRECIPITATION, EVAPORATION, NEIGHBOUR_ANALYSIS),
    EpochState.EPOCH_RUNNING: (APPLY_OVERFLOW, APPLY_HUMIDITY, VULCANISM),
}

EXIT_PHASES: Dict[EpochState, Tuple[Phase, ...]] = {
    EpochState.EPOCH_START: (OVERFLOW, HUMIDITY_REDISTRIBUTION),
    EpochState.EPOCH_RUNNING: (MORPH,),
}

# Full epoch in execution order
PIPELINE: Tuple[Phase, ...] = (
    ENTER_PHASES[EpochState.EPOCH_START]
    + EXIT_PHASES[EpochState.EPOCH_START]
    + ENTER_PHASES[EpochState.EPOCH_RUNNING]
    + EXIT_PHASES[EpochState.EPOCH_RUNNING]
)

_NEXT_STATE = {
    EpochState.EPOCH_START: EpochState.EPOCH_RUNNING,
    EpochState.EPOCH_RUNNING: EpochState.EPOCH_FINISH,
}


class EpochScheduler:
    """Cooperative epoch state machine over one WorldState.

    Args:
        state: The world to advance
        on_tiles_changed: Called with the ids of tiles whose type changed,
            once per finished epoch (the renderer's asset swap hook)
        auto_start: Schedule one epoch immediately instead of waiting
    """

    def __init__(
        self,
        state: "WorldState",
        on_tiles_changed: Optional[TilesChangedCallback] = None,
        auto_start: bool = False,
    ) -> None:
        self.state = state
        self.on_tiles_changed = on_tiles_changed
        self.current = EpochState.WAITING
        self.next_state: Optional[EpochState] = EpochState.EPOCH_START if auto_start else None
        self.last_changed: List[int] = []
        # Accumulated wall time per phase name
        self.phase_seconds: Dict[str, float] = {name: 0.0 for name, _ in PIPELINE}

    # === Queries ===
    @property
    def idle(self) -> bool:
        """Waiting with nothing scheduled."""
        return self.current is EpochState.WAITING and self.next_state is None

    @property
    def epochs(self) -> int:
        return self.state.epochs.epochs

    @property
    def epochs_to_run(self) -> int:
        return self.state.epochs.epochs_to_run

    # === Requests ===
    def request_run(self, count: int) -> bool:
        """Run ``count`` epochs back to back. Rejected unless idle."""
        if count < 1:
            logger.warning("Rejected run request for %d epochs", count)
            return False
        if not self.idle:
            logger.warning("Rejected run request: epoch in progress (%s)", self.current.value)
            return False
        self.state.epochs.epochs_to_run = count
        self.next_state = EpochState.EPOCH_START
        logger.info("Scheduled %d epochs", count)
        return True

    def request_step(self) -> bool:
        """Run exactly one epoch. Rejected unless idle."""
        if not self.idle:
            logger.warning("Rejected step request: epoch in progress (%s)", self.current.value)
            return False
        self.state.epochs.epochs_to_run = 0
        self.next_state = EpochState.EPOCH_START
        logger.info("Scheduled a single epoch")
        return True

    def cancel(self) -> bool:
        """Stop the batch after the epoch in flight.

        A run that was requested but not yet started is dropped entirely.

        Returns:
            True if anything was cancelled.
        """
        if self.current is EpochState.WAITING and self.next_state is not None:
            self.next_state = None
            self.state.epochs.epochs_to_run = 0
            logger.info("Cancelled pending run before it started")
            return True
        if self.state.epochs.epochs_to_run > 0:
            self.state.epochs.epochs_to_run = 0
            logger.info("Cancelled batch; the current epoch will finish")
            return True
        return False

    # === Driving ===
    def tick(self) -> bool:
        """Perform the pending transition, if any. Returns True if one ran."""
        if self.next_state is None:
            return False

        previous = self.current
        self._run_phases(EXIT_PHASES.get(previous, ()))
        if previous is EpochState.EPOCH_FINISH:
            self.state.epochs.consume()

        target = self.next_state
        if previous is EpochState.EPOCH_FINISH:
            target = EpochState.EPOCH_START if self.state.epochs.batch_active else EpochState.WAITING

        self.next_state = None
        self.current = target
        logger.debug("Epoch state %s -> %s", previous.value, target.value)
        self._enter(target)
        return True

    def run_until_idle(self, max_ticks: Optional[int] = None) -> int:
        """Tick until the machine is back in WAITING with nothing scheduled.

        max_ticks defaults to the transitions the scheduled batch needs.

        Returns:
            Number of transitions performed.

        Raises:
            RuntimeError: more than ``max_ticks`` transitions were needed.
        """
        if max_ticks is None:
            max_ticks = TICKS_PER_EPOCH * (self.epochs_to_run + 1) + 1
        ticks = 0
        while not self.idle:
            if ticks >= max_ticks:
                raise RuntimeError(f"Scheduler still busy after {max_ticks} ticks")
            self.tick()
            ticks += 1
        return ticks

    # === Internals ===
    def _enter(self, target: EpochState) -> None:
        self._run_phases(ENTER_PHASES.get(target, ()))
        if target is EpochState.EPOCH_FINISH:
            self._sync_changed_tiles()
        if target in _NEXT_STATE:
            self.next_state = _NEXT_STATE[target]
        elif target is EpochState.EPOCH_FINISH:
            # Resolved on exit once the remaining count is decremented
            self.next_state = EpochState.WAITING

    def _run_phases(self, phases: Tuple[Phase, ...]) -> None:
        for name, fn in phases:
            started = time.perf_counter()
            fn(self.state)
            self.state.clamp_quantities(name)
            self.phase_seconds[name] += time.perf_counter() - started

    def _sync_changed_tiles(self) -> None:
        changed = self.state.take_changed_tiles()
        self.last_changed = changed
        if self.on_tiles_changed is not None:
            self.on_tiles_changed(changed)

        epoch = self.state.epochs.complete_epoch()
        message = f"Epoch {epoch} complete: {len(changed)} tiles changed type."
        self.state.messages.append(message)
        logger.info(message)
