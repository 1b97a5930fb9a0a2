"""Round-based system scheduler.

One round attempts one step of every process known at the start of the
round. Processes are visited in symbol order, so a run is replayable.
Spawned names are reserved in the store as soon as the spawning process
has stepped (so a second spawn of the same name in the same round fails
with ``duplicate``); the new processes join the table after the round.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from fumola.ast import ProcHandle, Sym, sym_key
from fumola.machine.errors import InterpreterInvariantError, RoundLimitExceeded
from fumola.machine.process import step_proc
from fumola.machine.state import Proc, Procs, System

logger = logging.getLogger(__name__)


class StepResult(Enum):
    """Outcome of one scheduler round."""

    PROGRESS = auto()
    """At least one process advanced."""

    NO_PROGRESS = auto()
    """Processes exist but none could move."""

    NO_PROCESSES = auto()
    """The process table is empty."""


def step_system(system: System) -> StepResult:
    """Run one round over ``system``, mutating it in place."""
    if not system.procs:
        return StepResult.NO_PROCESSES

    stepped = False
    spawned: list[tuple[Sym, Proc]] = []
    next_procs: Procs = {}
    for name in sorted(system.procs, key=sym_key):
        proc = system.procs[name]
        requests: list[tuple[Sym, Proc]] = []
        nxt = step_proc(system.procs, system.store, proc, requests)
        if nxt is None:
            next_procs[name] = proc
        else:
            stepped = True
            next_procs[name] = nxt
        for child, child_proc in requests:
            if child in system.store:
                raise InterpreterInvariantError(f"spawn name already reserved: {child}")
            system.store[child] = ProcHandle(child)
            logger.debug("spawn: %s admitted by %s", child, name)
            spawned.append((child, child_proc))

    for child, child_proc in spawned:
        if child in next_procs:
            raise InterpreterInvariantError(f"spawn name already a process: {child}")
        next_procs[child] = child_proc
    system.procs = next_procs
    return StepResult.PROGRESS if stepped else StepResult.NO_PROGRESS


def fully(system: System, max_rounds: int | None = None) -> int:
    """Step ``system`` until a round makes no progress.

    An empty process table counts as no progress. Returns the number of
    rounds that made progress.

    Raises:
        RoundLimitExceeded: if more than ``max_rounds`` rounds make progress.
    """
    rounds = 0
    while step_system(system) is StepResult.PROGRESS:
        rounds += 1
        if max_rounds is not None and rounds > max_rounds:
            raise RoundLimitExceeded(max_rounds)
    logger.info("fixpoint after %d rounds (%d processes)", rounds, len(system.procs))
    return rounds


__all__ = ["StepResult", "fully", "step_system"]
