"""Process and system state for the fumola machine.

This module provides:
- Running: the machine state of one running process (trace, env, stack, cont)
- Proc: the six lifecycle states of a named process
- System: the shared store plus every named process

Lifecycle is strictly forward::

    pending -> running -> {running | waitingForPtr | waitingForHalt | error | halted}
    waitingForPtr  -> running            (once the symbol has a store entry)
    waitingForHalt -> running | error    (target halted | target never existed)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from fumola.ast import ANON, Exp, Sym, Val
from fumola.machine.errors import MachineError
from fumola.machine.frames import Stack
from fumola.machine.trace import Trace, Traces
from fumola.machine.types import Env, Store


@dataclass
class Running:
    """Machine state of a running process.

    ``cont`` is the current computation, ``stack`` the pending frames with
    the innermost frame last, ``trace`` the effects since the last frame was
    pushed.
    """

    cont: Exp
    env: Env = field(default_factory=Env)
    stack: Stack = field(default_factory=list)
    trace: Traces = field(default_factory=list)

    def __str__(self) -> str:
        from fumola.format import render_running

        return render_running(self)


# ============================================================================
# Process lifecycle
# ============================================================================


@dataclass(frozen=True)
class ProcPending:
    """Spawned but not yet started."""

    body: Exp


@dataclass(frozen=True)
class ProcRunning:
    running: Running


@dataclass(frozen=True)
class ProcWaitingForPtr:
    running: Running
    sym: Sym


@dataclass(frozen=True)
class ProcWaitingForHalt:
    running: Running
    sym: Sym


@dataclass(frozen=True)
class ProcError:
    """Terminal: ``running`` is the state at the time of failure."""

    running: Running
    error: MachineError


@dataclass(frozen=True)
class ProcHalted:
    """Terminal: the process returned ``retval`` with an empty stack."""

    retval: Val
    trace: tuple[Trace, ...] = ()


Proc: TypeAlias = (
    ProcPending | ProcRunning | ProcWaitingForPtr | ProcWaitingForHalt | ProcError | ProcHalted
)

Procs: TypeAlias = dict[Sym, Proc]


@dataclass
class System:
    """The store plus all named processes; the unit the scheduler advances."""

    store: Store = field(default_factory=dict)
    procs: Procs = field(default_factory=dict)

    @classmethod
    def initial(cls, body: Exp) -> System:
        """A system with one anonymous, not-yet-started process."""
        return cls(store={}, procs={ANON: ProcPending(body)})

    def __str__(self) -> str:
        from fumola.format import render_system

        return render_system(self)


__all__ = [
    "Proc",
    "ProcError",
    "ProcHalted",
    "ProcPending",
    "ProcRunning",
    "ProcWaitingForHalt",
    "ProcWaitingForPtr",
    "Procs",
    "Running",
    "System",
]
