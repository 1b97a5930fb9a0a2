"""Process lifecycle wrapper.

Lifts :func:`~fumola.machine.step.step_running` to the lifecycle states of
a named process, turning signals into lifecycle transitions and collecting
spawn requests for the scheduler.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fumola.ast import Exp, ProcHandle, Returned, Sym
from fumola.machine.errors import DuplicateName, InvalidProc, MachineError
from fumola.machine.signals import Halt, LinkWaitHalt, LinkWaitPtr, SpawnRequest
from fumola.machine.state import (
    Proc,
    ProcError,
    ProcHalted,
    ProcPending,
    ProcRunning,
    ProcWaitingForHalt,
    ProcWaitingForPtr,
    Running,
)
from fumola.machine.step import step_running
from fumola.machine.trace import TraceLink
from fumola.machine.types import Env, Store

logger = logging.getLogger(__name__)


def step_proc(
    procs: Mapping[Sym, Proc],
    store: Store,
    proc: Proc,
    spawned: list[tuple[Sym, Proc]],
) -> Proc | None:
    """Advance one process by at most one step.

    Args:
        procs: Process table as of the start of the round (read-only)
        store: The shared store
        proc: The process to advance
        spawned: Receives ``(name, process)`` for every spawn request

    Returns:
        The process's next state, or ``None`` when it cannot step (blocked,
        errored, or halted); a ``None`` result leaves ``proc`` unchanged.
    """
    match proc:
        case ProcError() | ProcHalted():
            return None

        case ProcPending(body):
            return ProcRunning(initial_running(body))

        case ProcWaitingForPtr(r, s):
            if s not in store:
                return None
            logger.debug("resuming: %s now has a store entry", s)
            return ProcRunning(r)

        case ProcWaitingForHalt(r, s):
            target = procs.get(s)
            if target is None:
                return ProcError(r, InvalidProc(s))
            if not isinstance(target, ProcHalted):
                return None
            logger.debug("resuming: process %s halted", s)
            r.cont = Returned(target.retval)
            r.trace.append(TraceLink(ProcHandle(s), target.retval))
            return ProcRunning(r)

        case ProcRunning(r):
            try:
                signal = step_running(store, r)
            except MachineError as err:
                logger.debug("process error: %s", err)
                return ProcError(r, err)
            match signal:
                case None:
                    return proc
                case Halt(v):
                    return ProcHalted(v, tuple(r.trace))
                case LinkWaitPtr(s):
                    return ProcWaitingForPtr(r, s)
                case LinkWaitHalt(s):
                    return ProcWaitingForHalt(r, s)
                case SpawnRequest(name, env, body):
                    if name in procs:
                        # Live processes without a store entry, such as the root.
                        return ProcError(r, DuplicateName(name))
                    spawned.append((name, ProcRunning(initial_running(body, env))))
                    return proc

    raise TypeError(f"not a process: {proc!r}")


def initial_running(body: Exp, env: Env | None = None) -> Running:
    return Running(cont=body, env=env if env is not None else Env())


__all__ = ["initial_running", "step_proc"]
