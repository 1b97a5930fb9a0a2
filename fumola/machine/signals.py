"""Signals returned by the transition function.

Signals are expected control outcomes, not errors. The lifecycle wrapper in
:mod:`fumola.machine.process` consumes every one of them; none is surfaced
to a caller as a failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from fumola.ast import Exp, Node, Sym, Val
from fumola.machine.types import Env


@dataclass(frozen=True)
class Halt(Node):
    """The stack is empty and the process returned ``value``."""

    value: Val


@dataclass(frozen=True)
class LinkWaitPtr(Node):
    """``link`` on a symbol with no store entry yet."""

    sym: Sym


@dataclass(frozen=True)
class LinkWaitHalt(Node):
    """``link`` on a process handle; wait for that process to halt."""

    sym: Sym


@dataclass(frozen=True)
class SpawnRequest(Node):
    """Admit a new process ``name`` running ``body`` under ``env``."""

    name: Sym
    env: Env
    body: Exp


Signal: TypeAlias = Halt | LinkWaitPtr | LinkWaitHalt | SpawnRequest


__all__ = [
    "Halt",
    "LinkWaitHalt",
    "LinkWaitPtr",
    "Signal",
    "SpawnRequest",
]
