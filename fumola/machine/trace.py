"""Per-process effect traces.

A trace is append-only while a process runs. The stepper writes it but
never reads it back to make a decision; it exists so that a finished (or
stuck) process can show what it did.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from fumola.ast import Node, Sym, Val


@dataclass(frozen=True)
class TraceSeq(Node):
    """A flat run of entries.

    Part of the trace data model for hosts that group entries; the machine
    itself keeps a process trace as a plain list and never builds one.
    """

    items: tuple[Trace, ...] = ()


@dataclass(frozen=True)
class TraceNest(Node):
    """Effects performed under ``nest sym { ... }``."""

    sym: Sym
    items: tuple[Trace, ...] = ()


@dataclass(frozen=True)
class TraceRet(Node):
    value: Val


@dataclass(frozen=True)
class TracePut(Node):
    sym: Sym
    value: Val


@dataclass(frozen=True)
class TraceGet(Node):
    sym: Sym
    value: Val


@dataclass(frozen=True)
class TraceLink(Node):
    """``link target`` resolved to ``result`` (a pointer or a return value)."""

    target: Val
    result: Val


Trace: TypeAlias = TraceSeq | TraceNest | TraceRet | TracePut | TraceGet | TraceLink

Traces: TypeAlias = list[Trace]


__all__ = [
    "Trace",
    "TraceGet",
    "TraceLink",
    "TraceNest",
    "TracePut",
    "TraceRet",
    "TraceSeq",
    "Traces",
]
