"""Continuation frames for the fumola machine.

Each pending evaluation context is reified as a frame. A :class:`Frame`
pairs the context (``cont``) with the trace accumulated *before* the frame
was pushed, so that the trace can be spliced back together when the frame
is popped.

Frame kinds:
- LetFrame / LetBxFrame: ``let pat = __; body`` with the captured environment
- AppFrame: an argument waiting for a ``lambda`` to reach the head
- ProjectFrame: a label waiting for a ``branches`` set to reach the head
- NestFrame: a ``nest`` boundary; qualifies store addressing beneath it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from fumola.ast import Exp, Pat, Sym, SymNest, Val
from fumola.machine.trace import Traces
from fumola.machine.types import Env


@dataclass(frozen=True)
class LetFrame:
    env: Env
    pattern: Pat
    body: Exp


@dataclass(frozen=True)
class LetBxFrame:
    env: Env
    pattern: Pat
    body: Exp


@dataclass(frozen=True)
class AppFrame:
    arg: Val


@dataclass(frozen=True)
class ProjectFrame:
    label: Val


@dataclass(frozen=True)
class NestFrame:
    sym: Sym


FrameCont: TypeAlias = LetFrame | LetBxFrame | AppFrame | ProjectFrame | NestFrame


@dataclass
class Frame:
    cont: FrameCont
    trace: Traces = field(default_factory=list)


Stack: TypeAlias = list[Frame]


def qualify(stack: Stack, s: Sym) -> Sym:
    """Qualify ``s`` by every enclosing ``nest`` symbol, outermost first.

    ``put`` and ``spawn`` address the store through this, so under
    ``nest $n { nest $m { ... } }`` the symbol ``a`` becomes ``n/m/a``.
    """
    result = s
    for fr in reversed(stack):
        if isinstance(fr.cont, NestFrame):
            result = SymNest(fr.cont.sym, result)
    return result


def traces_return(stack: Stack) -> bool:
    """Whether a ``ret`` at this point records a return trace entry.

    An empty stack means the process is halting, so the return is traced.
    A ``nest`` frame on top means the return leaves the nest; it is traced
    inside the nest's sub-trace. Any other frame consumes the value silently.
    """
    if not stack:
        return True
    return isinstance(stack[-1].cont, NestFrame)


__all__ = [
    "AppFrame",
    "Frame",
    "FrameCont",
    "LetBxFrame",
    "LetFrame",
    "NestFrame",
    "ProjectFrame",
    "Stack",
    "qualify",
    "traces_return",
]
