"""Environment and store types for the fumola machine.

This module contains:
- Env: value bindings and box bindings, kept apart (box extraction clears
  the value bindings but installs the box's own box bindings)
- Store: the shared symbol -> value table
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from frozendict import frozendict

from fumola.ast import BxVal, Sym, Val

ValsEnv: TypeAlias = frozendict[str, Val]
BxesEnv: TypeAlias = frozendict[str, BxVal]


@dataclass(frozen=True)
class Env:
    """Immutable environment; binding returns a new one."""

    vals: ValsEnv = field(default_factory=frozendict)
    bxes: BxesEnv = field(default_factory=frozendict)

    def bind(self, name: str, value: Val) -> Env:
        return Env(vals=self.vals.set(name, value), bxes=self.bxes)

    def bind_box(self, name: str, box: BxVal) -> Env:
        return Env(vals=self.vals, bxes=self.bxes.set(name, box))


# Keys are added by ``put`` and by spawn admission (process handles).
Store: TypeAlias = dict[Sym, Val]


def empty_env() -> Env:
    return Env()


def empty_store() -> Store:
    return {}


__all__ = [
    "BxesEnv",
    "Env",
    "Store",
    "ValsEnv",
    "empty_env",
    "empty_store",
]
