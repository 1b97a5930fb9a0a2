"""Term and value model for the fumola calculus.

This module contains:
- Sym: hierarchical symbols (store keys, process names, process handles)
- Val: values, including the transitional CallByValue wrapper
- Exp: computations (call-by-push-value style)
- Pat: patterns for let, lambda, case and field destructuring
- BxVal: code boxes (closures over other boxes, optionally self-named)

Every node is an immutable dataclass, compared and hashed structurally.
No node carries behavior beyond rendering; the normalizer and the machine
operate on these trees from the outside.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TypeAlias

from frozendict import frozendict


class Node:
    """Base for every term node; ``str()`` renders fumola notation."""

    __slots__ = ()

    def __str__(self) -> str:
        from fumola.format import render

        return render(self)


# ============================================================================
# Symbols
# ============================================================================


class Sep(Enum):
    """Separator atoms that may appear inside a symbol."""

    DASH = "-"
    UNDER = "_"
    DOT = "."
    TICK = "'"


@dataclass(frozen=True)
class SymNone(Node):
    """The anonymous root symbol (name of the initial process)."""


@dataclass(frozen=True)
class SymNum(Node):
    n: int


@dataclass(frozen=True)
class SymId(Node):
    name: str


@dataclass(frozen=True)
class SymBin(Node):
    """Juxtaposition of two symbols."""

    left: Sym
    right: Sym


@dataclass(frozen=True)
class SymNest(Node):
    """Symbol qualified by an enclosing ``nest`` scope.

    Only the machine builds these, when addressing the store (or naming a
    spawned process) from under one or more ``nest`` frames.
    """

    outer: Sym
    inner: Sym


@dataclass(frozen=True)
class SymTri(Node):
    """Two symbols joined by an explicit separator symbol."""

    left: Sym
    sep: Sym
    right: Sym


@dataclass(frozen=True)
class SymSep(Node):
    sep: Sep


Sym: TypeAlias = SymNone | SymNum | SymId | SymBin | SymNest | SymTri | SymSep

ANON = SymNone()

_SEP_RANK = {Sep.DASH: 6, Sep.UNDER: 7, Sep.DOT: 8, Sep.TICK: 9}


def sym_key(s: Sym) -> tuple:
    """Total ordering key for symbols.

    Variants order as: none, number, identifier, binary, nest, tri, then the
    separator atoms; fields order lexicographically within a variant.
    """
    match s:
        case SymNone():
            return (0,)
        case SymNum(n):
            return (1, n)
        case SymId(name):
            return (2, name)
        case SymBin(left, right):
            return (3, sym_key(left), sym_key(right))
        case SymNest(outer, inner):
            return (4, sym_key(outer), sym_key(inner))
        case SymTri(left, sep, right):
            return (5, sym_key(left), sym_key(sep), sym_key(right))
        case SymSep(sep):
            return (_SEP_RANK[sep],)
    raise TypeError(f"not a symbol: {s!r}")


# ============================================================================
# Values
# ============================================================================


@dataclass(frozen=True)
class Num(Node):
    n: int


@dataclass(frozen=True)
class SymLit(Node):
    """A symbol literal (``$a``)."""

    sym: Sym


@dataclass(frozen=True)
class Ptr(Node):
    """A symbol known to have a store entry; produced by ``put`` and ``link``."""

    sym: Sym


@dataclass(frozen=True)
class ProcHandle(Node):
    """A symbol known to name a process; produced by ``spawn``."""

    sym: Sym


@dataclass(frozen=True)
class Var(Node):
    """Variable reference; must not survive environment lookup."""

    name: str


@dataclass(frozen=True)
class Variant(Node):
    label: Val
    payload: Val


@dataclass(frozen=True)
class ValField(Node):
    label: Val
    value: Val


@dataclass(frozen=True)
class Record(Node):
    fields: tuple[ValField, ...] = ()


@dataclass(frozen=True)
class RecordExt(Node):
    """A record value plus one more field, kept unflattened."""

    base: Val
    field: ValField


@dataclass(frozen=True)
class BxVal(Node):
    """A code box.

    ``bxes`` are the captured box bindings; a non-``None`` ``name`` makes the
    box available to its own body under that name once extracted.
    """

    code: Exp
    name: str | None = None
    bxes: frozendict[str, BxVal] = field(default_factory=frozendict)


@dataclass(frozen=True)
class Bx(Node):
    box: BxVal


@dataclass(frozen=True)
class CallByValue(Node):
    """A computation in value position; removed by :mod:`fumola.cbpv`."""

    exp: Exp


Val: TypeAlias = (
    Num | SymLit | Ptr | ProcHandle | Var | Variant | Record | RecordExt | Bx | CallByValue
)

UNIT = Record(())


# ============================================================================
# Patterns
# ============================================================================


@dataclass(frozen=True)
class PatIgnore(Node):
    pass


@dataclass(frozen=True)
class PatVar(Node):
    name: str


@dataclass(frozen=True)
class FieldPat(Node):
    label: Val
    pattern: Pat


@dataclass(frozen=True)
class PatFields(Node):
    fields: tuple[FieldPat, ...] = ()


@dataclass(frozen=True)
class PatCase(Node):
    """Single-case destructure: ``#label(pattern)``."""

    field: FieldPat


Pat: TypeAlias = PatIgnore | PatVar | PatFields | PatCase


# ============================================================================
# Computations
# ============================================================================


@dataclass(frozen=True)
class Case(Node):
    label: Val
    pattern: Pat
    body: Exp


@dataclass(frozen=True)
class Branch(Node):
    label: Val
    body: Exp


@dataclass(frozen=True)
class Nest(Node):
    sym: Val
    body: Exp


@dataclass(frozen=True)
class Spawn(Node):
    sym: Val
    body: Exp


@dataclass(frozen=True)
class Put(Node):
    sym: Val
    value: Val


@dataclass(frozen=True)
class Get(Node):
    ptr: Val


@dataclass(frozen=True)
class Link(Node):
    target: Val


@dataclass(frozen=True)
class AssertEq(Node):
    """``assert left == right`` when ``equal``, else ``assert left != right``."""

    left: Val
    equal: bool
    right: Val


@dataclass(frozen=True)
class Lambda(Node):
    pattern: Pat
    body: Exp


@dataclass(frozen=True)
class App(Node):
    exp: Exp
    arg: Val


@dataclass(frozen=True)
class Let(Node):
    pattern: Pat
    bound: Exp
    body: Exp


@dataclass(frozen=True)
class LetBx(Node):
    pattern: Pat
    bound: Exp
    body: Exp


@dataclass(frozen=True)
class Ret(Node):
    value: Val


@dataclass(frozen=True)
class Returned(Node):
    """Internal: a closed value already returned; never written by programs."""

    value: Val


@dataclass(frozen=True)
class Switch(Node):
    scrutinee: Val
    cases: tuple[Case, ...] = ()


@dataclass(frozen=True)
class Branches(Node):
    branches: tuple[Branch, ...] = ()


@dataclass(frozen=True)
class Project(Node):
    exp: Exp
    label: Val


@dataclass(frozen=True)
class Extract(Node):
    value: Val


@dataclass(frozen=True)
class Hole(Node):
    """Internal placeholder; never legal input."""


Exp: TypeAlias = (
    Nest
    | Spawn
    | Put
    | Get
    | Link
    | AssertEq
    | Lambda
    | App
    | Let
    | LetBx
    | Ret
    | Returned
    | Switch
    | Branches
    | Project
    | Extract
    | Hole
)

HOLE = Hole()


__all__ = [
    "ANON",
    "App",
    "AssertEq",
    "Branch",
    "Branches",
    "Bx",
    "BxVal",
    "CallByValue",
    "Case",
    "Exp",
    "Extract",
    "FieldPat",
    "Get",
    "HOLE",
    "Hole",
    "Lambda",
    "Let",
    "LetBx",
    "Link",
    "Nest",
    "Node",
    "Num",
    "Pat",
    "PatCase",
    "PatFields",
    "PatIgnore",
    "PatVar",
    "ProcHandle",
    "Project",
    "Ptr",
    "Put",
    "Record",
    "RecordExt",
    "Ret",
    "Returned",
    "Sep",
    "Spawn",
    "Switch",
    "Sym",
    "SymBin",
    "SymId",
    "SymLit",
    "SymNest",
    "SymNone",
    "SymNum",
    "SymSep",
    "SymTri",
    "UNIT",
    "Val",
    "ValField",
    "Var",
    "Variant",
    "sym_key",
]
