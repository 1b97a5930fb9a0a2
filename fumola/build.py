"""Smart constructors for writing fumola terms in Python.

The surface syntax and its parser live outside this package; these helpers
are the programmatic way to build closed terms. Plain Python values are
coerced where the position is unambiguous:

- values: ``int`` becomes :class:`Num`, ``str`` becomes :class:`Var`
- symbols: ``int`` becomes :class:`SymNum`, ``str`` becomes :class:`SymId`
- patterns: ``"_"`` becomes :class:`PatIgnore`, any other ``str`` a
  :class:`PatVar`

Example:
    >>> from fumola import build as b
    >>> term = b.let("x", b.put(b.lit("a"), 1), b.get("x"))
    >>> str(term)
    'let x = $a := 1; @x'
"""

from __future__ import annotations

from typing import TypeAlias

from frozendict import frozendict

from fumola.ast import (
    ANON,
    App,
    AssertEq,
    Branch,
    Branches,
    Bx,
    BxVal,
    CallByValue,
    Case,
    Exp,
    Extract,
    FieldPat,
    Get,
    Lambda,
    Let,
    LetBx,
    Link,
    Nest,
    Num,
    Pat,
    PatCase,
    PatFields,
    PatIgnore,
    PatVar,
    ProcHandle,
    Project,
    Ptr,
    Put,
    Record,
    RecordExt,
    Ret,
    Sep,
    Spawn,
    Switch,
    Sym,
    SymBin,
    SymId,
    SymLit,
    SymNest,
    SymNone,
    SymNum,
    SymSep,
    SymTri,
    Val,
    ValField,
    Var,
    Variant,
)

SymLike: TypeAlias = Sym | int | str | None
ValLike: TypeAlias = Val | int | str
PatLike: TypeAlias = Pat | str

_SYM_TYPES = (SymNone, SymNum, SymId, SymBin, SymNest, SymTri, SymSep)
_PAT_TYPES = (PatIgnore, PatVar, PatFields, PatCase)


# ============================================================================
# Coercions
# ============================================================================


def sym(s: SymLike) -> Sym:
    """Coerce to a symbol; ``None`` is the anonymous root symbol."""
    if s is None:
        return ANON
    if isinstance(s, bool):
        raise TypeError(f"cannot build a symbol from {s!r}")
    if isinstance(s, int):
        return SymNum(s)
    if isinstance(s, str):
        return SymId(s)
    if isinstance(s, _SYM_TYPES):
        return s
    raise TypeError(f"cannot build a symbol from {s!r}")


def val(v: ValLike) -> Val:
    if isinstance(v, bool):
        raise TypeError(f"cannot build a value from {v!r}")
    if isinstance(v, int):
        return Num(v)
    if isinstance(v, str):
        return Var(v)
    return v


def pat(p: PatLike) -> Pat:
    if p == "_":
        return PatIgnore()
    if isinstance(p, str):
        return PatVar(p)
    if isinstance(p, _PAT_TYPES):
        return p
    raise TypeError(f"cannot build a pattern from {p!r}")


# ============================================================================
# Symbols and values
# ============================================================================


def tri(left: SymLike, sep: Sep, right: SymLike) -> Sym:
    """``left<sep>right``, e.g. ``tri("a", Sep.DASH, 1)`` is ``a-1``."""
    return SymTri(sym(left), SymSep(sep), sym(right))


def lit(s: SymLike) -> SymLit:
    """Symbol literal ``$s``."""
    return SymLit(sym(s))


def ptr(s: SymLike) -> Ptr:
    return Ptr(sym(s))


def proc(s: SymLike) -> ProcHandle:
    return ProcHandle(sym(s))


def num(n: int) -> Num:
    return Num(n)


def var(name: str) -> Var:
    return Var(name)


def variant(label: ValLike, payload: ValLike) -> Variant:
    return Variant(val(label), val(payload))


def record(*fields: tuple[ValLike, ValLike]) -> Record:
    """Record literal from ``(label, value)`` pairs, in order."""
    return Record(tuple(ValField(val(label), val(value)) for label, value in fields))


def extend(base: ValLike, label: ValLike, value: ValLike) -> RecordExt:
    return RecordExt(val(base), ValField(val(label), val(value)))


def box(code: Exp, name: str | None = None) -> Bx:
    """Box literal ``{code}``, or ``rec name {code}`` when ``name`` is given."""
    return Bx(BxVal(code=code, name=name, bxes=frozendict()))


def cbv(e: Exp) -> CallByValue:
    """Computation in value position (the backquote form)."""
    return CallByValue(e)


# ============================================================================
# Patterns
# ============================================================================


def fields_pat(*fields: tuple[ValLike, PatLike]) -> PatFields:
    return PatFields(tuple(FieldPat(val(label), pat(p)) for label, p in fields))


def case_pat(label: ValLike, p: PatLike) -> PatCase:
    return PatCase(FieldPat(val(label), pat(p)))


# ============================================================================
# Computations
# ============================================================================


def ret(v: ValLike) -> Ret:
    return Ret(val(v))


def put(s: ValLike, v: ValLike) -> Put:
    return Put(val(s), val(v))


def get(p: ValLike) -> Get:
    return Get(val(p))


def link(target: ValLike) -> Link:
    return Link(val(target))


def nest(s: ValLike, body: Exp) -> Nest:
    return Nest(val(s), body)


def spawn(s: ValLike, body: Exp) -> Spawn:
    return Spawn(val(s), body)


def assert_eq(left: ValLike, right: ValLike) -> AssertEq:
    return AssertEq(val(left), True, val(right))


def assert_ne(left: ValLike, right: ValLike) -> AssertEq:
    return AssertEq(val(left), False, val(right))


def lam(p: PatLike, body: Exp) -> Lambda:
    return Lambda(pat(p), body)


def app(e: Exp, *args: ValLike) -> Exp:
    """Apply ``e`` to each argument in turn: ``app(f, a, b)`` is ``f a b``."""
    for arg in args:
        e = App(e, val(arg))
    return e


def let(p: PatLike, bound: Exp, body: Exp) -> Let:
    return Let(pat(p), bound, body)


def let_box(p: PatLike, bound: Exp, body: Exp) -> LetBx:
    return LetBx(pat(p), bound, body)


def box_def(name: str, code: Exp, body: Exp, rec: bool = False) -> LetBx:
    """``box name {code}; body`` (``box rec name {...}`` when ``rec``)."""
    return LetBx(PatVar(name), Ret(box(code, name if rec else None)), body)


def seq(*exps: Exp) -> Exp:
    """``e1; e2; ...``: run each in turn, discarding all but the last result."""
    if not exps:
        raise ValueError("seq() needs at least one computation")
    *init, last = exps
    for e in reversed(init):
        last = Let(PatIgnore(), e, last)
    return last


def case(label: ValLike, p: PatLike, body: Exp) -> Case:
    return Case(val(label), pat(p), body)


def switch(scrutinee: ValLike, *cases: Case) -> Switch:
    return Switch(val(scrutinee), tuple(cases))


def branch(label: ValLike, body: Exp) -> Branch:
    return Branch(val(label), body)


def branches(*bs: Branch) -> Branches:
    return Branches(tuple(bs))


def project(e: Exp, label: ValLike) -> Project:
    return Project(e, val(label))


def extract(name: str) -> Extract:
    return Extract(Var(name))


def call(name: str, *args: ValLike) -> Exp:
    """Extract box ``name`` and apply it: ``call("f", a)`` is ``f a``."""
    return app(extract(name), *args)
