"""Call-by-push-value normalization.

Terms may carry computations in value position (:class:`CallByValue`).
:func:`convert` hoists each one into a ``let`` binding that encloses its
point of use and leaves a fresh variable behind, so that the machine only
ever sees values where values belong.

Binding order: the hoisted bindings of one evaluation context are wrapped
back on so that the binding collected last is the outermost ``let``, and so
is evaluated first. For ``f `(a) `(b)`` that evaluates ``a`` then ``b``.

Sub-computations that run in a scope of their own (``let`` right-hand
sides and bodies, lambda, nest, spawn, case and branch bodies, box code)
get a pass of their own, so nothing is hoisted out of a binder, a ``nest``
scope or into the wrong process.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from fumola.ast import (
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
    Get,
    Hole,
    Lambda,
    Let,
    LetBx,
    Link,
    Nest,
    Num,
    PatVar,
    ProcHandle,
    Project,
    Ptr,
    Put,
    Record,
    RecordExt,
    Ret,
    Returned,
    Spawn,
    Switch,
    SymLit,
    Val,
    ValField,
    Var,
    Variant,
)


class FreeVarsExhausted(Exception):
    """The fresh-name supply ran out during normalization."""


class FreeVars:
    """Infinite supply of fresh names: ``_t_0``, ``_t_1``, ..."""

    def __init__(self, base: str = "_t_", index: int = 0) -> None:
        self.base = base
        self.index = index

    def __iter__(self) -> FreeVars:
        return self

    def __next__(self) -> str:
        name = f"{self.base}{self.index}"
        self.index += 1
        return name


@dataclass(frozen=True)
class Binding:
    var: str
    bound: Exp


def convert(free_vars: Iterator[str], e: Exp) -> Exp:
    """Return ``e`` with every :class:`CallByValue` hoisted into a ``let``.

    Raises:
        FreeVarsExhausted: if ``free_vars`` ends before conversion finishes.
    """
    bindings: list[Binding] = []
    e = _expression(free_vars, bindings, e)
    return _wrap(bindings, e)


def _wrap(bindings: list[Binding], e: Exp) -> Exp:
    for b in bindings:
        e = Let(PatVar(b.var), b.bound, e)
    return e


def _fresh(free_vars: Iterator[str]) -> str:
    try:
        return next(free_vars)
    except StopIteration:
        raise FreeVarsExhausted() from None


def _value(free_vars: Iterator[str], bindings: list[Binding], v: Val) -> Val:
    match v:
        case CallByValue(e):
            bound = convert(free_vars, e)
            name = _fresh(free_vars)
            bindings.append(Binding(name, bound))
            return Var(name)
        case Bx(bx):
            return Bx(BxVal(code=convert(free_vars, bx.code), name=bx.name, bxes=bx.bxes))
        case Record(fields):
            return Record(tuple(_value_field(free_vars, bindings, f) for f in fields))
        case RecordExt(base, f):
            return RecordExt(
                _value(free_vars, bindings, base),
                _value_field(free_vars, bindings, f),
            )
        case Variant(label, payload):
            return Variant(
                _value(free_vars, bindings, label),
                _value(free_vars, bindings, payload),
            )
        case SymLit() | Ptr() | ProcHandle() | Num() | Var():
            return v
    raise TypeError(f"not a value: {v!r}")


def _value_field(free_vars: Iterator[str], bindings: list[Binding], f: ValField) -> ValField:
    label = _value(free_vars, bindings, f.label)
    return ValField(label, _value(free_vars, bindings, f.value))


def _case(free_vars: Iterator[str], bindings: list[Binding], c: Case) -> Case:
    label = _value(free_vars, bindings, c.label)
    return Case(label, c.pattern, convert(free_vars, c.body))


def _branch(free_vars: Iterator[str], bindings: list[Binding], b: Branch) -> Branch:
    label = _value(free_vars, bindings, b.label)
    return Branch(label, convert(free_vars, b.body))


def _expression(free_vars: Iterator[str], bindings: list[Binding], e: Exp) -> Exp:
    match e:
        case Hole():
            return e
        case Returned():
            # Only the machine builds these; a term being normalized has none.
            raise TypeError(f"internal return marker in input term: {e!r}")
        case Ret(v):
            return Ret(_value(free_vars, bindings, v))
        case Extract(v):
            return Extract(_value(free_vars, bindings, v))
        case Get(v):
            return Get(_value(free_vars, bindings, v))
        case Link(v):
            return Link(_value(free_vars, bindings, v))
        case Put(v1, v2):
            v1 = _value(free_vars, bindings, v1)
            return Put(v1, _value(free_vars, bindings, v2))
        case AssertEq(v1, equal, v2):
            v1 = _value(free_vars, bindings, v1)
            return AssertEq(v1, equal, _value(free_vars, bindings, v2))
        case Nest(v, body):
            v = _value(free_vars, bindings, v)
            return Nest(v, convert(free_vars, body))
        case Spawn(v, body):
            v = _value(free_vars, bindings, v)
            return Spawn(v, convert(free_vars, body))
        case App(head, v):
            v = _value(free_vars, bindings, v)
            return App(_expression(free_vars, bindings, head), v)
        case Project(head, v):
            v = _value(free_vars, bindings, v)
            return Project(_expression(free_vars, bindings, head), v)
        case Lambda(p, body):
            return Lambda(p, convert(free_vars, body))
        case Let(p, e1, e2):
            return Let(p, convert(free_vars, e1), convert(free_vars, e2))
        case LetBx(p, e1, e2):
            return LetBx(p, convert(free_vars, e1), convert(free_vars, e2))
        case Switch(v, cases):
            v = _value(free_vars, bindings, v)
            return Switch(v, tuple(_case(free_vars, bindings, c) for c in cases))
        case Branches(bs):
            return Branches(tuple(_branch(free_vars, bindings, b) for b in bs))
    raise TypeError(f"not a computation: {e!r}")


def contains_call_by_value(e: Exp | Val) -> bool:
    """True when any :class:`CallByValue` occurs in ``e``, box code included."""
    match e:
        case CallByValue():
            return True
        case Bx(bx):
            return contains_call_by_value(bx.code)
        case Record(fields):
            return any(
                contains_call_by_value(f.label) or contains_call_by_value(f.value)
                for f in fields
            )
        case RecordExt(base, f):
            return (
                contains_call_by_value(base)
                or contains_call_by_value(f.label)
                or contains_call_by_value(f.value)
            )
        case Variant(label, payload):
            return contains_call_by_value(label) or contains_call_by_value(payload)
        case Ret(v) | Returned(v) | Extract(v) | Get(v) | Link(v):
            return contains_call_by_value(v)
        case Put(v1, v2) | AssertEq(v1, _, v2):
            return contains_call_by_value(v1) or contains_call_by_value(v2)
        case Nest(v, body) | Spawn(v, body):
            return contains_call_by_value(v) or contains_call_by_value(body)
        case App(head, v) | Project(head, v):
            return contains_call_by_value(head) or contains_call_by_value(v)
        case Lambda(_, body):
            return contains_call_by_value(body)
        case Let(_, e1, e2) | LetBx(_, e1, e2):
            return contains_call_by_value(e1) or contains_call_by_value(e2)
        case Switch(v, cases):
            return contains_call_by_value(v) or any(
                contains_call_by_value(c.label) or contains_call_by_value(c.body)
                for c in cases
            )
        case Branches(bs):
            return any(
                contains_call_by_value(b.label) or contains_call_by_value(b.body) for b in bs
            )
    return False


__all__ = [
    "Binding",
    "FreeVars",
    "FreeVarsExhausted",
    "contains_call_by_value",
    "convert",
]
