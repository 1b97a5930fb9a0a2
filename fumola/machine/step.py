"""The single-process transition function.

``step_running(store, r)`` performs at most one reduction of the running
process ``r``, mutating ``r`` (and possibly ``store``) in place. Outcomes:

- ``None``: one reduction was performed; ``r`` holds the next state
- a :class:`~fumola.machine.signals.Signal`: halt, wait, or spawn request
- a raised :class:`~fumola.machine.errors.MachineError`: a program error

Before dispatching, the continuation is replaced by a shallow copy of its
head (sub-computations become holes). A process that errors therefore keeps
a readable record of where it got stuck without a deep copy per step.
"""

from __future__ import annotations

import logging

from frozendict import frozendict

from fumola.ast import (
    HOLE,
    UNIT,
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
    Hole,
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
    Returned,
    Spawn,
    Switch,
    Sym,
    SymLit,
    Val,
    ValField,
    Var,
    Variant,
)
from fumola.machine.errors import (
    AssertionFailure,
    CallByValueLeak,
    CaseMismatch,
    DuplicateName,
    FieldNotFound,
    InterpreterInvariantError,
    MissingBranch,
    MissingCase,
    NoStep,
    NotAPointer,
    NotASymbol,
    NotLinkTarget,
    NotRecord,
    NotVariant,
    SwitchNotVariant,
    UndefinedBox,
    UndefinedSymbol,
    UndefinedVariable,
)
from fumola.machine.frames import (
    AppFrame,
    Frame,
    LetBxFrame,
    LetFrame,
    NestFrame,
    ProjectFrame,
    qualify,
    traces_return,
)
from fumola.machine.signals import Halt, LinkWaitHalt, LinkWaitPtr, Signal, SpawnRequest
from fumola.machine.state import Running
from fumola.machine.trace import TraceGet, TraceLink, TraceNest, TracePut, TraceRet
from fumola.machine.types import Env, Store

logger = logging.getLogger(__name__)


# ============================================================================
# Values
# ============================================================================


def value(env: Env, v: Val) -> Val:
    """Close ``v`` under ``env``.

    Variables are replaced by their bindings. Box literals capture the box
    environment in force, beneath the box's own bindings.
    """
    match v:
        case SymLit() | Ptr() | ProcHandle() | Num():
            return v
        case Var(name):
            try:
                return env.vals[name]
            except KeyError:
                raise UndefinedVariable(name) from None
        case Variant(label, payload):
            return Variant(value(env, label), value(env, payload))
        case Record(fields):
            return Record(tuple(value_field(env, f) for f in fields))
        case RecordExt(base, f):
            return RecordExt(value(env, base), value_field(env, f))
        case Bx(bx):
            if not env.bxes:
                return v
            captured = frozendict({**env.bxes, **bx.bxes})
            return Bx(BxVal(code=bx.code, name=bx.name, bxes=captured))
        case CallByValue():
            raise CallByValueLeak()
    raise InterpreterInvariantError(f"not a value: {v!r}")


def value_field(env: Env, f: ValField) -> ValField:
    return ValField(value(env, f.label), value(env, f.value))


def into_symbol(v: Val) -> Sym:
    if isinstance(v, SymLit):
        return v.sym
    raise NotASymbol(v)


def into_pointer(v: Val) -> Sym:
    if isinstance(v, Ptr):
        return v.sym
    raise NotAPointer(v)


# ============================================================================
# Patterns
# ============================================================================


def field_value(label: Val, v: Val) -> Val:
    """Look up ``label`` in a record, seeing through record extensions."""
    match v:
        case Record(fields):
            for f in fields:
                if f.label == label:
                    return f.value
            raise FieldNotFound(label)
        case RecordExt(base, f):
            if f.label == label:
                return f.value
            return field_value(label, base)
    raise NotRecord()


def pattern(p: Pat, v: Val, env: Env) -> Env:
    """Bind closed value ``v`` against ``p``; return the extended environment."""
    match p:
        case PatIgnore():
            return env
        case PatVar(name):
            return env.bind(name, v)
        case PatFields(fields):
            if not isinstance(v, (Record, RecordExt)):
                raise NotRecord()
            for fp in fields:
                env = pattern_field(fp, v, env)
            return env
        case PatCase(fp):
            if not isinstance(v, Variant):
                raise NotVariant()
            label = value(env, fp.label)
            if v.label != label:
                raise CaseMismatch(label, v.label)
            return pattern(fp.pattern, v.payload, env)
    raise InterpreterInvariantError(f"not a pattern: {p!r}")


def pattern_field(fp: FieldPat, v: Val, env: Env) -> Env:
    label = value(env, fp.label)
    return pattern(fp.pattern, field_value(label, v), env)


# ============================================================================
# Head snapshot
# ============================================================================


def head(e: Exp) -> Exp:
    """Shallow copy of ``e`` with every sub-computation replaced by a hole.

    Case heads keep their labels and patterns, branch heads their labels.
    """
    match e:
        case Nest(v, _):
            return Nest(v, HOLE)
        case Spawn(v, _):
            return Spawn(v, HOLE)
        case Lambda(p, _):
            return Lambda(p, HOLE)
        case Let(p, _, _):
            return Let(p, HOLE, HOLE)
        case LetBx(p, _, _):
            return LetBx(p, HOLE, HOLE)
        case App(_, v):
            return App(HOLE, v)
        case Project(_, v):
            return Project(HOLE, v)
        case Switch(v, cases):
            return Switch(v, tuple(Case(c.label, c.pattern, HOLE) for c in cases))
        case Branches(bs):
            return Branches(tuple(Branch(b.label, HOLE) for b in bs))
        case Put() | Get() | Link() | Ret() | Returned() | Extract() | AssertEq() | Hole():
            return e
    raise InterpreterInvariantError(f"not a computation: {e!r}")


# ============================================================================
# Case and branch selection
# ============================================================================


def switch_case(env: Env, sym: Sym, cases: tuple[Case, ...]) -> Case:
    for c in cases:
        if into_symbol(value(env, c.label)) == sym:
            return c
    raise MissingCase(sym)


def project_branch(env: Env, sym: Sym, branches: tuple[Branch, ...]) -> Branch:
    for b in branches:
        if into_symbol(value(env, b.label)) == sym:
            return b
    raise MissingBranch(sym)


# ============================================================================
# Transition function
# ============================================================================


def _push(r: Running, cont: LetFrame | LetBxFrame | AppFrame | ProjectFrame | NestFrame) -> None:
    r.stack.append(Frame(cont=cont, trace=r.trace))
    r.trace = []


def _resume(r: Running, fr: Frame) -> None:
    """Splice the trace saved in ``fr`` back in front of the current one."""
    r.trace = fr.trace + r.trace


def _pop(r: Running) -> Frame:
    if not r.stack:
        raise NoStep()
    return r.stack.pop()


def step_running(store: Store, r: Running) -> Signal | None:
    """Attempt exactly one reduction of ``r``.

    Raises:
        MachineError: the process is stuck or failed; ``r`` is its postmortem.
        InterpreterInvariantError: a hole reached the head.
    """
    cont = r.cont
    r.cont = head(cont)
    logger.debug("running([cont = %s; ...])", r.cont)

    match cont:
        case Hole():
            raise InterpreterInvariantError("hole reached the head of a running process")

        case Ret(v):
            v = value(r.env, v)
            if traces_return(r.stack):
                r.trace.append(TraceRet(v))
            r.cont = Returned(v)
            return step_running(store, r)

        case Returned(v):
            if not r.stack:
                return Halt(v)
            fr = r.stack.pop()
            match fr.cont:
                case NestFrame(s):
                    inner = r.trace
                    r.trace = fr.trace
                    r.trace.append(TraceNest(s, tuple(inner)))
                    # cont stays Returned(v): the value flows on past the nest.
                    return None
                case LetFrame(env0, p, body):
                    r.env = pattern(p, v, env0)
                    r.cont = body
                    _resume(r, fr)
                    return None
                case LetBxFrame(env0, p, body):
                    if not isinstance(v, Bx):
                        raise NoStep()
                    match p:
                        case PatVar(name):
                            r.env = env0.bind_box(name, v.box)
                        case PatIgnore():
                            r.env = env0
                        case _:
                            raise NoStep()
                    r.cont = body
                    _resume(r, fr)
                    return None
                case AppFrame() | ProjectFrame():
                    raise NoStep()
            raise InterpreterInvariantError(f"unknown frame: {fr.cont!r}")

        case Nest(v, body):
            s = into_symbol(value(r.env, v))
            _push(r, NestFrame(s))
            r.cont = body
            return None

        case Spawn(v, body):
            s = qualify(r.stack, into_symbol(value(r.env, v)))
            if s in store:
                raise DuplicateName(s)
            r.cont = Returned(ProcHandle(s))
            return SpawnRequest(s, r.env, body)

        case Let(p, e1, e2):
            _push(r, LetFrame(r.env, p, e2))
            r.cont = e1
            return None

        case LetBx(p, e1, e2):
            if not isinstance(p, (PatVar, PatIgnore)):
                raise NoStep()
            _push(r, LetBxFrame(r.env, p, e2))
            r.cont = e1
            return None

        case Extract(Var(name)):
            bx = r.env.bxes.get(name)
            if bx is None:
                raise UndefinedBox(name)
            vals = frozendict({bx.name: Bx(bx)}) if bx.name is not None else frozendict()
            r.env = Env(vals=vals, bxes=bx.bxes)
            r.cont = bx.code
            return None

        case Extract(_):
            raise NoStep()

        case Lambda(p, body):
            fr = _pop(r)
            if not isinstance(fr.cont, AppFrame):
                raise NoStep()
            r.env = pattern(p, fr.cont.arg, r.env)
            _resume(r, fr)
            r.cont = body
            return None

        case Branches(bs):
            fr = _pop(r)
            if not isinstance(fr.cont, ProjectFrame):
                raise NoStep()
            sym = into_symbol(fr.cont.label)
            br = project_branch(r.env, sym, bs)
            _resume(r, fr)
            r.cont = br.body
            return None

        case App(e, v):
            v = value(r.env, v)
            _push(r, AppFrame(v))
            r.cont = e
            return None

        case Project(e, v):
            v = value(r.env, v)
            _push(r, ProjectFrame(v))
            r.cont = e
            return None

        case Put(v1, v2):
            s = into_symbol(value(r.env, v1))
            v2 = value(r.env, v2)
            s = qualify(r.stack, s)
            r.trace.append(TracePut(s, v2))
            store[s] = v2
            r.cont = Returned(Ptr(s))
            return None

        case Get(v):
            s = into_pointer(value(r.env, v))
            if s not in store:
                raise UndefinedSymbol(s)
            stored = store[s]
            r.trace.append(TraceGet(s, stored))
            r.cont = Returned(stored)
            return None

        case Switch(v, cases):
            v = value(r.env, v)
            if not isinstance(v, Variant):
                raise SwitchNotVariant(v)
            sym = into_symbol(v.label)
            c = switch_case(r.env, sym, cases)
            r.env = pattern(c.pattern, v.payload, r.env)
            r.cont = c.body
            return None

        case Link(v):
            v = value(r.env, v)
            match v:
                case SymLit(s):
                    if s not in store:
                        r.cont = Link(v)
                        return LinkWaitPtr(s)
                    r.trace.append(TraceLink(v, Ptr(s)))
                    r.cont = Returned(Ptr(s))
                    return None
                case ProcHandle(s):
                    return LinkWaitHalt(s)
            raise NotLinkTarget(v)

        case AssertEq(v1, equal, v2):
            v1 = value(r.env, v1)
            v2 = value(r.env, v2)
            if (v1 == v2) != equal:
                raise AssertionFailure(v1, equal, v2)
            if traces_return(r.stack):
                r.trace.append(TraceRet(UNIT))
            r.cont = Returned(UNIT)
            return None

    raise InterpreterInvariantError(f"not a computation: {cont!r}")


__all__ = [
    "field_value",
    "head",
    "into_pointer",
    "into_symbol",
    "pattern",
    "pattern_field",
    "project_branch",
    "step_running",
    "switch_case",
    "value",
    "value_field",
]
