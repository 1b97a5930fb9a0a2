"""Rendering of terms and machine states in fumola notation.

Rendering is for diagnostics and tests only; the machine never parses it
back. Maps (store, process table, environments) render sorted by key, so
the rendering of a :class:`~fumola.machine.state.System` is deterministic::

    fumola [
      store = [n/a => 1];
      procs = [% => halted([#n {put n/a <= 1}])]
    ]
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from fumola.ast import (
    App,
    AssertEq,
    Branch,
    Branches,
    Bx,
    BxVal,
    CallByValue,
    Case,
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
    SymBin,
    SymId,
    SymLit,
    SymNest,
    SymNone,
    SymNum,
    SymSep,
    SymTri,
    ValField,
    Var,
    Variant,
    sym_key,
)
from fumola.machine.errors import (
    AssertionFailure,
    CallByValueLeak,
    CaseMismatch,
    DuplicateName,
    FieldNotFound,
    InterpreterInvariantError,
    InvalidProc,
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
)
from fumola.machine.signals import Halt, LinkWaitHalt, LinkWaitPtr, SpawnRequest
from fumola.machine.state import (
    ProcError,
    ProcHalted,
    ProcPending,
    ProcRunning,
    ProcWaitingForHalt,
    ProcWaitingForPtr,
    Running,
    System,
)
from fumola.machine.trace import TraceGet, TraceLink, TraceNest, TracePut, TraceRet, TraceSeq


def _join(items: Iterable[Any], sep: str = "; ") -> str:
    return sep.join(render(i) for i in items)


def _sym_map(m: Mapping[Any, Any]) -> str:
    keys = sorted(m, key=sym_key)
    return "[" + "; ".join(f"{render(k)} => {render(m[k])}" for k in keys) + "]"


def _str_map(m: Mapping[str, Any]) -> str:
    return "[" + "; ".join(f"{k} => {render(m[k])}" for k in sorted(m)) + "]"


def render(obj: Any) -> str:
    """Render any term, trace, frame, process, signal, error or system."""
    match obj:
        # Symbols
        case SymNone():
            return "%"
        case SymNum(n):
            return str(n)
        case SymId(name):
            return name
        case SymBin(left, right):
            return f"{render(left)}{render(right)}"
        case SymNest(outer, inner):
            return f"{render(outer)}/{render(inner)}"
        case SymTri(left, sep, right):
            return f"{render(left)}{render(sep)}{render(right)}"
        case SymSep(sep):
            return sep.value

        # Values
        case CallByValue(e):
            return f"`({render(e)})"
        case SymLit(s):
            return f"${render(s)}"
        case Ptr(s):
            return f"!{render(s)}"
        case ProcHandle(s):
            return f"~{render(s)}"
        case Var(name):
            return name
        case Num(n):
            return str(n)
        case Variant(label, payload):
            return f"#{render(label)}({render(payload)})"
        case Record(fields):
            return f"[{_join(fields)}]"
        case RecordExt(base, f):
            return f"{render(base)}, {render(f)}"
        case ValField(label, value):
            return f"{render(label)} => {render(value)}"
        case Bx(bx):
            return render(bx)
        case BxVal(code, name, bxes):
            if name is None:
                return f"{{{_str_map(bxes)} |- {render(code)}}}"
            return f"rec {name} {{{_str_map(bxes)} |- {render(code)}}}"

        # Patterns
        case PatIgnore():
            return "_"
        case PatVar(name):
            return name
        case PatFields(fields):
            return f"[{_join(fields)}]"
        case PatCase(fp):
            return f"{render(fp.label)}({render(fp.pattern)})"
        case FieldPat(label, p):
            return f"{render(label)} => {render(p)}"

        # Computations
        case Nest(v, e):
            return f"#{render(v)} {{ {render(e)} }}"
        case Spawn(v, e):
            return f"~{render(v)} {{ {render(e)} }}"
        case Put(v1, v2):
            return f"{render(v1)} := {render(v2)}"
        case Get(v):
            return f"@{render(v)}"
        case Link(v):
            return f"&{render(v)}"
        case AssertEq(v1, equal, v2):
            return f"{render(v1)} {'==' if equal else '!='} {render(v2)}"
        case Lambda(p, e):
            return f"\\{render(p)} => {render(e)}"
        case App(e, v):
            return f"{render(e)} {render(v)}"
        case Let(p, e1, e2):
            return f"let {render(p)} = {render(e1)}; {render(e2)}"
        case LetBx(p, e1, e2):
            return f"let box {render(p)} = {render(e1)}; {render(e2)}"
        case Ret(v):
            return f"ret {render(v)}"
        case Returned(v):
            return f"ret_ {render(v)}"
        case Switch(v, cases):
            return f"switch {render(v)} {{ {_join(cases)} }}"
        case Case(label, p, body):
            return f"#{render(label)}({render(p)}) => {render(body)}"
        case Branches(bs):
            return f"{{ {_join(bs)} }}"
        case Branch(label, body):
            return f"{render(label)} => {render(body)}"
        case Project(e, v):
            return f"{render(e)} <= {render(v)}"
        case Extract(v):
            return render(v)
        case Hole():
            return "__"

        # Traces
        case TraceSeq(items):
            return _join(items)
        case TraceNest(s, items):
            return f"#{render(s)} {{{_join(items)}}}"
        case TraceRet(v):
            return f"ret {render(v)}"
        case TracePut(s, v):
            return f"put {render(s)} <= {render(v)}"
        case TraceGet(s, v):
            return f"get {render(s)} => {render(v)}"
        case TraceLink(target, result):
            return f"link {render(target)} => {render(result)}"

        # Machine state
        case Running():
            return render_running(obj)
        case Frame(cont, trace):
            return f"[trace = {render_traces(trace)}, cont = {render(cont)}]"
        case LetFrame(env, p, body):
            return f"{_str_map(env.bxes)} ;; {_str_map(env.vals)} |- let {render(p)} = __; {render(body)}"
        case LetBxFrame(env, p, body):
            return (
                f"{_str_map(env.bxes)} ;; {_str_map(env.vals)} |- "
                f"let box {render(p)} = __; {render(body)}"
            )
        case AppFrame(v):
            return f"__ {render(v)}"
        case ProjectFrame(v):
            return f"__ <= {render(v)}"
        case NestFrame(s):
            return f"#{render(s)} {{ __ }}"
        case ProcPending(body):
            return f"spawn({render(body)})"
        case ProcRunning(r):
            return f"running({render_running(r)})"
        case ProcWaitingForPtr(r, s):
            return f"waitingForPtr({render_running(r)}, {render(s)})"
        case ProcWaitingForHalt(r, s):
            return f"waitingForHalt({render_running(r)}, {render(s)})"
        case ProcError(r, err):
            return f"error({render_error(err)}, {render_running(r)})"
        case ProcHalted(_, trace):
            return f"halted({render_traces(trace)})"
        case System():
            return render_system(obj)

        # Signals
        case Halt(v):
            return f"halt({render(v)})"
        case LinkWaitPtr(s):
            return f"linkWaitPtr({render(s)})"
        case LinkWaitHalt(s):
            return f"linkWaitHalt({render(s)})"
        case SpawnRequest(name, env, body):
            return (
                f"spawn([name = {render(name)}; bxes = {_str_map(env.bxes)}; "
                f"vals = {_str_map(env.vals)}; code = {render(body)}])"
            )

        case BaseException():
            return render_error(obj)

    raise TypeError(f"cannot render {obj!r}")


def render_traces(trace: Iterable[Any]) -> str:
    return f"[{_join(trace)}]"


def render_running(r: Running) -> str:
    return (
        f"[trace = {render_traces(r.trace)}; stack = [{_join(r.stack)}]; "
        f"bxes = {_str_map(r.env.bxes)}; vals = {_str_map(r.env.vals)}; cont = {render(r.cont)}]"
    )


def render_error(err: BaseException) -> str:
    match err:
        case UndefinedVariable(name):
            return f"value(undefined({name}))"
        case CallByValueLeak():
            return "value(callByValue)"
        case NotRecord():
            return "pattern(notRecord)"
        case NotVariant():
            return "pattern(notVariant)"
        case FieldNotFound(label):
            return f"pattern(fieldNotFound({render(label)}))"
        case CaseMismatch(expected, found):
            return f"pattern(caseMismatch({render(expected)}, {render(found)}))"
        case UndefinedBox(name):
            return f"extract(undefined({name}))"
        case SwitchNotVariant(v):
            return f"switch(notVariant({render(v)}))"
        case MissingCase(s):
            return f"switch(missingCase({render(s)}))"
        case MissingBranch(s):
            return f"project(missingBranch({render(s)}))"
        case NoStep():
            return "noStep"
        case NotASymbol(v):
            return f"notASymbol({render(v)})"
        case NotAPointer(v):
            return f"notAPointer({render(v)})"
        case NotLinkTarget(v):
            return f"notLinkTarget({render(v)})"
        case InvalidProc(s):
            return f"invalidProc({render(s)})"
        case UndefinedSymbol(s):
            return f"undefined({render(s)})"
        case DuplicateName(s):
            return f"duplicate({render(s)})"
        case AssertionFailure(v1, equal, v2):
            return f"assertionFailure({render(v1)} {'==' if equal else '!='} {render(v2)})"
        case InterpreterInvariantError():
            return f"internal({err.args[0] if err.args else 'impossible'})"
    return f"{type(err).__name__}({err.args!r})"


def render_system(system: System) -> str:
    return (
        f"fumola [\n  store = {_sym_map(system.store)};\n"
        f"  procs = {_sym_map(system.procs)}\n]\n"
    )


__all__ = [
    "render",
    "render_error",
    "render_running",
    "render_system",
    "render_traces",
]
