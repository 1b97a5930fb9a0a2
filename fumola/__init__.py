"""
fumola - an abstract machine for a small concurrent calculus.

Terms are call-by-push-value computations over symbols, a shared store,
named processes that spawn and link each other, and code boxes. A term is
first normalized (computations in value position are hoisted into ``let``
bindings) and then run by a round-based scheduler over named processes.

Example:
    >>> from fumola import build as b, run
    >>> system = run(b.let("x", b.put(b.lit("a"), 1), b.get("x")))
    >>> system.procs[b.sym(None)].retval
    Num(n=1)
"""

from fumola import build
from fumola.ast import (
    ANON,
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
from fumola.cbpv import FreeVars, FreeVarsExhausted, convert
from fumola.format import render
from fumola.machine import (
    MachineError,
    ProcError,
    ProcHalted,
    ProcPending,
    ProcRunning,
    ProcWaitingForHalt,
    ProcWaitingForPtr,
    StepResult,
    System,
)
from fumola.runtime import RunConfig, fully, normalize, run, step, system_from_exp

__all__ = [
    "build",
    # Terms
    "ANON",
    "UNIT",
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
    "Hole",
    "Lambda",
    "Let",
    "LetBx",
    "Link",
    "Nest",
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
    "Val",
    "ValField",
    "Var",
    "Variant",
    # Normalization
    "FreeVars",
    "FreeVarsExhausted",
    "convert",
    "normalize",
    # Machine
    "MachineError",
    "ProcError",
    "ProcHalted",
    "ProcPending",
    "ProcRunning",
    "ProcWaitingForHalt",
    "ProcWaitingForPtr",
    "StepResult",
    "System",
    # Driving
    "RunConfig",
    "fully",
    "render",
    "run",
    "step",
    "system_from_exp",
]
