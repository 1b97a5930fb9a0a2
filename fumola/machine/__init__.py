"""The fumola abstract machine.

- step: the single-process transition function
- process: the lifecycle wrapper over it
- scheduler: synchronized rounds over all named processes
"""

from fumola.machine.errors import (
    AssertionFailure,
    CallByValueLeak,
    CaseMismatch,
    DuplicateName,
    ExtractError,
    FieldNotFound,
    InterpreterInvariantError,
    InvalidProc,
    MachineError,
    MissingBranch,
    MissingCase,
    NoStep,
    NotAPointer,
    NotASymbol,
    NotLinkTarget,
    NotRecord,
    NotVariant,
    PatternError,
    ProjectError,
    RoundLimitExceeded,
    SwitchError,
    SwitchNotVariant,
    UndefinedBox,
    UndefinedSymbol,
    UndefinedVariable,
    ValueResolutionError,
)
from fumola.machine.frames import (
    AppFrame,
    Frame,
    LetBxFrame,
    LetFrame,
    NestFrame,
    ProjectFrame,
)
from fumola.machine.process import step_proc
from fumola.machine.scheduler import StepResult, fully, step_system
from fumola.machine.signals import Halt, LinkWaitHalt, LinkWaitPtr, Signal, SpawnRequest
from fumola.machine.state import (
    Proc,
    ProcError,
    ProcHalted,
    ProcPending,
    ProcRunning,
    ProcWaitingForHalt,
    ProcWaitingForPtr,
    Running,
    System,
)
from fumola.machine.step import step_running
from fumola.machine.trace import (
    Trace,
    TraceGet,
    TraceLink,
    TraceNest,
    TracePut,
    TraceRet,
    TraceSeq,
)
from fumola.machine.types import Env, Store

__all__ = [
    # Errors
    "AssertionFailure",
    "CallByValueLeak",
    "CaseMismatch",
    "DuplicateName",
    "ExtractError",
    "FieldNotFound",
    "InterpreterInvariantError",
    "InvalidProc",
    "MachineError",
    "MissingBranch",
    "MissingCase",
    "NoStep",
    "NotAPointer",
    "NotASymbol",
    "NotLinkTarget",
    "NotRecord",
    "NotVariant",
    "PatternError",
    "ProjectError",
    "RoundLimitExceeded",
    "SwitchError",
    "SwitchNotVariant",
    "UndefinedBox",
    "UndefinedSymbol",
    "UndefinedVariable",
    "ValueResolutionError",
    # Frames
    "AppFrame",
    "Frame",
    "LetBxFrame",
    "LetFrame",
    "NestFrame",
    "ProjectFrame",
    # Signals
    "Halt",
    "LinkWaitHalt",
    "LinkWaitPtr",
    "Signal",
    "SpawnRequest",
    # State
    "Env",
    "Proc",
    "ProcError",
    "ProcHalted",
    "ProcPending",
    "ProcRunning",
    "ProcWaitingForHalt",
    "ProcWaitingForPtr",
    "Running",
    "Store",
    "System",
    # Traces
    "Trace",
    "TraceGet",
    "TraceLink",
    "TraceNest",
    "TracePut",
    "TraceRet",
    "TraceSeq",
    # Stepping
    "StepResult",
    "fully",
    "step_proc",
    "step_running",
    "step_system",
]
