"""Error types for the fumola machine.

Three tiers:
- Signals (see :mod:`fumola.machine.signals`) are not errors at all.
- :class:`MachineError` and its subclasses are *program errors*. The
  transition function raises them; the lifecycle wrapper catches them and
  moves exactly one process to the errored state. They never stop the
  scheduler or any other process.
- :class:`InterpreterInvariantError` means the machine itself is broken
  (a hole reached the head, an impossible state). It is never caught by
  the machine and escapes from ``step``/``fully``.

Program errors compare structurally, so tests can assert on them directly.
"""

from __future__ import annotations

from dataclasses import dataclass

from fumola.ast import Sym, Val


class MachineError(Exception):
    """Base class for program errors attached to a single process."""

    def __str__(self) -> str:
        from fumola.format import render_error

        return render_error(self)


# ============================================================================
# Value resolution
# ============================================================================


class ValueResolutionError(MachineError):
    """A value could not be closed under the current environment."""


@dataclass
class UndefinedVariable(ValueResolutionError):
    name: str


@dataclass
class CallByValueLeak(ValueResolutionError):
    """A CallByValue wrapper reached the machine; normalization was skipped."""


# ============================================================================
# Patterns
# ============================================================================


class PatternError(MachineError):
    """A value did not have the shape a pattern requires."""


@dataclass
class NotRecord(PatternError):
    pass


@dataclass
class NotVariant(PatternError):
    pass


@dataclass
class FieldNotFound(PatternError):
    label: Val


@dataclass
class CaseMismatch(PatternError):
    """A single-case pattern met a variant with another label."""

    expected: Val
    found: Val


# ============================================================================
# Extract / switch / project
# ============================================================================


class ExtractError(MachineError):
    pass


@dataclass
class UndefinedBox(ExtractError):
    name: str


class SwitchError(MachineError):
    pass


@dataclass
class SwitchNotVariant(SwitchError):
    value: Val


@dataclass
class MissingCase(SwitchError):
    sym: Sym


class ProjectError(MachineError):
    pass


@dataclass
class MissingBranch(ProjectError):
    sym: Sym


# ============================================================================
# Stuck configurations and value-kind mismatches
# ============================================================================


@dataclass
class NoStep(MachineError):
    """No transition is defined for this term and stack."""


@dataclass
class NotASymbol(MachineError):
    value: Val


@dataclass
class NotAPointer(MachineError):
    value: Val


@dataclass
class NotLinkTarget(MachineError):
    value: Val


@dataclass
class InvalidProc(MachineError):
    """``link`` on a process name that does not exist."""

    sym: Sym


@dataclass
class UndefinedSymbol(MachineError):
    """``get`` on a pointer with no store entry."""

    sym: Sym


@dataclass
class DuplicateName(MachineError):
    """``spawn`` of a name that already has a store entry."""

    sym: Sym


@dataclass
class AssertionFailure(MachineError):
    left: Val
    equal: bool
    right: Val


# ============================================================================
# Non-program errors
# ============================================================================


class InterpreterInvariantError(Exception):
    """Raised when the machine reaches a state it should never reach."""


@dataclass
class RoundLimitExceeded(Exception):
    """``fully`` ran the configured number of rounds without reaching a fixpoint."""

    rounds: int

    def __str__(self) -> str:
        return f"no fixpoint after {self.rounds} rounds"


__all__ = [
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
]
