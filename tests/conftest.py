"""
Pytest configuration for fumola tests.

Provides fixtures for running terms to a fixpoint and inspecting the final
system, either structurally or through its rendering.
"""

from collections.abc import Callable

import pytest

from fumola.ast import ANON, Exp
from fumola.machine.state import Proc, System
from fumola.runtime import run


@pytest.fixture
def run_term() -> Callable[[Exp], System]:
    """Normalize, initialize and run a term to its fixpoint."""
    return run


@pytest.fixture
def final() -> Callable[[Exp], str]:
    """Render the final system of a term."""

    def _final(term: Exp) -> str:
        return str(run(term))

    return _final


@pytest.fixture
def root() -> Callable[[Exp], Proc]:
    """Run a term and return the final state of the anonymous root process."""

    def _root(term: Exp) -> Proc:
        return run(term).procs[ANON]

    return _root
