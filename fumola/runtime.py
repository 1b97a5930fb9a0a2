"""Host driving API.

    >>> from fumola import build as b
    >>> from fumola.runtime import run
    >>> system = run(b.put(b.lit("a"), 1))
    >>> print(system, end="")
    fumola [
      store = [a => 1];
      procs = [% => halted([put a <= 1])]
    ]

Configuration comes from :class:`RunConfig`, either passed explicitly or
read from the environment with :meth:`RunConfig.from_env`:

- ``FUMOLA_FRESH_NAME_BASE``: prefix for normalizer-introduced names
- ``FUMOLA_MAX_ROUNDS``: bound on progressing rounds in :func:`run`
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass

from fumola.ast import Exp
from fumola.cbpv import FreeVars, convert
from fumola.machine.scheduler import StepResult, fully, step_system
from fumola.machine.state import System

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunConfig:
    """Settings for normalizing and running a term."""

    fresh_name_base: str = "_t_"
    max_rounds: int | None = None

    @classmethod
    def from_env(cls) -> RunConfig:
        """Build a config from ``FUMOLA_*`` environment variables.

        Raises:
            ValueError: if ``FUMOLA_MAX_ROUNDS`` is not a non-negative integer.
        """
        base = os.environ.get("FUMOLA_FRESH_NAME_BASE", cls.fresh_name_base)
        raw_rounds = os.environ.get("FUMOLA_MAX_ROUNDS", "").strip()
        max_rounds = None
        if raw_rounds:
            max_rounds = int(raw_rounds)
            if max_rounds < 0:
                raise ValueError(f"FUMOLA_MAX_ROUNDS must be >= 0, got {max_rounds}")
        return cls(fresh_name_base=base, max_rounds=max_rounds)


def normalize(e: Exp, free_vars: Iterator[str] | None = None) -> Exp:
    """Remove every call-by-value wrapper from ``e``."""
    return convert(free_vars if free_vars is not None else FreeVars(), e)


def system_from_exp(e: Exp, config: RunConfig | None = None) -> System:
    """Normalize ``e`` and wrap it as the body of one anonymous process."""
    config = config or RunConfig()
    return System.initial(normalize(e, FreeVars(config.fresh_name_base)))


def step(system: System) -> StepResult:
    """One scheduler round."""
    return step_system(system)


def run(e: Exp, config: RunConfig | None = None) -> System:
    """Normalize, initialize and run ``e`` to a fixpoint."""
    config = config or RunConfig()
    system = system_from_exp(e, config)
    fully(system, max_rounds=config.max_rounds)
    logger.debug("final system:\n%s", system)
    return system


__all__ = ["RunConfig", "fully", "normalize", "run", "step", "system_from_exp"]
