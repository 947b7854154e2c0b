"""
Logging Configuration and Convergence Diagnostics.

This module provides the loggers used across the library and a process-wide
record of iterative-solver outcomes. Numerical solvers in this package stop
on a tolerance and an iteration cap; when a cap is hit the outcome is either
an error or a documented fallback. Both are written to the log and kept in
the :class:`ConvergenceLog` so the boundary where fallbacks trigger can be
examined after a batch of computations.

Diagnostics Captured
--------------------
- Solver name (e.g. 'vincenty.inverse', 'ellipsoid.j2')
- Iterations spent
- Final residual
- Whether the iteration converged
- Free-form context (input values)
"""

import logging
import sys
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import threading


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the geodesy library.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


@dataclass
class ConvergenceEvent:
    """Outcome of one iterative computation.

    Attributes
    ----------
    timestamp : datetime
        When the event was recorded.
    solver : str
        Identifier of the iteration (e.g. 'vincenty.inverse').
    iterations : int
        Number of iterations performed.
    residual : float
        Last change of the iterated quantity.
    converged : bool
        Whether the tolerance was reached.
    context : dict
        Inputs and other details.
    """
    timestamp: datetime
    solver: str
    iterations: int
    residual: float
    converged: bool
    context: Dict[str, Any] = field(default_factory=dict)


class ConvergenceLog:
    """Process-wide store of convergence events.

    Only unusual outcomes are recorded: iterations that ran out of budget
    and degenerate-case fallbacks. Routine converged iterations are not
    stored.

    Thread Safety
    -------------
    All methods are thread-safe.

    Examples
    --------
    >>> log = ConvergenceLog()
    >>> event = log.record("ellipsoid.j2", iterations=51, residual=2e-15, converged=False)
    >>> log.summary()["ellipsoid.j2"]["not_converged"]
    1
    """

    _instance: Optional['ConvergenceLog'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConvergenceLog':
        """Singleton pattern for the global convergence log."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._events: List[ConvergenceEvent] = []
        self._events_lock = threading.Lock()
        self._logger = get_logger("convergence")
        self._initialized = True

    def record(
        self,
        solver: str,
        iterations: int,
        residual: float,
        converged: bool,
        context: Optional[Dict[str, Any]] = None
    ) -> ConvergenceEvent:
        """Record the outcome of an iteration.

        Parameters
        ----------
        solver : str
            Identifier of the iteration.
        iterations : int
            Iterations performed.
        residual : float
            Last change of the iterated quantity.
        converged : bool
            Whether the tolerance was reached.
        context : dict, optional
            Additional details.

        Returns
        -------
        ConvergenceEvent
            The stored event.
        """
        event = ConvergenceEvent(
            timestamp=datetime.now(),
            solver=solver,
            iterations=iterations,
            residual=residual,
            converged=converged,
            context=context or {}
        )
        with self._events_lock:
            self._events.append(event)

        status = "CONVERGED" if converged else "NOT CONVERGED"
        self._logger.debug(
            f"{solver} | {status} | iterations={iterations} | residual={residual:.3e}"
        )
        return event

    def events(self, solver: Optional[str] = None) -> List[ConvergenceEvent]:
        """Return recorded events, optionally filtered by solver name."""
        with self._events_lock:
            if solver is None:
                return list(self._events)
            return [e for e in self._events if e.solver == solver]

    def summary(self) -> Dict[str, Dict[str, int]]:
        """Count events per solver.

        Returns
        -------
        dict
            ``{solver: {"converged": n, "not_converged": m}}``.
        """
        with self._events_lock:
            converged = Counter(e.solver for e in self._events if e.converged)
            failed = Counter(e.solver for e in self._events if not e.converged)

        return {
            solver: {
                "converged": converged.get(solver, 0),
                "not_converged": failed.get(solver, 0),
            }
            for solver in set(converged) | set(failed)
        }

    def clear(self) -> None:
        """Forget all recorded events."""
        with self._events_lock:
            self._events.clear()
