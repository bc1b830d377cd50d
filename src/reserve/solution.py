from __future__ import annotations

from dataclasses import dataclass

import numpy as np


class NoSolutionError(RuntimeError):
    """The solver stopped without a feasible selection (e.g. infeasible model)."""

    def __init__(self, solver: str, status, message: str | None = None):
        self.solver = solver
        self.status = status
        super().__init__(
            message or f"{solver} finished without a feasible solution (status: {status})"
        )


def relative_gap(value: float, bound: float) -> float:
    """Relative optimality gap |value - bound| / |value|."""
    if value == bound:
        return 0.0
    if value == 0:
        return float("inf")
    return abs(value - bound) / abs(value)


@dataclass
class ReserveSolution:
    selected_units: np.ndarray
    objective_value: float
    objective_bound: float
    status: str
    solver: str
    runtime_seconds: float = 0.0

    @property
    def selected_indices(self) -> list[int]:
        return [int(i) for i in np.flatnonzero(self.selected_units)]

    @property
    def n_selected(self) -> int:
        return int(np.sum(self.selected_units))

    @property
    def gap(self) -> float:
        return relative_gap(self.objective_value, self.objective_bound)


def round_selection(values) -> np.ndarray:
    """Round relaxed solver values to a 0/1 integer vector."""
    return (np.asarray(values, dtype=float) > 0.5).astype(np.int64)


__all__ = ["NoSolutionError", "ReserveSolution", "relative_gap", "round_selection"]
