from __future__ import annotations

import ortools.linear_solver.pywraplp as pywraplp

from .base_lp import ORToolsReserveModelBase


class SCIPReserveModel(ORToolsReserveModelBase):
    """Reserve selection using the SCIP solver."""

    solver_name = "scip"

    def _create_solver(self):
        return pywraplp.Solver.CreateSolver("SCIP")

    def set_solver_parameters(
        self,
        solver: pywraplp.Solver,
        num_threads: int,
        time_limit_ms: int | None,
        gap: float | None = None,
    ):
        solver.SetNumThreads(num_threads)
        if time_limit_ms is not None:
            solver.SetTimeLimit(int(time_limit_ms))
        if gap is not None:
            solver.SetSolverSpecificParametersAsString(f"limits/gap = {gap}\n")

        if self.output:
            solver.EnableOutput()
        else:
            solver.SuppressOutput()


class CBCReserveModel(ORToolsReserveModelBase):
    """Reserve selection using the CBC solver."""

    solver_name = "cbc"

    def _create_solver(self):
        return pywraplp.Solver.CreateSolver("CBC")

    def set_solver_parameters(
        self,
        solver: pywraplp.Solver,
        num_threads: int,
        time_limit_ms: int | None,
        gap: float | None = None,
    ):
        solver.SetNumThreads(num_threads)
        if time_limit_ms is not None:
            solver.SetTimeLimit(int(time_limit_ms))
        if gap is not None:
            solver.SetSolverSpecificParametersAsString(f"ratioGap={gap}")

        if self.output:
            solver.EnableOutput()
        else:
            solver.SuppressOutput()
