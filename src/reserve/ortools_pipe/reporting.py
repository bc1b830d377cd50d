"""
Console reports for the OR-Tools back ends, in the same banner layout as the
Gurobi adapter.
"""

from __future__ import annotations

import ortools.linear_solver.pywraplp as pywraplp
import ortools.sat.python.cp_model as cp_model

LP_STATUS_NAMES = {
    pywraplp.Solver.OPTIMAL: "OPTIMAL",
    pywraplp.Solver.FEASIBLE: "FEASIBLE",
    pywraplp.Solver.INFEASIBLE: "INFEASIBLE",
    pywraplp.Solver.UNBOUNDED: "UNBOUNDED",
    pywraplp.Solver.ABNORMAL: "ABNORMAL",
    pywraplp.Solver.NOT_SOLVED: "NOT_SOLVED",
}

STATUS_MESSAGES = {
    "OPTIMAL": "✓ OPTIMAL reserve found!",
    "FEASIBLE": "✓ FEASIBLE reserve found (stopped early, not proven optimal)",
    "INFEASIBLE": "✗ Targets cannot be met with the available planning units",
    "NOT_SOLVED": "✗ Stopped before a first reserve was found",
    "UNKNOWN": "✗ Stopped before a first reserve was found",
}


def lp_status_name(status: int) -> str:
    return LP_STATUS_NAMES.get(status, str(status))


def _banner(phase: str, status: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"SOLUTION RESULTS - {phase}")
    print(f"{'=' * 60}")
    print(f"Solution status: {status}")
    print(STATUS_MESSAGES.get(status, f"✗ No reserve found (status: {status})"))


def _footer(
    objective: float,
    bound: float,
    cost: float | None,
    n_selected: int | None,
    runtime: float,
    elapsed_time: float,
) -> None:
    print(f"\nObjective value: {objective:.4f}")
    print(f"Objective bound: {bound:.4f}")
    if cost is not None:
        print(f"Total cost: {cost:.2f}")
    if n_selected is not None:
        print(f"Selected units: {n_selected}")
    print(f"Solver runtime: {runtime:.2f} seconds")
    print(f"Actual elapsed time: {elapsed_time:.2f} seconds")


def print_results(
    solver: pywraplp.Solver,
    status: int,
    elapsed_time: float,
    phase: str,
    *,
    cost: float | None = None,
    n_selected: int | None = None,
) -> None:
    _banner(phase, lp_status_name(status))
    if status not in (pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE):
        return
    print(
        f"Model size: {solver.NumVariables()} variables, "
        f"{solver.NumConstraints()} constraints"
    )
    _footer(
        solver.Objective().Value(),
        solver.Objective().BestBound(),
        cost,
        n_selected,
        solver.WallTime() / 1000.0,
        elapsed_time,
    )


def print_results_cpsat(
    solver: cp_model.CpSolver,
    status: int,
    elapsed_time: float,
    phase: str,
    *,
    objective: float | None = None,
    objective_scale: float = 1.0,
    cost: float | None = None,
    n_selected: int | None = None,
) -> None:
    """`objective` is the unscaled value recomputed from the selection."""
    _banner(phase, solver.StatusName(status))
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        print(f"Actual elapsed time: {elapsed_time:.2f} seconds")
        return
    if objective_scale != 1:
        print(f"Integer scaling factor: {objective_scale:g}")
    _footer(
        solver.ObjectiveValue() / objective_scale if objective is None else objective,
        solver.BestObjectiveBound() / objective_scale,
        cost,
        n_selected,
        solver.WallTime(),
        elapsed_time,
    )
