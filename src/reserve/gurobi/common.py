"""
Small shared helpers for the Gurobi reserve model.
"""

from __future__ import annotations

from typing import Optional

import gurobipy as gp
from gurobipy import GRB

STATUS_NAMES = {
    GRB.OPTIMAL: "OPTIMAL",
    GRB.INFEASIBLE: "INFEASIBLE",
    GRB.INF_OR_UNBD: "INF_OR_UNBD",
    GRB.UNBOUNDED: "UNBOUNDED",
    GRB.TIME_LIMIT: "TIME_LIMIT",
    GRB.SUBOPTIMAL: "SUBOPTIMAL",
    GRB.INTERRUPTED: "INTERRUPTED",
}


def status_name(status: int) -> str:
    return STATUS_NAMES.get(status, str(status))


def create_model(
    name: str,
    *,
    output: bool = True,
    time_limit_seconds: Optional[float],
    gap: float | None = None,
    heuristics: float,
    focus: int,
    threads: int | None = None,
) -> gp.Model:
    """
    Create a configured model. A time limit and an optimality gap are
    alternative stopping rules: when a time limit is given the gap is ignored.
    """
    params: dict[str, float] = {
        "OutputFlag": 1 if output else 0,
        "MIPFocus": focus,
        "Heuristics": heuristics,
    }
    if time_limit_seconds is not None:
        params["TimeLimit"] = time_limit_seconds
    elif gap is not None:
        params["MIPGap"] = gap
    if threads is not None:
        params["Threads"] = threads

    model = gp.Model(name)
    for param, value in params.items():
        model.setParam(param, value)
    return model


def _outcome(model: gp.Model) -> str:
    if model.Status == GRB.OPTIMAL:
        return "✓ OPTIMAL reserve found!"
    if model.SolCount > 0:
        return "✓ FEASIBLE reserve found (stopped early, not proven optimal)"
    if model.Status in (GRB.INFEASIBLE, GRB.INF_OR_UNBD):
        return "✗ Targets cannot be met with the available planning units"
    return "✗ Stopped before a first reserve was found"


def print_results(
    model: gp.Model,
    elapsed_time: float,
    phase: str,
    cost: float,
    n_selected: int | None = None,
):
    """Banner-framed report of the solver outcome, shared layout with OR-Tools."""
    print(f"\n{'=' * 60}")
    print(f"SOLUTION RESULTS - {phase}")
    print(f"{'=' * 60}")
    print(f"Solution status: {status_name(model.Status)}")
    print(_outcome(model))
    if model.SolCount == 0:
        return

    print(f"Model size: {model.NumVars} variables, {model.NumConstrs} constraints")
    print(f"\nObjective value: {model.ObjVal:.4f}")
    print(f"Objective bound: {model.ObjBound:.4f}")
    print(f"Total cost: {cost:.2f}")
    if n_selected is not None:
        print(f"Selected units: {n_selected}")
    print(f"Solver runtime: {model.Runtime:.2f} seconds")
    print(f"Actual elapsed time: {elapsed_time:.2f} seconds")


__all__ = ["create_model", "print_results", "status_name"]
