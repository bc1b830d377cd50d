from __future__ import annotations

import time
from typing import Sequence

import gurobipy as gp
from gurobipy import GRB

from ..problem import ReserveModel
from ..solution import NoSolutionError, ReserveSolution, round_selection
from .common import create_model, print_results, status_name
from .constants import FOCUS, GAP, HEURISTICS, THREADS, TIME_LIMIT
from .constraints import add_representation_constraints, build_objective
from .variables import create_x_vars


class GurobiReserveModel:
    """
    Solves a ReserveModel as a binary quadratic program with Gurobi.
    Gurobi errors (licence, memory) propagate unchanged.
    """

    solver_name = "gurobi"

    def __init__(
        self,
        reserve_model: ReserveModel,
        *,
        unit_ids: Sequence[str] | None = None,
        time_limit_seconds: float | None = TIME_LIMIT,
        gap: float = GAP,
        heuristics: float = HEURISTICS,
        focus: int = FOCUS,
        threads: int | None = THREADS,
        output: bool = True,
    ):
        self.reserve_model = reserve_model
        self.unit_ids = unit_ids
        self.time_limit_seconds = time_limit_seconds
        self.gap = gap
        self.heuristics = heuristics
        self.focus = focus
        self.threads = threads
        self.output = output

        self.model: gp.Model | None = None
        self.x: dict[int, gp.Var] = {}

    def build(self) -> gp.Model:
        rm = self.reserve_model
        self.model = create_model(
            "reserve_selection",
            output=self.output,
            time_limit_seconds=self.time_limit_seconds,
            gap=self.gap,
            heuristics=self.heuristics,
            focus=self.focus,
            threads=self.threads,
        )
        self.x = create_x_vars(self.model, rm.lb, rm.ub, self.unit_ids)
        self.model.update()

        pair_terms = rm.pair_terms()
        self.model.setObjective(
            build_objective(self.x, rm.obj, pair_terms), GRB.MINIMIZE
        )
        add_representation_constraints(
            self.model, self.x, rm.A, rm.rhs, rm.feature_names
        )
        self.model.update()
        print(
            f"Model built: {rm.n_units} units, {rm.n_features} targets, "
            f"{len(pair_terms)} boundary pairs (blm={rm.blm})"
        )
        return self.model

    def solve(self) -> ReserveSolution:
        if self.model is None:
            self.build()

        start_time = time.time()
        self.model.optimize()
        elapsed_time = time.time() - start_time

        if self.model.SolCount == 0:
            print_results(self.model, elapsed_time, "Reserve selection", 0.0)
            raise NoSolutionError(self.solver_name, status_name(self.model.Status))

        selected = round_selection([self.x[i].X for i in range(len(self.x))])
        print_results(
            self.model,
            elapsed_time,
            "Reserve selection",
            float(self.reserve_model.cost @ selected),
            n_selected=int(selected.sum()),
        )
        return ReserveSolution(
            selected_units=selected,
            objective_value=float(self.model.ObjVal),
            objective_bound=float(self.model.ObjBound),
            status=status_name(self.model.Status),
            solver=self.solver_name,
            runtime_seconds=float(self.model.Runtime),
        )


__all__ = ["GurobiReserveModel"]
