from __future__ import annotations

import time
from typing import Sequence

import ortools.linear_solver.pywraplp as pywraplp
from scipy import sparse

from ..problem import ReserveModel
from ..solution import NoSolutionError, ReserveSolution, round_selection
from .constants import GAP, NUM_THREADS, TIME_LIMIT_MS
from .reporting import lp_status_name, print_results


class ORToolsReserveModelBase:
    """
    Reserve selection through the OR-Tools linear solver interface.

    These MIP solvers take no quadratic objective, so every boundary product
    x_i * x_j is replaced by an auxiliary binary y_ij. Subclasses only
    implement `_create_solver` and solver-specific parameter setting.
    """

    solver_name = "ortools"

    def __init__(
        self,
        reserve_model: ReserveModel,
        *,
        unit_ids: Sequence[str] | None = None,
        time_limit_ms: int | None = TIME_LIMIT_MS,
        gap: float = GAP,
        num_threads: int = NUM_THREADS,
        output: bool = True,
    ):
        self.reserve_model = reserve_model
        self.unit_ids = unit_ids
        self.time_limit_ms = time_limit_ms
        self.gap = gap
        self.num_threads = num_threads
        self.output = output

        self.x: dict = {}
        self.y: dict = {}

    # REUSABLE MODEL BUILDING METHODS

    def _create_x_vars(self, model: pywraplp.Solver) -> dict:
        """Creates x variables (unit selected) with lock bounds."""
        rm = self.reserve_model
        x = {}
        for i in range(rm.n_units):
            name = f"x_{self.unit_ids[i]}" if self.unit_ids is not None else f"x_{i}"
            x[i] = model.IntVar(float(rm.lb[i]), float(rm.ub[i]), name)
        return x

    def _create_y_vars(self, model: pywraplp.Solver, pair_terms: list) -> dict:
        """Creates y variables (both units of an adjacent pair selected)."""
        y = {}
        for i, j, _ in pair_terms:
            y[(i, j)] = model.BoolVar(f"y_{i}_{j}")
        return y

    def _add_linearization_constraints(
        self, model: pywraplp.Solver, x: dict, y: dict, pair_terms: list
    ) -> None:
        """
        y_ij <= x_i and y_ij <= x_j always; the lower link y_ij >= x_i + x_j - 1
        is only needed when the pair makes the objective grow.
        """
        print(f"Adding linearization constraints for {len(pair_terms)} pairs...")
        for i, j, coef in pair_terms:
            model.Add(y[(i, j)] <= x[i], f"pair_up_{i}_{j}_a")
            model.Add(y[(i, j)] <= x[j], f"pair_up_{i}_{j}_b")
            if coef > 0:
                model.Add(y[(i, j)] >= x[i] + x[j] - 1, f"pair_lo_{i}_{j}")

    def _add_representation_constraints(self, model: pywraplp.Solver, x: dict) -> None:
        rm = self.reserve_model
        A = sparse.csr_matrix(rm.A)
        print(f"Adding {rm.n_features} representation constraints...")
        for f, name in enumerate(rm.feature_names):
            start, end = A.indptr[f], A.indptr[f + 1]
            held = model.Sum(
                float(v) * x[int(i)]
                for v, i in zip(A.data[start:end], A.indices[start:end])
            )
            model.Add(held >= float(rm.rhs[f]), f"target_{name}")

    # ABSTRACT METHODS (TO BE IMPLEMENTED BY SUBCLASSES)

    def _create_solver(self) -> pywraplp.Solver:
        """Return an OR-Tools solver instance."""
        raise NotImplementedError("Subclass must implement _create_solver()")

    def set_solver_parameters(
        self,
        solver: pywraplp.Solver,
        num_threads: int,
        time_limit_ms: int | None,
        gap: float | None = None,
    ) -> None:
        """Configure solver parameters."""
        raise NotImplementedError("Subclass must implement set_solver_parameters()")

    # MAIN METHOD

    def solve(self) -> ReserveSolution:
        rm = self.reserve_model
        model = self._create_solver()
        if model is None:
            raise RuntimeError(f"OR-Tools backend {self.solver_name} is unavailable")
        # A time limit replaces the gap as stopping rule.
        gap = None if self.time_limit_ms is not None else self.gap
        self.set_solver_parameters(model, self.num_threads, self.time_limit_ms, gap)

        pair_terms = rm.pair_terms()
        self.x = self._create_x_vars(model)
        self.y = self._create_y_vars(model, pair_terms)

        objective = model.Sum(float(rm.obj[i]) * self.x[i] for i in range(rm.n_units))
        objective += model.Sum(coef * self.y[(i, j)] for i, j, coef in pair_terms)
        model.Minimize(objective)

        self._add_linearization_constraints(model, self.x, self.y, pair_terms)
        self._add_representation_constraints(model, self.x)

        start_time = time.time()
        status = model.Solve()
        elapsed_time = time.time() - start_time

        if status not in [pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE]:
            print_results(model, status, elapsed_time, "Reserve selection")
            raise NoSolutionError(self.solver_name, lp_status_name(status))

        selected = round_selection(
            [self.x[i].SolutionValue() for i in range(rm.n_units)]
        )
        print_results(
            model,
            status,
            elapsed_time,
            "Reserve selection",
            cost=float(rm.cost @ selected),
            n_selected=int(selected.sum()),
        )
        return ReserveSolution(
            selected_units=selected,
            objective_value=float(model.Objective().Value()),
            objective_bound=float(model.Objective().BestBound()),
            status=lp_status_name(status),
            solver=self.solver_name,
            runtime_seconds=model.WallTime() / 1000.0,
        )
