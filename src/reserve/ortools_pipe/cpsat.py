from __future__ import annotations

import math
import time
from decimal import Decimal
from typing import Iterable, Sequence

import ortools.sat.python.cp_model as cp_model
from scipy import sparse

from ..problem import ReserveModel
from ..solution import NoSolutionError, ReserveSolution, round_selection
from .constants import (
    GAP,
    MAX_SCALE_DIGITS,
    NUM_THREADS,
    TARGET_TOLERANCE,
    TIME_LIMIT_MS,
)
from .reporting import print_results_cpsat


def determine_scaling_factor(
    values: Iterable[float], max_digits: int = MAX_SCALE_DIGITS
) -> int:
    """Minimal power-of-ten factor that turns all values into integers."""
    max_decimal_places = 0
    for value in values:
        if value is None:
            continue
        dec_value = Decimal(str(value)).normalize()
        if dec_value.is_nan():
            continue
        if dec_value == 0:
            continue
        exponent = dec_value.as_tuple().exponent
        if exponent < 0:
            max_decimal_places = max(max_decimal_places, -exponent)

    return max(1, 10 ** min(max_decimal_places, max_digits))


class CPSATReserveModel:
    """
    Reserve selection using the CP-SAT solver.
    Mirrors the linearized LP formulation but CP-SAT needs integer
    coefficients, so objective and targets are scaled by powers of ten.
    """

    solver_name = "cpsat"

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

        self.pair_terms = reserve_model.pair_terms()
        self.objective_scale = determine_scaling_factor(
            [*reserve_model.obj.tolist(), *(c for _, _, c in self.pair_terms)]
        )
        self.target_scale = determine_scaling_factor(
            [*reserve_model.A.data.tolist(), *reserve_model.rhs.tolist()]
        )

        self.x: dict = {}
        self.y: dict = {}

    def _scale(self, value: float, factor: int) -> int:
        return int(round(value * factor))

    @staticmethod
    def _is_feasible_status(status: int) -> bool:
        return status in (cp_model.OPTIMAL, cp_model.FEASIBLE)

    def _create_solver(self) -> cp_model.CpSolver:
        return cp_model.CpSolver()

    def set_solver_parameters(
        self,
        solver: cp_model.CpSolver,
        num_threads: int,
        time_limit_ms: int | None,
        gap: float | None = None,
        log_search_progress: bool = True,
    ) -> None:
        """Workers, stopping rule (time limit or gap) and presolve settings."""
        params = solver.parameters

        if num_threads and num_threads > 0:
            params.num_workers = max(1, num_threads)

        if time_limit_ms and time_limit_ms > 0:
            params.max_time_in_seconds = time_limit_ms / 1000.0

        if gap is not None and gap >= 0:
            params.relative_gap_limit = gap

        params.log_search_progress = log_search_progress
        params.cp_model_presolve = True
        params.linearization_level = 2

    # --- MODEL BUILDING METHODS (CP-SAT) ---

    def _create_x_vars(self, model: cp_model.CpModel) -> dict:
        rm = self.reserve_model
        x = {}
        for i in range(rm.n_units):
            name = f"x_{self.unit_ids[i]}" if self.unit_ids is not None else f"x_{i}"
            x[i] = model.NewBoolVar(name)
            if rm.lb[i] > 0.5:
                model.Add(x[i] == 1).WithName(f"lock_in_{i}")
            elif rm.ub[i] < 0.5:
                model.Add(x[i] == 0).WithName(f"lock_out_{i}")
        return x

    def _create_y_vars(self, model: cp_model.CpModel) -> dict:
        y = {}
        for i, j, _ in self.pair_terms:
            y[(i, j)] = model.NewBoolVar(f"y_{i}_{j}")
        return y

    def _add_linearization_constraints(self, model: cp_model.CpModel) -> None:
        for i, j, coef in self.pair_terms:
            model.AddImplication(self.y[(i, j)], self.x[i])
            model.AddImplication(self.y[(i, j)], self.x[j])
            if coef > 0:
                model.AddBoolOr(
                    [self.x[i].Not(), self.x[j].Not(), self.y[(i, j)]]
                )

    def _scaled_target_row(self, values, rhs: float) -> tuple[list[int], int]:
        """
        Integer coefficients and required amount for one target row.

        Coefficients that are not exact at the chosen scale are rounded one
        by one; the required amount is lowered by their summed rounding error
        so no selection that meets the real-valued target is cut off.
        """
        scaled = [float(v) * self.target_scale for v in values]
        coefs = [int(round(v)) for v in scaled]
        rounding_error = sum(abs(v - c) for v, c in zip(scaled, coefs))
        required = math.ceil(
            (rhs - TARGET_TOLERANCE) * self.target_scale - rounding_error
        )
        return coefs, max(required, 0)

    def _add_representation_constraints(self, model: cp_model.CpModel) -> None:
        rm = self.reserve_model
        A = sparse.csr_matrix(rm.A)
        for f, name in enumerate(rm.feature_names):
            start, end = A.indptr[f], A.indptr[f + 1]
            coefs, required = self._scaled_target_row(
                A.data[start:end], float(rm.rhs[f])
            )
            held = sum(
                c * self.x[int(i)] for c, i in zip(coefs, A.indices[start:end])
            )
            model.Add(held >= required).WithName(f"target_{name}")

    def solve(self) -> ReserveSolution:
        rm = self.reserve_model
        model = cp_model.CpModel()
        self.x = self._create_x_vars(model)
        self.y = self._create_y_vars(model)

        objective = sum(
            self._scale(float(rm.obj[i]), self.objective_scale) * self.x[i]
            for i in range(rm.n_units)
        )
        objective += sum(
            self._scale(coef, self.objective_scale) * self.y[(i, j)]
            for i, j, coef in self.pair_terms
        )
        model.Minimize(objective)

        self._add_linearization_constraints(model)
        self._add_representation_constraints(model)

        solver = self._create_solver()
        gap = None if self.time_limit_ms is not None else self.gap
        self.set_solver_parameters(
            solver,
            self.num_threads,
            self.time_limit_ms,
            gap=gap,
            log_search_progress=self.output,
        )
        start_time = time.time()
        status = solver.Solve(model)
        elapsed_time = time.time() - start_time

        if not self._is_feasible_status(status):
            print_results_cpsat(
                solver,
                status,
                elapsed_time,
                "Reserve selection",
                objective_scale=float(self.objective_scale),
            )
            raise NoSolutionError(self.solver_name, solver.StatusName(status))

        selected = round_selection([solver.Value(self.x[i]) for i in range(rm.n_units)])
        objective_value = rm.evaluate(selected)
        print_results_cpsat(
            solver,
            status,
            elapsed_time,
            "Reserve selection",
            objective=objective_value,
            objective_scale=float(self.objective_scale),
            cost=float(rm.cost @ selected),
            n_selected=int(selected.sum()),
        )
        return ReserveSolution(
            selected_units=selected,
            objective_value=objective_value,
            objective_bound=solver.BestObjectiveBound() / self.objective_scale,
            status=solver.StatusName(status),
            solver=self.solver_name,
            runtime_seconds=float(solver.WallTime()),
        )
