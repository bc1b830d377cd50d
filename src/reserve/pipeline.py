"""
End-to-end reserve selection: planning units -> boundary-penalized model ->
solver -> summary. One run per call, nothing is kept between runs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from .grid import PlanningUnits
from .gurobi import GurobiReserveModel
from .gurobi.constants import BLM, EDGE_FACTOR, GAP, TARGET, TARGET_TYPE, THREADS
from .ortools_pipe import CBCReserveModel, CPSATReserveModel, SCIPReserveModel
from .problem import ReserveModel, build_reserve_model
from .solution import ReserveSolution
from .summary import SolutionSummary, build_solution_summary, report_summary

SOLVERS = ["gurobi", "scip", "cbc", "cpsat"]

ORTOOLS_CLASS_MAP = {
    "scip": SCIPReserveModel,
    "cbc": CBCReserveModel,
    "cpsat": CPSATReserveModel,
}


@dataclass
class PipelineResult:
    model: ReserveModel
    solution: ReserveSolution
    summary: SolutionSummary
    elapsed_seconds: float


def solve_reserve_model(
    reserve_model: ReserveModel,
    solver: str = "gurobi",
    *,
    unit_ids: Sequence[str] | None = None,
    gap: float = GAP,
    time_limit_seconds: float | None = None,
    threads: int = THREADS,
    output: bool = True,
) -> ReserveSolution:
    """Hand a built model to one of the supported solvers."""
    if solver == "gurobi":
        return GurobiReserveModel(
            reserve_model,
            unit_ids=unit_ids,
            time_limit_seconds=time_limit_seconds,
            gap=gap,
            threads=threads,
            output=output,
        ).solve()
    if solver not in ORTOOLS_CLASS_MAP:
        raise ValueError(f"Unknown solver {solver!r}; expected one of {SOLVERS}")

    model_cls = ORTOOLS_CLASS_MAP[solver]
    return model_cls(
        reserve_model,
        unit_ids=unit_ids,
        time_limit_ms=None
        if time_limit_seconds is None
        else int(round(time_limit_seconds * 1000)),
        gap=gap,
        num_threads=threads,
        output=output,
    ).solve()


def run_pipeline(
    units: PlanningUnits,
    *,
    solver: str = "gurobi",
    blm: float = BLM,
    target: float | Sequence[float] | Mapping[str, float] = TARGET,
    target_type: str = TARGET_TYPE,
    edge_factor: float = EDGE_FACTOR,
    locked_in: Iterable[int] | None = None,
    locked_out: Iterable[int] | None = None,
    gap: float = GAP,
    time_limit_seconds: float | None = None,
    threads: int = THREADS,
    output: bool = True,
) -> PipelineResult:
    if solver not in SOLVERS:
        raise ValueError(f"Unknown solver {solver!r}; expected one of {SOLVERS}")

    initial_time = time.time()
    reserve_model = build_reserve_model(
        units.features,
        units.cost,
        units.boundary,
        blm=blm,
        target=target,
        target_type=target_type,
        edge_factor=edge_factor,
        locked_in=locked_in,
        locked_out=locked_out,
        feature_names=units.feature_names,
    )
    print(
        f"\nData processed: {units.n_units} planning units, "
        f"{units.n_features} features, {units.boundary.n_pairs} adjacent pairs"
    )

    solution = solve_reserve_model(
        reserve_model,
        solver,
        unit_ids=units.unit_ids,
        gap=gap,
        time_limit_seconds=time_limit_seconds,
        threads=threads,
        output=output,
    )
    summary = build_solution_summary(reserve_model, solution, units.unit_ids)
    report_summary(summary)

    return PipelineResult(
        model=reserve_model,
        solution=solution,
        summary=summary,
        elapsed_seconds=time.time() - initial_time,
    )


__all__ = [
    "SOLVERS",
    "PipelineResult",
    "solve_reserve_model",
    "run_pipeline",
]
