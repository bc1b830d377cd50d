"""Boundary-penalized reserve selection on planning-unit grids and polygons."""

from .boundary import BoundaryMatrix, grid_boundary, polygon_boundary
from .grid import (
    PlanningUnits,
    grid_from_arrays,
    load_grid_npz,
    load_planning_units,
    units_from_geodataframe,
)
from .pipeline import SOLVERS, PipelineResult, run_pipeline, solve_reserve_model
from .problem import ReserveModel, build_reserve_model
from .solution import NoSolutionError, ReserveSolution
from .summary import (
    SolutionSummary,
    build_solution_summary,
    load_solution_summary,
    save_solution_summary,
)
from .targets import resolve_targets

__all__ = [
    "BoundaryMatrix",
    "grid_boundary",
    "polygon_boundary",
    "PlanningUnits",
    "grid_from_arrays",
    "load_grid_npz",
    "load_planning_units",
    "units_from_geodataframe",
    "SOLVERS",
    "PipelineResult",
    "run_pipeline",
    "solve_reserve_model",
    "ReserveModel",
    "build_reserve_model",
    "NoSolutionError",
    "ReserveSolution",
    "SolutionSummary",
    "build_solution_summary",
    "load_solution_summary",
    "save_solution_summary",
    "resolve_targets",
]
