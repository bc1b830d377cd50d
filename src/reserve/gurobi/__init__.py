"""Gurobi back end for the reserve selection model."""

from .common import create_model, print_results, status_name
from .constants import (
    BLM,
    EDGE_FACTOR,
    FOCUS,
    GAP,
    HEURISTICS,
    TARGET,
    TARGET_TYPE,
    THREADS,
    TIME_LIMIT,
)
from .constraints import add_representation_constraints, build_objective
from .solver import GurobiReserveModel
from .variables import create_x_vars

__all__ = [
    "create_model",
    "print_results",
    "status_name",
    "add_representation_constraints",
    "build_objective",
    "create_x_vars",
    "GurobiReserveModel",
    "BLM",
    "EDGE_FACTOR",
    "FOCUS",
    "GAP",
    "HEURISTICS",
    "TARGET",
    "TARGET_TYPE",
    "THREADS",
    "TIME_LIMIT",
]
