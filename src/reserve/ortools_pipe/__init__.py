"""OR-Tools back ends (SCIP, CBC, CP-SAT) for the reserve selection model."""

from .base_lp import ORToolsReserveModelBase
from .constants import GAP, MAX_SCALE_DIGITS, NUM_THREADS, TIME_LIMIT_MS
from .cpsat import CPSATReserveModel, determine_scaling_factor
from .solvers_lp import CBCReserveModel, SCIPReserveModel

__all__ = [
    "GAP",
    "MAX_SCALE_DIGITS",
    "NUM_THREADS",
    "TIME_LIMIT_MS",
    "ORToolsReserveModelBase",
    "SCIPReserveModel",
    "CBCReserveModel",
    "CPSATReserveModel",
    "determine_scaling_factor",
]
