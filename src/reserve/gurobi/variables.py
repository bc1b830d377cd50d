"""
Variable builders for the Gurobi reserve model.
"""

from __future__ import annotations

from typing import Dict, Sequence

import gurobipy as gp
from gurobipy import GRB


def create_x_vars(
    model: gp.Model,
    lb: Sequence[float],
    ub: Sequence[float],
    unit_ids: Sequence[str] | None = None,
) -> Dict[int, gp.Var]:
    """One binary selection variable per planning unit, bounds carry the locks."""
    x = {}
    for i, (low, high) in enumerate(zip(lb, ub)):
        name = f"x_{unit_ids[i]}" if unit_ids is not None else f"x_{i}"
        x[i] = model.addVar(lb=float(low), ub=float(high), vtype=GRB.BINARY, name=name)
    return x


__all__ = ["create_x_vars"]
