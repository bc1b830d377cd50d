"""
Objective and constraint blocks of the Gurobi reserve model.
"""

from __future__ import annotations

from typing import Dict, Sequence

import gurobipy as gp
import numpy as np
from scipy import sparse


def build_objective(
    x: Dict[int, gp.Var],
    obj: np.ndarray,
    pair_terms: Sequence[tuple[int, int, float]],
) -> gp.QuadExpr:
    """obj·x plus one product term per adjacent pair."""
    linear = gp.LinExpr([float(c) for c in obj], [x[i] for i in range(len(obj))])
    objective = gp.QuadExpr(linear)
    if pair_terms:
        objective.addTerms(
            [coef for _, _, coef in pair_terms],
            [x[i] for i, _, _ in pair_terms],
            [x[j] for _, j, _ in pair_terms],
        )
    return objective


def add_representation_constraints(
    model: gp.Model,
    x: Dict[int, gp.Var],
    A: sparse.csr_matrix,
    rhs: np.ndarray,
    feature_names: Sequence[str],
):
    A = sparse.csr_matrix(A)
    for f, name in enumerate(feature_names):
        start, end = A.indptr[f], A.indptr[f + 1]
        held = gp.LinExpr(
            [float(v) for v in A.data[start:end]],
            [x[int(i)] for i in A.indices[start:end]],
        )
        model.addConstr(held >= float(rhs[f]), name=f"target_{name}")


__all__ = ["build_objective", "add_representation_constraints"]
