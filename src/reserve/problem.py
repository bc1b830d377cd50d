"""
Coefficient construction for the minimum-cost reserve selection problem.

    minimize    obj·x + xᵀQx
    subject to  A x >= rhs,  x binary

with obj[i] = cost[i] + blm * (external[i] * edge_factor + Σ_j shared[i, j])
and Q[i, j] = -blm * shared[i, j]. For any selection the boundary part of the
objective equals blm times the perimeter of the selected reserve.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

import numpy as np
from scipy import sparse

from .boundary import BoundaryMatrix
from .targets import resolve_targets
from .utils import check_index_set


@dataclass
class ReserveModel:
    cost: np.ndarray
    obj: np.ndarray
    Q: sparse.coo_matrix
    A: sparse.csr_matrix
    rhs: np.ndarray
    sense: list[str]
    vtype: list[str]
    lb: np.ndarray
    ub: np.ndarray
    boundary: BoundaryMatrix
    blm: float
    edge_factor: float
    modelsense: str = "min"
    feature_names: list[str] = field(default_factory=list)

    @property
    def n_units(self) -> int:
        return len(self.obj)

    @property
    def n_features(self) -> int:
        return self.A.shape[0]

    @property
    def is_quadratic(self) -> bool:
        return self.Q.nnz > 0

    def pair_terms(self) -> list[tuple[int, int, float]]:
        """
        Quadratic terms folded onto i < j, i.e. xᵀQx = Σ coef * x_i * x_j.
        """
        folded: dict[tuple[int, int], float] = {}
        for i, j, value in zip(self.Q.row, self.Q.col, self.Q.data):
            key = (int(min(i, j)), int(max(i, j)))
            folded[key] = folded.get(key, 0.0) + float(value)
        return [(i, j, v) for (i, j), v in sorted(folded.items()) if v != 0.0]

    def _as_selection(self, x) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.shape != (self.n_units,):
            raise ValueError(
                f"Selection has shape {x.shape}, expected ({self.n_units},)"
            )
        return x

    def evaluate(self, x) -> float:
        """Objective value of a selection vector."""
        x = self._as_selection(x)
        return float(self.obj @ x + x @ (self.Q @ x))

    def representation(self, x) -> np.ndarray:
        x = self._as_selection(x)
        return np.asarray(self.A @ x).ravel()

    def is_feasible(self, x, tol: float = 1e-6) -> bool:
        x = self._as_selection(x)
        if np.any(x < self.lb - tol) or np.any(x > self.ub + tol):
            return False
        return bool(np.all(self.representation(x) >= self.rhs - tol))

    def boundary_length(self, x, edge_factor: float | None = None) -> float:
        """Perimeter of the selected reserve; external edges scaled by edge_factor."""
        x = self._as_selection(x)
        factor = self.edge_factor if edge_factor is None else edge_factor
        shared = self.boundary.shared_matrix()
        exposed = x @ self.boundary.shared_totals() - x @ (shared @ x)
        return float(factor * (x @ self.boundary.external) + exposed)


def _check_arrays(
    features, cost, boundary: BoundaryMatrix
) -> tuple[np.ndarray, np.ndarray]:
    features = np.asarray(features, dtype=float)
    cost = np.asarray(cost, dtype=float)
    if features.ndim == 1:
        features = features[np.newaxis, :]
    if features.ndim != 2:
        raise ValueError("Feature matrix must be two-dimensional (features x units).")
    if cost.ndim != 1:
        raise ValueError("Cost must be a one-dimensional vector.")
    if features.shape[1] != cost.shape[0]:
        raise ValueError(
            f"Feature matrix covers {features.shape[1]} units but the cost "
            f"vector has {cost.shape[0]}"
        )
    if boundary.n_units != cost.shape[0]:
        raise ValueError(
            f"Boundary matrix covers {boundary.n_units} units but the cost "
            f"vector has {cost.shape[0]}"
        )
    if not np.all(np.isfinite(cost)):
        raise ValueError("Cost values must be finite.")
    if not np.all(np.isfinite(features)):
        raise ValueError("Feature values must be finite.")
    return features, cost


def build_reserve_model(
    features,
    cost,
    boundary: BoundaryMatrix,
    *,
    blm: float,
    target: float | Sequence[float] | Mapping[str, float],
    target_type: str = "percent",
    edge_factor: float = 1.0,
    locked_in: Iterable[int] | None = None,
    locked_out: Iterable[int] | None = None,
    feature_names: Sequence[str] | None = None,
) -> ReserveModel:
    """Validate the inputs and assemble the coefficients of the reserve problem."""
    features, cost = _check_arrays(features, cost, boundary)
    if not np.isfinite(blm) or blm < 0:
        raise ValueError(f"Boundary length modifier must be >= 0, got {blm!r}")
    if not np.isfinite(edge_factor) or edge_factor < 0:
        raise ValueError(f"Edge factor must be >= 0, got {edge_factor!r}")
    if feature_names is not None and len(feature_names) != features.shape[0]:
        raise ValueError(
            f"{len(feature_names)} feature names given for {features.shape[0]} features"
        )

    n_units = cost.shape[0]
    lock_in = check_index_set(locked_in, n_units, "locked_in")
    lock_out = check_index_set(locked_out, n_units, "locked_out")
    overlap = lock_in & lock_out
    if overlap:
        raise ValueError(f"Units both locked in and locked out: {sorted(overlap)}")

    rhs = resolve_targets(features, target, target_type, feature_names)

    if blm == 0:
        obj = cost.copy()
        Q = sparse.coo_matrix((n_units, n_units))
    else:
        shared_totals = boundary.shared_totals()
        obj = cost + blm * (boundary.external * edge_factor + shared_totals)
        Q = sparse.coo_matrix(
            (-blm * boundary.lengths, (boundary.rows, boundary.cols)),
            shape=(n_units, n_units),
        )

    lb = np.zeros(n_units)
    ub = np.ones(n_units)
    lb[sorted(lock_in)] = 1.0
    ub[sorted(lock_out)] = 0.0

    return ReserveModel(
        cost=cost,
        obj=obj,
        Q=Q,
        A=sparse.csr_matrix(features),
        rhs=rhs,
        sense=[">="] * features.shape[0],
        vtype=["B"] * n_units,
        lb=lb,
        ub=ub,
        boundary=boundary,
        blm=float(blm),
        edge_factor=float(edge_factor),
        feature_names=list(feature_names)
        if feature_names is not None
        else [f"feature_{f}" for f in range(features.shape[0])],
    )


__all__ = ["ReserveModel", "build_reserve_model"]
