from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np

TARGET_TYPES = ("percent", "absolute")


def feature_totals(features: np.ndarray) -> np.ndarray:
    """Total abundance of every feature across all planning units."""
    return np.asarray(features, dtype=float).sum(axis=1)


def _broadcast(
    target: float | Sequence[float] | Mapping[str, float],
    n_features: int,
    feature_names: Sequence[str] | None,
) -> np.ndarray:
    if isinstance(target, Mapping):
        if feature_names is None:
            raise ValueError("Per-feature target mapping requires feature names.")
        missing = [name for name in feature_names if name not in target]
        if missing:
            raise ValueError(f"No target given for features: {missing}")
        unknown = sorted(set(target) - set(feature_names))
        if unknown:
            raise ValueError(f"Targets given for unknown features: {unknown}")
        values = np.array([target[name] for name in feature_names], dtype=float)
    else:
        values = np.asarray(target, dtype=float)
        if values.ndim == 0:
            values = np.full(n_features, float(values))
        elif values.shape != (n_features,):
            raise ValueError(
                f"Expected a scalar or {n_features} targets, got shape {values.shape}"
            )
    if not np.all(np.isfinite(values)):
        raise ValueError("Targets must be finite numbers.")
    return values


def resolve_targets(
    features: np.ndarray,
    target: float | Sequence[float] | Mapping[str, float],
    target_type: str = "percent",
    feature_names: Sequence[str] | None = None,
) -> np.ndarray:
    """
    Turn a target specification into absolute amounts per feature.

    `percent` targets are fractions in [0, 1] of the total abundance of each
    feature; `absolute` targets are used as given but may not be negative nor
    exceed what the planning units hold in total.
    """
    if target_type not in TARGET_TYPES:
        raise ValueError(
            f"Unknown target type {target_type!r}; expected one of {TARGET_TYPES}"
        )
    features = np.asarray(features, dtype=float)
    if features.ndim != 2:
        raise ValueError("Feature matrix must be two-dimensional (features x units).")
    totals = feature_totals(features)
    values = _broadcast(target, features.shape[0], feature_names)

    if target_type == "percent":
        if np.any((values < 0) | (values > 1)):
            raise ValueError(
                f"Percent targets must lie in [0, 1], got {values.tolist()}"
            )
        return values * totals

    if np.any(values < 0):
        raise ValueError(f"Absolute targets must be >= 0, got {values.tolist()}")
    over = np.flatnonzero(values > totals + 1e-9)
    if over.size:
        details = ", ".join(
            f"feature {f}: {values[f]:g} > {totals[f]:g}" for f in over
        )
        raise ValueError(f"Absolute targets exceed total feature abundance ({details})")
    return values


__all__ = ["TARGET_TYPES", "feature_totals", "resolve_targets"]
