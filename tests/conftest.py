"""Shared fixtures for the reserve selection test suite."""
from __future__ import annotations

import itertools

import numpy as np
import pytest

from reserve.boundary import grid_boundary
from reserve.grid import grid_from_arrays
from reserve.problem import build_reserve_model


def brute_force_optimum(model):
    """Best feasible objective by enumeration (only for a handful of units)."""
    best_value, best_x = None, None
    for bits in itertools.product((0, 1), repeat=model.n_units):
        x = np.array(bits, dtype=float)
        if not model.is_feasible(x):
            continue
        value = model.evaluate(x)
        if best_value is None or value < best_value - 1e-9:
            best_value, best_x = value, x
    return best_value, best_x


# ── Data fixtures ────────────────────────────────────────────────────


@pytest.fixture
def cost_grid():
    """2 x 3 cost raster."""
    return np.array(
        [
            [1.0, 2.0, 3.0],
            [2.0, 1.0, 4.0],
        ]
    )


@pytest.fixture
def feature_stack():
    """Two occupancy layers co-registered with ``cost_grid``."""
    return np.array(
        [
            [[1, 0, 1], [0, 1, 0]],
            [[0, 1, 0], [1, 1, 1]],
        ],
        dtype=float,
    )


@pytest.fixture
def small_units(cost_grid, feature_stack):
    return grid_from_arrays(
        cost_grid, feature_stack, feature_names=["orchid", "lizard"]
    )


@pytest.fixture
def small_model(small_units):
    """Percent targets of one half with a moderate boundary penalty."""
    return build_reserve_model(
        small_units.features,
        small_units.cost,
        small_units.boundary,
        blm=0.5,
        target=0.5,
        feature_names=small_units.feature_names,
    )


@pytest.fixture
def all_required_model():
    """Every unit holds one unit of the single feature and the target is N."""
    boundary = grid_boundary(2, 2)
    return build_reserve_model(
        np.ones((1, 4)),
        np.array([1.0, 2.0, 3.0, 4.0]),
        boundary,
        blm=1.0,
        target=4.0,
        target_type="absolute",
    )


@pytest.fixture
def npz_grid(tmp_path, cost_grid, feature_stack):
    path = tmp_path / "grid.npz"
    np.savez(
        path,
        cost=cost_grid,
        features=feature_stack,
        cell_size=np.array([2.0, 1.0]),
        feature_names=np.array(["orchid", "lizard"]),
    )
    return path
