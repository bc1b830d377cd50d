"""
Loaders turning rasters or planning-unit tables into model inputs.

Cells whose cost is missing (NaN) are not planning units. Missing feature
values inside planning units count as zero occupancy.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import geopandas as gpd
import numpy as np

from .boundary import BoundaryMatrix, grid_boundary, polygon_boundary
from .utils import grid_id


@dataclass
class PlanningUnits:
    cost: np.ndarray
    features: np.ndarray
    feature_names: list[str]
    boundary: BoundaryMatrix
    unit_ids: list[str]
    grid_shape: tuple[int, int] | None = None
    grid_positions: np.ndarray | None = None

    @property
    def n_units(self) -> int:
        return len(self.cost)

    @property
    def n_features(self) -> int:
        return self.features.shape[0]

    def to_grid(self, values, fill: float = np.nan) -> np.ndarray:
        """Scatter one value per planning unit back onto the source raster."""
        if self.grid_shape is None or self.grid_positions is None:
            raise ValueError("Planning units were not loaded from a grid.")
        values = np.asarray(values, dtype=float)
        if values.shape != (self.n_units,):
            raise ValueError(
                f"Expected {self.n_units} values, got shape {values.shape}"
            )
        out = np.full(self.grid_shape[0] * self.grid_shape[1], fill, dtype=float)
        out[self.grid_positions] = values
        return out.reshape(self.grid_shape)


def grid_from_arrays(
    cost,
    features,
    *,
    cell_width: float = 1.0,
    cell_height: float = 1.0,
    feature_names: Sequence[str] | None = None,
) -> PlanningUnits:
    """
    Build planning units from a cost raster (rows x cols) and an occupancy
    stack (features x rows x cols, or a single rows x cols layer).
    """
    cost = np.asarray(cost, dtype=float)
    features = np.asarray(features, dtype=float)
    if cost.ndim != 2:
        raise ValueError(f"Cost grid must be two-dimensional, got {cost.ndim} dims")
    if features.ndim == 2:
        features = features[np.newaxis, ...]
    if features.ndim != 3:
        raise ValueError(
            "Feature grid must be (features, rows, cols) or a single (rows, cols) layer"
        )
    if features.shape[1:] != cost.shape:
        raise ValueError(
            f"Feature layers {features.shape[1:]} and cost grid {cost.shape} "
            "are not co-registered"
        )
    if np.any(np.isinf(cost)):
        raise ValueError("Cost grid contains infinite values.")

    n_rows, n_cols = cost.shape
    mask = ~np.isnan(cost)
    if not mask.any():
        raise ValueError("Cost grid has no planning units (all cells are NaN).")

    boundary = grid_boundary(n_rows, n_cols, cell_width, cell_height, mask=mask)
    positions = np.flatnonzero(mask.ravel())
    occupancy = np.nan_to_num(
        features.reshape(features.shape[0], -1)[:, positions], nan=0.0
    )
    names = (
        list(feature_names)
        if feature_names is not None
        else [f"feature_{f}" for f in range(features.shape[0])]
    )
    if len(names) != occupancy.shape[0]:
        raise ValueError(
            f"{len(names)} feature names given for {occupancy.shape[0]} layers"
        )

    return PlanningUnits(
        cost=cost.ravel()[positions],
        features=occupancy,
        feature_names=names,
        boundary=boundary,
        unit_ids=[grid_id(*divmod(int(p), n_cols)) for p in positions],
        grid_shape=(n_rows, n_cols),
        grid_positions=positions,
    )


def load_grid_npz(path: str | Path) -> PlanningUnits:
    """
    Load a grid archive holding `cost` and `features` arrays, plus optional
    `cell_size` (one value or width/height) and `feature_names`.
    """
    with np.load(Path(path), allow_pickle=False) as archive:
        stored = set(archive.files)
        if "cost" not in stored or "features" not in stored:
            raise ValueError(f"{path} must contain 'cost' and 'features' arrays")
        cost = archive["cost"]
        features = archive["features"]
        cell_size = archive["cell_size"] if "cell_size" in stored else np.ones(1)
        names = (
            [str(name) for name in archive["feature_names"]]
            if "feature_names" in stored
            else None
        )

    cell_size = np.atleast_1d(cell_size).astype(float)
    cell_width = float(cell_size[0])
    cell_height = float(cell_size[1]) if cell_size.size > 1 else cell_width
    return grid_from_arrays(
        cost,
        features,
        cell_width=cell_width,
        cell_height=cell_height,
        feature_names=names,
    )


def units_from_geodataframe(
    gdf: gpd.GeoDataFrame,
    feature_columns: Sequence[str],
    *,
    cost_column: str = "cost",
    id_column: str = "grid_id",
) -> PlanningUnits:
    """Planning units from polygons; rows with a missing cost are dropped."""
    missing = [c for c in [cost_column, *feature_columns] if c not in gdf.columns]
    if missing:
        raise ValueError(f"Planning unit table is missing columns: {missing}")
    if not feature_columns:
        raise ValueError("At least one feature column is required.")

    units = gdf[gdf[cost_column].notna()].reset_index(drop=True)
    if units.empty:
        raise ValueError("No planning units with a cost value.")
    if np.any(np.isinf(units[cost_column].to_numpy(dtype=float))):
        raise ValueError(f"Column {cost_column!r} contains infinite values.")
    dropped = len(gdf) - len(units)
    if dropped:
        print(f"Dropped {dropped} planning units without cost")

    if id_column in units.columns:
        unit_ids = units[id_column].astype(str).tolist()
    else:
        unit_ids = [str(i) for i in range(len(units))]

    features = units[list(feature_columns)].fillna(0.0).to_numpy(dtype=float).T
    return PlanningUnits(
        cost=units[cost_column].to_numpy(dtype=float),
        features=features,
        feature_names=list(feature_columns),
        boundary=polygon_boundary(units),
        unit_ids=unit_ids,
    )


def load_planning_units(
    path: str | Path,
    feature_columns: Sequence[str] | None = None,
    *,
    cost_column: str = "cost",
    id_column: str = "grid_id",
    feature_prefix: str = "has_",
) -> PlanningUnits:
    """
    Read a planning-unit layer (GeoParquet or any format geopandas reads).
    Without explicit feature columns every column starting with
    `feature_prefix` is used.
    """
    path = Path(path)
    if path.suffix == ".parquet":
        gdf = gpd.read_parquet(path)
    else:
        gdf = gpd.read_file(path)
    print(f"Data loaded successfully ({len(gdf)} planning units)")

    if feature_columns is None:
        feature_columns = [c for c in gdf.columns if c.startswith(feature_prefix)]
        if not feature_columns:
            raise ValueError(
                f"No feature columns starting with {feature_prefix!r} in {path}"
            )
    return units_from_geodataframe(
        gdf, feature_columns, cost_column=cost_column, id_column=id_column
    )


__all__ = [
    "PlanningUnits",
    "grid_from_arrays",
    "load_grid_npz",
    "units_from_geodataframe",
    "load_planning_units",
]
