"""
Boundary-length matrices for planning units.

Off-diagonal entries hold the length shared by two adjacent units, the
diagonal holds the external (unshared) boundary of each unit. Entries are
kept as explicit (row, col, value) triples and converted to scipy.sparse
on demand.
"""

from __future__ import annotations

from dataclasses import dataclass

import geopandas as gpd
import numpy as np
from scipy import sparse

from .utils import check_positive_int, get_adjacent_positions


@dataclass
class BoundaryMatrix:
    n_units: int
    rows: np.ndarray
    cols: np.ndarray
    lengths: np.ndarray
    external: np.ndarray

    def __post_init__(self):
        self.rows = np.asarray(self.rows, dtype=np.int64)
        self.cols = np.asarray(self.cols, dtype=np.int64)
        self.lengths = np.asarray(self.lengths, dtype=float)
        self.external = np.asarray(self.external, dtype=float)
        if not (len(self.rows) == len(self.cols) == len(self.lengths)):
            raise ValueError("Boundary triples must have equal lengths.")
        if self.external.shape != (self.n_units,):
            raise ValueError(
                f"External boundary vector has shape {self.external.shape}, "
                f"expected ({self.n_units},)"
            )
        if np.any(self.rows == self.cols):
            raise ValueError("Shared boundary triples must be off-diagonal.")

    @property
    def shared_triples(self) -> list[tuple[int, int, float]]:
        return [
            (int(i), int(j), float(v))
            for i, j, v in zip(self.rows, self.cols, self.lengths)
        ]

    @property
    def n_pairs(self) -> int:
        """Number of adjacent unit pairs (each pair is stored twice)."""
        return len(self.lengths) // 2

    def shared_totals(self) -> np.ndarray:
        """Sum of shared boundary per unit (row sums without the diagonal)."""
        return np.bincount(self.rows, weights=self.lengths, minlength=self.n_units)

    def row_totals(self) -> np.ndarray:
        return self.shared_totals() + self.external

    def shared_matrix(self) -> sparse.csr_matrix:
        return sparse.coo_matrix(
            (self.lengths, (self.rows, self.cols)),
            shape=(self.n_units, self.n_units),
        ).tocsr()

    def to_sparse(self, include_external: bool = True) -> sparse.coo_matrix:
        rows, cols, values = self.rows, self.cols, self.lengths
        if include_external:
            diag = np.arange(self.n_units)
            rows = np.concatenate([rows, diag])
            cols = np.concatenate([cols, diag])
            values = np.concatenate([values, self.external])
        return sparse.coo_matrix(
            (values, (rows, cols)), shape=(self.n_units, self.n_units)
        )

    def neighbors(self, unit: int) -> list[int]:
        return sorted(int(j) for j in self.cols[self.rows == unit])


def _from_pairs(
    n_units: int, pairs: dict[tuple[int, int], float], perimeters: np.ndarray
) -> BoundaryMatrix:
    rows: list[int] = []
    cols: list[int] = []
    lengths: list[float] = []
    for (i, j), length in sorted(pairs.items()):
        rows.extend((i, j))
        cols.extend((j, i))
        lengths.extend((length, length))

    shared = np.bincount(
        np.asarray(rows, dtype=np.int64),
        weights=np.asarray(lengths, dtype=float),
        minlength=n_units,
    )
    # Polygon intersections can overshoot the perimeter by rounding noise.
    external = np.clip(perimeters - shared, 0.0, None)
    return BoundaryMatrix(
        n_units=n_units, rows=rows, cols=cols, lengths=lengths, external=external
    )


def grid_boundary(
    n_rows: int,
    n_cols: int,
    cell_width: float = 1.0,
    cell_height: float = 1.0,
    mask: np.ndarray | None = None,
) -> BoundaryMatrix:
    """
    Boundary matrix for a rectangular grid indexed in row-major order.

    Horizontally adjacent cells share `cell_height`, vertically adjacent
    cells share `cell_width`. When `mask` is given only cells where it is
    True are planning units; they are renumbered compactly and edges towards
    masked cells count as external boundary.
    """
    n_rows = check_positive_int(n_rows, "n_rows")
    n_cols = check_positive_int(n_cols, "n_cols")
    for name, size in (("cell_width", cell_width), ("cell_height", cell_height)):
        if not np.isfinite(size) or size <= 0:
            raise ValueError(f"{name} must be a positive number, got {size!r}")

    if mask is None:
        mask = np.ones((n_rows, n_cols), dtype=bool)
    else:
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (n_rows, n_cols):
            raise ValueError(
                f"Mask shape {mask.shape} does not match grid ({n_rows}, {n_cols})"
            )

    index = np.full((n_rows, n_cols), -1, dtype=np.int64)
    index[mask] = np.arange(int(mask.sum()))
    n_units = int(mask.sum())

    pairs: dict[tuple[int, int], float] = {}
    for row in range(n_rows):
        for col in range(n_cols):
            i = index[row, col]
            if i < 0:
                continue
            for r, c in get_adjacent_positions(row, col, n_rows, n_cols):
                j = index[r, c]
                if j <= i:
                    continue
                pairs[(int(i), int(j))] = float(cell_width if r != row else cell_height)

    perimeter = 2.0 * (float(cell_width) + float(cell_height))
    return _from_pairs(n_units, pairs, np.full(n_units, perimeter))


def polygon_boundary(gdf: gpd.GeoDataFrame) -> BoundaryMatrix:
    """
    Boundary matrix for arbitrary polygon planning units.

    Two units share the length of the intersection of their boundaries;
    contacts at a single corner have zero length and are ignored.
    """
    geoms = list(gdf.geometry)
    if any(geom is None or geom.is_empty for geom in geoms):
        raise ValueError("Planning units must all have a non-empty geometry.")

    sindex = gdf.sindex
    pairs: dict[tuple[int, int], float] = {}
    for i, geom in enumerate(geoms):
        for j in sindex.query(geom, predicate="intersects"):
            j = int(j)
            if j <= i:
                continue
            length = geom.boundary.intersection(geoms[j].boundary).length
            if length > 0:
                pairs[(i, j)] = float(length)

    perimeters = np.array([geom.length for geom in geoms], dtype=float)
    return _from_pairs(len(geoms), pairs, perimeters)


__all__ = ["BoundaryMatrix", "grid_boundary", "polygon_boundary"]
