from __future__ import annotations

import numpy as np


def grid_id(row: int, col: int) -> str:
    """Build the 'cell_row_col' identifier used for grid planning units."""
    return f"cell_{row}_{col}"


def get_adjacent_positions(
    row: int, col: int, n_rows: int, n_cols: int
) -> list[tuple[int, int]]:
    """Positions of the in-bounds neighbours in the four cardinal directions."""
    adjacent: list[tuple[int, int]] = []
    for dr, dc in [(-1, 0), (1, 0), (0, -1), (0, 1)]:
        r, c = row + dr, col + dc
        if 0 <= r < n_rows and 0 <= c < n_cols:
            adjacent.append((r, c))
    return adjacent


def check_positive_int(value, name: str) -> int:
    """Validate grid dimensions; bools and floats with a fraction are rejected."""
    if isinstance(value, (bool, np.bool_)):
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    if isinstance(value, (float, np.floating)):
        if not float(value).is_integer():
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
        value = int(value)
    if not isinstance(value, (int, np.integer)) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def check_index_set(indices, n_units: int, name: str) -> set[int]:
    """Normalize planning-unit indices; bools and fractional values are rejected."""
    if indices is None:
        return set()
    result: set[int] = set()
    for raw in indices:
        if isinstance(raw, (bool, np.bool_)) or (
            isinstance(raw, (float, np.floating)) and not float(raw).is_integer()
        ):
            raise ValueError(f"{name} must hold integer unit indices, got {raw!r}")
        idx = int(raw)
        if idx < 0 or idx >= n_units:
            raise ValueError(
                f"{name} contains unit {idx}, outside the range 0..{n_units - 1}"
            )
        result.add(idx)
    return result


__all__ = [
    "grid_id",
    "get_adjacent_positions",
    "check_positive_int",
    "check_index_set",
]
