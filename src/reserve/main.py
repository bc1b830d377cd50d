import argparse
from pathlib import Path

import numpy as np

from .grid import PlanningUnits, load_grid_npz, load_planning_units
from .gurobi.constants import BLM, EDGE_FACTOR, GAP, TARGET, TARGET_TYPE, THREADS
from .pipeline import SOLVERS, run_pipeline
from .summary import save_solution_summary
from .targets import TARGET_TYPES


def parse_unit_list(raw: str | None, units: PlanningUnits) -> list[int]:
    """Comma separated unit ids (e.g. cell_3_4) or positional indices."""
    if not raw:
        return []
    index_by_id = {unit_id: i for i, unit_id in enumerate(units.unit_ids)}
    indices = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        if token in index_by_id:
            indices.append(index_by_id[token])
        elif token.isdigit():
            indices.append(int(token))
        else:
            raise ValueError(f"Unknown planning unit {token!r}")
    return indices


def parse_target(raw: str) -> float | list[float]:
    values = [float(v) for v in raw.split(",") if v.strip()]
    if not values:
        raise ValueError("Empty target value")
    return values[0] if len(values) == 1 else values


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Select a reserve network that meets feature targets at "
        "minimum cost plus boundary penalty"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--grid",
        type=Path,
        help="Grid archive (.npz) with 'cost' and 'features' arrays",
    )
    source.add_argument(
        "--units",
        type=Path,
        help="Planning unit layer (GeoParquet or any format geopandas reads)",
    )
    parser.add_argument(
        "--features",
        nargs="+",
        default=None,
        help="Feature columns of --units (defaults to every has_* column)",
    )
    parser.add_argument("--cost-column", default="cost")
    parser.add_argument(
        "--target",
        default=str(TARGET),
        help="One target for all features or a comma separated list",
    )
    parser.add_argument("--target-type", choices=TARGET_TYPES, default=TARGET_TYPE)
    parser.add_argument("--blm", type=float, default=BLM, help="Boundary Length Modifier")
    parser.add_argument("--edge-factor", type=float, default=EDGE_FACTOR)
    parser.add_argument("--solver", choices=SOLVERS, default="gurobi")
    parser.add_argument("--gap", type=float, default=GAP, help="Relative MIP gap.")
    parser.add_argument(
        "--time-limit",
        type=float,
        default=None,
        help="Time limit in seconds (the gap is ignored when set)",
    )
    parser.add_argument("--threads", type=int, default=THREADS)
    parser.add_argument("--locked-in", default=None, help="Units forced into the reserve")
    parser.add_argument("--locked-out", default=None, help="Units kept out of the reserve")
    parser.add_argument(
        "--summary-path",
        type=Path,
        default=None,
        help="Where to store the solution summary JSON",
    )
    parser.add_argument(
        "--selection-path",
        type=Path,
        default=None,
        help="Where to store the selection reshaped to the grid (.npy, --grid only)",
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Silence the solver log"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main execution function"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.grid is not None:
        units = load_grid_npz(args.grid)
        print(f"Grid loaded successfully ({units.n_units} planning units)")
    else:
        units = load_planning_units(
            args.units, args.features, cost_column=args.cost_column
        )

    result = run_pipeline(
        units,
        solver=args.solver,
        blm=args.blm,
        target=parse_target(args.target),
        target_type=args.target_type,
        edge_factor=args.edge_factor,
        locked_in=parse_unit_list(args.locked_in, units),
        locked_out=parse_unit_list(args.locked_out, units),
        gap=args.gap,
        time_limit_seconds=args.time_limit,
        threads=args.threads,
        output=not args.quiet,
    )

    if args.summary_path is not None:
        save_solution_summary(result.summary, args.summary_path)

    if args.selection_path is not None:
        if units.grid_shape is None:
            parser.error("--selection-path needs a gridded input (--grid)")
        args.selection_path.parent.mkdir(parents=True, exist_ok=True)
        np.save(
            args.selection_path,
            units.to_grid(result.solution.selected_units.astype(float)),
        )
        print(f"✓ Selection grid saved to {args.selection_path}")

    print(f"\nTotal time: {result.elapsed_seconds:.2f} seconds")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
