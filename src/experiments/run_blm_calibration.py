"""Sweep the Boundary Length Modifier over one planning-unit set.

Each BLM value is solved with every requested solver N times, so the
cost / boundary trade-off curve can be read off a single table.

Results:
- CSV (default data/solutions/blm_calibration.csv) with columns
  ID, SOLVER, BLM, RUN, TIME, COST, BOUNDARY, PATCHES, Z, BOUND, STATUS,
  SUMMARY, NOTES.
- Optional JSON summaries per run in --summary-dir.
"""

from __future__ import annotations

import argparse
import pathlib
import time
from typing import Any, Sequence

import pandas as pd

from reserve.grid import PlanningUnits, load_grid_npz, load_planning_units
from reserve.gurobi.constants import EDGE_FACTOR, GAP, TARGET, TARGET_TYPE, THREADS
from reserve.pipeline import SOLVERS, solve_reserve_model
from reserve.problem import build_reserve_model
from reserve.summary import build_solution_summary, save_solution_summary
from reserve.targets import TARGET_TYPES

ROOT = pathlib.Path(__file__).resolve().parents[2]
RESULTS_PATH = ROOT / "data" / "solutions" / "blm_calibration.csv"
DEFAULT_BLM_VALUES = [0.0, 0.1, 0.5, 1.0, 2.0, 5.0]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Solve the reserve model for a range of BLM values."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--grid", type=pathlib.Path, help="Grid archive (.npz)")
    source.add_argument("--units", type=pathlib.Path, help="Planning unit layer")
    parser.add_argument("--features", nargs="+", default=None)
    parser.add_argument(
        "--blm-values",
        type=float,
        nargs="+",
        default=DEFAULT_BLM_VALUES,
        help="BLM values to evaluate.",
    )
    parser.add_argument(
        "--solvers", nargs="+", choices=SOLVERS, default=["gurobi"]
    )
    parser.add_argument(
        "--runs",
        "-n",
        type=int,
        default=1,
        help="Number of repetitions per BLM value and solver.",
    )
    parser.add_argument("--target", type=float, default=TARGET)
    parser.add_argument("--target-type", choices=TARGET_TYPES, default=TARGET_TYPE)
    parser.add_argument("--edge-factor", type=float, default=EDGE_FACTOR)
    parser.add_argument("--gap", type=float, default=GAP)
    parser.add_argument("--time-limit", type=float, default=None)
    parser.add_argument("--threads", type=int, default=THREADS)
    parser.add_argument("--output", type=pathlib.Path, default=RESULTS_PATH)
    parser.add_argument("--summary-dir", type=pathlib.Path, default=None)
    return parser.parse_args(argv)


def load_inputs(args: argparse.Namespace) -> PlanningUnits:
    if args.grid is not None:
        return load_grid_npz(args.grid)
    return load_planning_units(args.units, args.features)


def build_id(solver: str, blm: float, run_idx: int) -> str:
    return f"blm{blm:g}_{solver}_run{run_idx}"


def add_record(
    records: list[dict[str, Any]],
    *,
    solver: str,
    blm: float,
    run_idx: int,
    runtime: float | None = None,
    cost: float | None = None,
    boundary: float | None = None,
    patches: int | None = None,
    objective: float | None = None,
    bound: float | None = None,
    status: Any = None,
    summary_path: pathlib.Path | None = None,
    notes: str | None = None,
) -> None:
    records.append(
        {
            "ID": build_id(solver, blm, run_idx),
            "SOLVER": solver,
            "BLM": blm,
            "RUN": run_idx,
            "TIME": runtime,
            "COST": cost,
            "BOUNDARY": boundary,
            "PATCHES": patches,
            "Z": objective,
            "BOUND": bound,
            "STATUS": status,
            "SUMMARY": str(summary_path) if summary_path else "",
            "NOTES": notes or "",
        }
    )


def run_calibration(
    units: PlanningUnits,
    blm_values: Sequence[float],
    solvers: Sequence[str],
    *,
    runs: int = 1,
    target: float = TARGET,
    target_type: str = TARGET_TYPE,
    edge_factor: float = EDGE_FACTOR,
    gap: float = GAP,
    time_limit_seconds: float | None = None,
    threads: int = THREADS,
    summary_dir: pathlib.Path | None = None,
) -> pd.DataFrame:
    records: list[dict[str, Any]] = []
    for blm in blm_values:
        # Bad inputs fail the whole sweep instead of being recorded per run.
        model = build_reserve_model(
            units.features,
            units.cost,
            units.boundary,
            blm=blm,
            target=target,
            target_type=target_type,
            edge_factor=edge_factor,
            feature_names=units.feature_names,
        )
        for solver in solvers:
            for run_idx in range(1, runs + 1):
                print(f"\n=== BLM {blm:g} | {solver} | run {run_idx}/{runs} ===")
                try:
                    solution = solve_reserve_model(
                        model,
                        solver,
                        unit_ids=units.unit_ids,
                        gap=gap,
                        time_limit_seconds=time_limit_seconds,
                        threads=threads,
                        output=False,
                    )
                except Exception as exc:  # noqa: BLE001
                    add_record(
                        records,
                        solver=solver,
                        blm=blm,
                        run_idx=run_idx,
                        status="error",
                        notes=f"Error: {exc}",
                    )
                    continue

                summary = build_solution_summary(model, solution, units.unit_ids)
                summary_path = None
                if summary_dir is not None:
                    summary_path = summary_dir / f"{build_id(solver, blm, run_idx)}.json"
                    save_solution_summary(summary, summary_path, echo=False)
                add_record(
                    records,
                    solver=solver,
                    blm=blm,
                    run_idx=run_idx,
                    runtime=solution.runtime_seconds,
                    cost=summary.total_cost,
                    boundary=summary.boundary_length,
                    patches=summary.n_patches,
                    objective=solution.objective_value,
                    bound=solution.objective_bound,
                    status=solution.status,
                    summary_path=summary_path,
                )

    return pd.DataFrame(
        records,
        columns=[
            "ID",
            "SOLVER",
            "BLM",
            "RUN",
            "TIME",
            "COST",
            "BOUNDARY",
            "PATCHES",
            "Z",
            "BOUND",
            "STATUS",
            "SUMMARY",
            "NOTES",
        ],
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    units = load_inputs(args)
    init_time = time.time()

    df = run_calibration(
        units,
        args.blm_values,
        args.solvers,
        runs=args.runs,
        target=args.target,
        target_type=args.target_type,
        edge_factor=args.edge_factor,
        gap=args.gap,
        time_limit_seconds=args.time_limit,
        threads=args.threads,
        summary_dir=args.summary_dir,
    )

    args.output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(args.output, index=False, float_format="%.10f")
    print(f"\nCSV saved to {args.output}")
    print(f"Total time: {time.time() - init_time:.2f} seconds")


if __name__ == "__main__":
    main()
