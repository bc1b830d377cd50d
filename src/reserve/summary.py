from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import networkx as nx
import numpy as np

from .problem import ReserveModel
from .solution import ReserveSolution, relative_gap


@dataclass
class SolutionSummary:
    solver: str
    status: str
    objective_value: float
    objective_bound: float
    runtime_seconds: float
    blm: float
    edge_factor: float
    n_units: int
    selected_units: list[str]
    total_cost: float
    boundary_length: float
    n_patches: int
    feature_names: list[str]
    targets: dict[str, float]
    held: dict[str, float]

    @property
    def gap(self) -> float:
        return relative_gap(self.objective_value, self.objective_bound)

    @property
    def targets_met(self) -> dict[str, bool]:
        return {
            name: self.held[name] >= self.targets[name] - 1e-6
            for name in self.feature_names
        }


def count_patches(model: ReserveModel, selected) -> int:
    """Number of connected groups of selected units sharing a boundary."""
    selected_idx = [int(i) for i in np.flatnonzero(np.asarray(selected) > 0.5)]
    graph = nx.Graph()
    graph.add_nodes_from(selected_idx)
    chosen = set(selected_idx)
    for i, j, _ in model.boundary.shared_triples:
        if i < j and i in chosen and j in chosen:
            graph.add_edge(i, j)
    return nx.number_connected_components(graph)


def build_solution_summary(
    model: ReserveModel,
    solution: ReserveSolution,
    unit_ids: Sequence[str] | None = None,
) -> SolutionSummary:
    """Normalize solver output into a reusable summary."""
    x = solution.selected_units
    ids = (
        list(unit_ids)
        if unit_ids is not None
        else [str(i) for i in range(model.n_units)]
    )
    held = model.representation(x)
    return SolutionSummary(
        solver=solution.solver,
        status=solution.status,
        objective_value=float(solution.objective_value),
        objective_bound=float(solution.objective_bound),
        runtime_seconds=float(solution.runtime_seconds),
        blm=model.blm,
        edge_factor=model.edge_factor,
        n_units=model.n_units,
        selected_units=[ids[i] for i in solution.selected_indices],
        total_cost=float(model.cost @ x),
        boundary_length=model.boundary_length(x, edge_factor=1.0),
        n_patches=count_patches(model, x),
        feature_names=list(model.feature_names),
        targets={n: float(t) for n, t in zip(model.feature_names, model.rhs)},
        held={n: float(h) for n, h in zip(model.feature_names, held)},
    )


def report_summary(summary: SolutionSummary, title: str = "Reserve selection") -> None:
    print(f"\n{title}")
    print(f"  Solver: {summary.solver} ({summary.status})")
    print(
        f"  Selected units: {len(summary.selected_units)} of {summary.n_units} "
        f"in {summary.n_patches} patch(es)"
    )
    print(f"  Total cost: {summary.total_cost:.2f}")
    print(f"  Boundary length: {summary.boundary_length:.2f} (blm {summary.blm})")
    print(
        f"  Objective: {summary.objective_value:.4f} | bound "
        f"{summary.objective_bound:.4f} | gap {summary.gap:.4%}"
    )
    met = summary.targets_met
    for name in summary.feature_names:
        mark = "✓" if met[name] else "✗"
        print(
            f"    {mark} {name}: held {summary.held[name]:.2f} "
            f"/ target {summary.targets[name]:.2f}"
        )


def summary_to_dict(summary: SolutionSummary) -> dict[str, Any]:
    """Convert SolutionSummary into a JSON-serializable dict."""
    return {
        "solver": summary.solver,
        "status": summary.status,
        "objective_value": summary.objective_value,
        "objective_bound": summary.objective_bound,
        "runtime_seconds": summary.runtime_seconds,
        "blm": summary.blm,
        "edge_factor": summary.edge_factor,
        "n_units": summary.n_units,
        "selected_units": list(summary.selected_units),
        "total_cost": summary.total_cost,
        "boundary_length": summary.boundary_length,
        "n_patches": summary.n_patches,
        "feature_names": list(summary.feature_names),
        "targets": dict(summary.targets),
        "held": dict(summary.held),
    }


def summary_from_dict(raw: Mapping[str, Any]) -> SolutionSummary:
    """Rehydrate SolutionSummary from a dictionary representation."""
    return SolutionSummary(
        solver=str(raw["solver"]),
        status=str(raw["status"]),
        objective_value=float(raw["objective_value"]),
        objective_bound=float(raw["objective_bound"]),
        runtime_seconds=float(raw.get("runtime_seconds", 0.0)),
        blm=float(raw["blm"]),
        edge_factor=float(raw.get("edge_factor", 1.0)),
        n_units=int(raw["n_units"]),
        selected_units=list(raw.get("selected_units", [])),
        total_cost=float(raw["total_cost"]),
        boundary_length=float(raw["boundary_length"]),
        n_patches=int(raw.get("n_patches", 0)),
        feature_names=list(raw.get("feature_names", [])),
        targets={k: float(v) for k, v in raw.get("targets", {}).items()},
        held={k: float(v) for k, v in raw.get("held", {}).items()},
    )


def save_solution_summary(
    summary: SolutionSummary, path: str | Path, *, echo: bool = True
) -> Path:
    """Persist a solution summary to disk so results can be compared without solving."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = summary_to_dict(summary)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=True), encoding="utf-8")
    if echo:
        print(f"✓ Solution summary saved to {path}")
    return path


def load_solution_summary(path: str | Path) -> SolutionSummary:
    """Load a previously saved solution summary."""
    path = Path(path)
    payload = json.loads(path.read_text(encoding="utf-8"))
    return summary_from_dict(payload)


__all__ = [
    "SolutionSummary",
    "build_solution_summary",
    "count_patches",
    "report_summary",
    "summary_to_dict",
    "summary_from_dict",
    "save_solution_summary",
    "load_solution_summary",
]
