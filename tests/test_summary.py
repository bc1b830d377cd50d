import numpy as np
import pytest

from reserve.boundary import grid_boundary
from reserve.problem import build_reserve_model
from reserve.solution import ReserveSolution, relative_gap, round_selection
from reserve.summary import (
    build_solution_summary,
    count_patches,
    load_solution_summary,
    save_solution_summary,
)


@pytest.fixture
def strip_model():
    """1 x 5 strip, one feature present everywhere."""
    return build_reserve_model(
        np.ones((1, 5)), np.arange(1.0, 6.0), grid_boundary(1, 5), blm=2.0, target=0.4
    )


def _solution(model, selected):
    selected = np.asarray(selected, dtype=np.int64)
    value = model.evaluate(selected)
    return ReserveSolution(
        selected_units=selected,
        objective_value=value,
        objective_bound=value - 1.0,
        status="OPTIMAL",
        solver="gurobi",
        runtime_seconds=0.5,
    )


class TestPatches:
    @pytest.mark.parametrize(
        "selected,expected",
        [
            ([0, 0, 0, 0, 0], 0),
            ([1, 1, 0, 0, 0], 1),
            ([1, 0, 1, 0, 1], 3),
            ([1, 1, 0, 1, 1], 2),
        ],
    )
    def test_count_patches(self, strip_model, selected, expected):
        assert count_patches(strip_model, selected) == expected


class TestSolutionSummary:
    def test_summary_fields(self, strip_model):
        summary = build_solution_summary(
            strip_model,
            _solution(strip_model, [1, 1, 0, 0, 0]),
            unit_ids=[f"u{i}" for i in range(5)],
        )
        assert summary.selected_units == ["u0", "u1"]
        assert summary.total_cost == pytest.approx(3.0)
        assert summary.boundary_length == pytest.approx(6.0)
        assert summary.n_patches == 1
        assert summary.targets == {"feature_0": pytest.approx(2.0)}
        assert summary.held == {"feature_0": pytest.approx(2.0)}
        assert summary.targets_met == {"feature_0": True}
        assert summary.objective_value == pytest.approx(3.0 + 2.0 * 6.0)

    def test_default_ids_are_indices(self, strip_model):
        summary = build_solution_summary(strip_model, _solution(strip_model, [0, 0, 1, 0, 1]))
        assert summary.selected_units == ["2", "4"]
        assert summary.targets_met == {"feature_0": True}

    def test_json_round_trip(self, strip_model, tmp_path):
        summary = build_solution_summary(strip_model, _solution(strip_model, [0, 1, 1, 0, 0]))
        path = save_solution_summary(summary, tmp_path / "out" / "summary.json", echo=False)
        assert path.exists()
        assert load_solution_summary(path) == summary


class TestSolutionHelpers:
    def test_relative_gap(self):
        assert relative_gap(10.0, 10.0) == 0.0
        assert relative_gap(10.0, 9.0) == pytest.approx(0.1)
        assert relative_gap(0.0, -1.0) == float("inf")

    def test_round_selection(self):
        np.testing.assert_array_equal(
            round_selection([0.999999, 1e-7, 0.51, 0.2]), [1, 0, 1, 0]
        )
