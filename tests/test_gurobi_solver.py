import numpy as np
import pytest

from reserve.boundary import grid_boundary
from reserve.gurobi import GurobiReserveModel, create_model
from reserve.problem import build_reserve_model
from reserve.solution import NoSolutionError

from conftest import brute_force_optimum


def _solve(model, **kwargs):
    params = {"gap": 0.0, "output": False}
    params.update(kwargs)
    return GurobiReserveModel(model, **params).solve()


class TestGurobiReserveModel:
    def test_all_units_required(self, all_required_model):
        solution = _solve(all_required_model)
        np.testing.assert_array_equal(solution.selected_units, [1, 1, 1, 1])
        # cost 10 plus the outer perimeter of the 2 x 2 block
        assert solution.objective_value == pytest.approx(18.0)
        assert solution.status == "OPTIMAL"
        assert solution.solver == "gurobi"

    def test_matches_enumeration(self, small_model):
        expected, _ = brute_force_optimum(small_model)
        solution = _solve(small_model)
        assert solution.objective_value == pytest.approx(expected)
        assert small_model.evaluate(solution.selected_units) == pytest.approx(expected)
        assert small_model.is_feasible(solution.selected_units)

    def test_boundary_penalty_favours_compact_reserve(self):
        # Two cheap cells in opposite corners against two adjacent cells.
        cost = np.array([1.0, 1.2, 1.2, 1.0])
        model = build_reserve_model(
            np.ones((1, 4)),
            cost,
            grid_boundary(2, 2),
            blm=1.0,
            target=2.0,
            target_type="absolute",
        )
        solution = _solve(model)
        assert solution.n_selected == 2
        chosen = set(solution.selected_indices)
        assert chosen in ({0, 1}, {0, 2}, {1, 3}, {2, 3})

    def test_locked_out_unit_is_never_selected(self, small_units):
        model = build_reserve_model(
            small_units.features,
            small_units.cost,
            small_units.boundary,
            blm=0.5,
            target=0.5,
            locked_out=[0],
            locked_in=[5],
        )
        solution = _solve(model, unit_ids=small_units.unit_ids)
        assert solution.selected_units[0] == 0
        assert solution.selected_units[5] == 1
        assert model.is_feasible(solution.selected_units)

    def test_infeasible_targets_raise(self):
        model = build_reserve_model(
            np.ones((1, 2)),
            np.ones(2),
            grid_boundary(2, 1),
            blm=1.0,
            target=1.0,
            locked_out=[1],
        )
        with pytest.raises(NoSolutionError) as excinfo:
            _solve(model)
        assert excinfo.value.solver == "gurobi"

    def test_time_limit_replaces_gap(self, small_model):
        solver = GurobiReserveModel(
            small_model, time_limit_seconds=5.0, gap=0.3, output=False
        )
        gp_model = solver.build()
        assert gp_model.Params.TimeLimit == pytest.approx(5.0)
        assert gp_model.Params.MIPGap == pytest.approx(1e-4)


class TestCreateModel:
    def test_gap_used_without_time_limit(self):
        model = create_model(
            "params",
            output=False,
            time_limit_seconds=None,
            gap=0.2,
            heuristics=0.05,
            focus=1,
            threads=1,
        )
        assert model.Params.MIPGap == pytest.approx(0.2)
        assert model.Params.MIPFocus == 1
        assert model.Params.OutputFlag == 0
