import numpy as np
import ortools.linear_solver.pywraplp as pywraplp
import pytest

from reserve.boundary import grid_boundary
from reserve.ortools_pipe import (
    CBCReserveModel,
    CPSATReserveModel,
    SCIPReserveModel,
    determine_scaling_factor,
)
from reserve.problem import build_reserve_model
from reserve.solution import NoSolutionError

from conftest import brute_force_optimum

LP_BACKENDS = {"scip": (SCIPReserveModel, "SCIP"), "cbc": (CBCReserveModel, "CBC")}


@pytest.fixture(params=["scip", "cbc", "cpsat"])
def solver_cls(request):
    if request.param == "cpsat":
        return CPSATReserveModel
    model_cls, backend = LP_BACKENDS[request.param]
    if pywraplp.Solver.CreateSolver(backend) is None:
        pytest.skip(f"{backend} is not available in this OR-Tools build")
    return model_cls


def _solve(solver_cls, model, **kwargs):
    params = {"gap": 0.0, "output": False}
    params.update(kwargs)
    return solver_cls(model, **params).solve()


class TestLinearizedModels:
    def test_matches_enumeration(self, solver_cls, small_model):
        expected, _ = brute_force_optimum(small_model)
        solution = _solve(solver_cls, small_model)
        assert solution.objective_value == pytest.approx(expected, abs=1e-6)
        assert small_model.is_feasible(solution.selected_units)

    @pytest.mark.parametrize("blm", [0.0, 0.25, 2.0])
    def test_blm_sweep_matches_enumeration(self, solver_cls, small_units, blm):
        model = build_reserve_model(
            small_units.features,
            small_units.cost,
            small_units.boundary,
            blm=blm,
            target=[0.6, 0.4],
        )
        expected, _ = brute_force_optimum(model)
        solution = _solve(solver_cls, model)
        assert model.evaluate(solution.selected_units) == pytest.approx(expected)

    def test_all_units_required(self, solver_cls, all_required_model):
        solution = _solve(solver_cls, all_required_model)
        np.testing.assert_array_equal(solution.selected_units, [1, 1, 1, 1])
        assert solution.objective_value == pytest.approx(18.0)

    def test_locks_respected(self, solver_cls, small_units):
        model = build_reserve_model(
            small_units.features,
            small_units.cost,
            small_units.boundary,
            blm=1.0,
            target=0.5,
            locked_in=[2],
            locked_out=[4],
        )
        solution = _solve(solver_cls, model, unit_ids=small_units.unit_ids)
        assert solution.selected_units[2] == 1
        assert solution.selected_units[4] == 0

    def test_infeasible_targets_raise(self, solver_cls):
        model = build_reserve_model(
            np.ones((1, 2)),
            np.ones(2),
            grid_boundary(2, 1),
            blm=1.0,
            target=1.0,
            locked_out=[0],
        )
        with pytest.raises(NoSolutionError):
            _solve(solver_cls, model)

    def test_time_limit_still_returns_reserve(self, solver_cls, small_model):
        solution = _solve(solver_cls, small_model, time_limit_ms=10_000)
        assert small_model.is_feasible(solution.selected_units)


class TestScalingFactor:
    @pytest.mark.parametrize(
        "values,expected",
        [
            ([1.0, 2.0, -3.0], 1),
            ([0.5, 2.0], 10),
            ([0.25, 1.125], 1000),
            ([1e-9], 1_000_000),
            ([], 1),
        ],
    )
    def test_power_of_ten(self, values, expected):
        assert determine_scaling_factor(values) == expected

    def test_fractional_targets_are_rounded_up(self):
        # two units hold 0.2, just short of the 0.21 target
        model = build_reserve_model(
            np.array([[0.1, 0.1, 0.1]]),
            np.ones(3),
            grid_boundary(1, 3),
            blm=0.0,
            target=0.7,
        )
        solution = CPSATReserveModel(model, gap=0.0, output=False).solve()
        assert solution.n_selected == 3

    @pytest.mark.parametrize(
        "target,expected_selected", [(1.0, 3), (2.0 / 3.0, 2), (0.5, 2)]
    )
    def test_repeating_decimal_occupancy(self, target, expected_selected):
        model = build_reserve_model(
            np.array([[1 / 3, 1 / 3, 1 / 3]]),
            np.ones(3),
            grid_boundary(1, 3),
            blm=0.0,
            target=target,
        )
        expected, _ = brute_force_optimum(model)
        solution = CPSATReserveModel(model, gap=0.0, output=False).solve()
        assert solution.n_selected == expected_selected
        assert solution.objective_value == pytest.approx(expected)
        assert model.is_feasible(solution.selected_units)

    def test_scaled_row_keeps_full_reserve_feasible(self):
        model = build_reserve_model(
            np.array([[1 / 3, 1 / 3, 1 / 3]]),
            np.ones(3),
            grid_boundary(1, 3),
            blm=0.0,
            target=1.0,
        )
        adapter = CPSATReserveModel(model, output=False)
        coefs, required = adapter._scaled_target_row(model.A.data, float(model.rhs[0]))
        assert sum(coefs) >= required
        assert sum(coefs[:2]) < required
