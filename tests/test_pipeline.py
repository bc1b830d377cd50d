import json

import numpy as np
import pandas as pd
import pytest

import experiments.run_blm_calibration as calibration
from experiments.run_blm_calibration import main as calibration_main
from experiments.run_blm_calibration import run_calibration
from reserve.main import main, parse_target, parse_unit_list
from reserve.pipeline import run_pipeline, solve_reserve_model
from reserve.solution import NoSolutionError


class TestRunPipeline:
    @pytest.mark.parametrize("solver", ["gurobi", "cpsat"])
    def test_solvers_agree(self, small_units, solver):
        result = run_pipeline(
            small_units, solver=solver, blm=0.5, target=0.5, gap=0.0, output=False
        )
        reference = run_pipeline(
            small_units, solver="gurobi", blm=0.5, target=0.5, gap=0.0, output=False
        )
        assert result.summary.objective_value == pytest.approx(
            reference.summary.objective_value
        )
        assert all(result.summary.targets_met.values())
        assert result.summary.solver == solver

    def test_unknown_solver(self, small_units):
        with pytest.raises(ValueError):
            run_pipeline(small_units, solver="glpk")

    def test_unknown_solver_for_built_model(self, small_model):
        with pytest.raises(ValueError):
            solve_reserve_model(small_model, "glpk")


class TestCommandLine:
    def test_parse_unit_list(self, small_units):
        assert parse_unit_list("cell_0_1, 4", small_units) == [1, 4]
        assert parse_unit_list(None, small_units) == []
        with pytest.raises(ValueError):
            parse_unit_list("cell_9_9", small_units)

    def test_parse_target(self):
        assert parse_target("0.3") == 0.3
        assert parse_target("0.3,0.5") == [0.3, 0.5]

    def test_grid_run_writes_outputs(self, npz_grid, tmp_path):
        summary_path = tmp_path / "summary.json"
        selection_path = tmp_path / "selection.npy"
        exit_code = main(
            [
                "--grid",
                str(npz_grid),
                "--solver",
                "cpsat",
                "--blm",
                "0.5",
                "--target",
                "0.5,0.4",
                "--gap",
                "0",
                "--locked-out",
                "cell_0_0",
                "--summary-path",
                str(summary_path),
                "--selection-path",
                str(selection_path),
                "--quiet",
            ]
        )
        assert exit_code == 0

        payload = json.loads(summary_path.read_text(encoding="utf-8"))
        assert payload["solver"] == "cpsat"
        assert payload["feature_names"] == ["orchid", "lizard"]
        assert "cell_0_0" not in payload["selected_units"]

        selection = np.load(selection_path)
        assert selection.shape == (2, 3)
        assert selection[0, 0] == 0.0
        assert int(selection.sum()) == len(payload["selected_units"])

    def test_source_is_required(self):
        with pytest.raises(SystemExit):
            main(["--blm", "1"])


class TestBlmCalibration:
    def test_sweep_records_trade_off(self, small_units):
        df = run_calibration(
            small_units, [0.0, 5.0], ["cpsat"], runs=1, target=0.5, gap=0.0
        )
        assert list(df["BLM"]) == [0.0, 5.0]
        assert (df["STATUS"] == "OPTIMAL").all()
        low, high = df.iloc[0], df.iloc[1]
        assert high["BOUNDARY"] <= low["BOUNDARY"] + 1e-9
        assert high["COST"] >= low["COST"] - 1e-9

    def test_solver_failure_is_recorded(self, small_units, monkeypatch):
        def no_solution(*args, **kwargs):
            raise NoSolutionError("cpsat", "INFEASIBLE")

        monkeypatch.setattr(calibration, "solve_reserve_model", no_solution)
        df = run_calibration(small_units, [1.0], ["cpsat"], runs=2)
        assert list(df["STATUS"]) == ["error", "error"]
        assert df.iloc[0]["NOTES"].startswith("Error: cpsat finished without")
        assert df.iloc[1]["ID"] == "blm1_cpsat_run2"

    def test_main_writes_csv(self, npz_grid, tmp_path):
        output = tmp_path / "calibration.csv"
        calibration_main(
            [
                "--grid",
                str(npz_grid),
                "--blm-values",
                "0",
                "1",
                "--solvers",
                "cpsat",
                "--output",
                str(output),
                "--summary-dir",
                str(tmp_path / "summaries"),
            ]
        )
        df = pd.read_csv(output)
        assert len(df) == 2
        assert set(df["SOLVER"]) == {"cpsat"}
        assert len(list((tmp_path / "summaries").glob("*.json"))) == 2
