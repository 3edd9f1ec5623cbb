"""Tests for the model_comparison_calculator command line."""

import os

import pandas as pd
import pytest

from model_comparison_calculator import expand_paths, main


@pytest.fixture
def run_cli(tmp_path, capsys):
    def _run(*args):
        code = main(list(args) + ["--log-dir", str(tmp_path / "logs")])
        return code, capsys.readouterr()

    return _run


def test_oneway_file(run_cli, scenario_a_log):
    code, out = run_cli(scenario_a_log)
    assert code == 0
    assert "The log Bayes factor calculated is: 3.200000 (strong support for model 1)" in out.out


def test_bothways_file(run_cli, scenario_b_log):
    code, out = run_cli(scenario_b_log)
    assert code == 0
    assert " - First Direction (increasing): 2.666667" in out.out
    assert " - Second Direction (decreasing): 2.666667" in out.out
    assert "Discrepancy between directions: 0.000000" in out.out


def test_bad_file_does_not_stop_good_file(run_cli, write_log, scenario_a_log):
    bad = write_log([(0, 0.0)], name="bad.log", header=("Sample", "BetaValue"))
    code, out = run_cli(bad, scenario_a_log)
    assert code == 0
    assert "Could not analyse log file" in out.out
    assert "3.200000" in out.out


def test_no_file_analysed(run_cli, write_log):
    ambiguous = write_log([(0.1, 1.0), (0.9, 2.0)], name="ambiguous.log")
    code, out = run_cli(ambiguous)
    assert code == 1
    assert "Cannot classify" in out.out


def test_no_arguments():
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_empty_directory(run_cli, tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    code, out = run_cli(str(empty))
    assert code == 2
    assert "No log files" in out.err


def test_directory_expansion(scenario_a_log, scenario_b_log, tmp_path):
    assert expand_paths([str(tmp_path)]) == sorted([scenario_a_log, scenario_b_log])


def test_csv_and_plots(run_cli, tmp_path, scenario_a_log, scenario_b_log):
    csv_file = tmp_path / "estimates.csv"
    plot_dir = tmp_path / "plots"
    code, _ = run_cli(scenario_a_log, scenario_b_log, "--csv", str(csv_file), "--plot-dir", str(plot_dir))
    assert code == 0
    assert len(pd.read_csv(csv_file)) == 3
    assert sorted(os.listdir(plot_dir)) == [
        "scenario_a_beta_schedule.png", "scenario_a_u_vs_beta.png",
        "scenario_b_beta_schedule.png", "scenario_b_u_vs_beta.png",
    ]
