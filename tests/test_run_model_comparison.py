"""Smoke tests for the run_model_comparison script."""

import glob
import os

import pytest

from run_model_comparison import main


def test_oneway_run(tmp_path, capsys):
    output_dir = str(tmp_path / "results")
    code = main(["--n-steps", "300", "--burn-in", "20", "--log-every", "1",
                 "--checkpoint-every", "100", "--seed", "2", "--output-dir", output_dir])
    out = capsys.readouterr().out
    assert code == 0
    assert "Thermodynamic log Bayes factor:" in out
    assert "Exact log Bayes factor:" in out
    assert len(glob.glob(os.path.join(output_dir, "beta_u_oneway_*.log"))) == 1
    assert len(glob.glob(os.path.join(output_dir, "chain_oneway_*_final.npz"))) == 1


def test_bothways_run(tmp_path, capsys):
    code = main(["--mode", "bothways", "--n-steps", "300", "--burn-in", "0", "--seed", "2",
                 "--log-every", "2", "--output-dir", str(tmp_path)])
    out = capsys.readouterr().out
    assert code == 0
    assert "(first direction)" in out
    assert "(second direction)" in out


def test_observation_file(tmp_path, capsys):
    data = tmp_path / "obs.txt"
    data.write_text("\n".join(str(x) for x in [0.2, -0.4, 1.3, 0.8, -1.1]) + "\n")
    code = main(["--data", str(data), "--n-steps", "100", "--burn-in", "0",
                 "--output-dir", str(tmp_path / "results")])
    assert code == 0


def test_start_beta_not_at_extreme(tmp_path, capsys):
    code = main(["--start-beta", "0.4", "--output-dir", str(tmp_path)])
    assert code == 2
    assert "Invalid configuration" in capsys.readouterr().err


def test_unknown_mode(tmp_path):
    with pytest.raises(SystemExit):
        main(["--mode", "sideways", "--output-dir", str(tmp_path)])


@pytest.mark.parametrize("args", [
    ["--mode", "static", "--n-steps", "-5"],
    ["--mode", "static", "--n-steps", "0"],
    ["--checkpoint-every", "0", "--n-steps", "10"],
])
def test_degenerate_counts_are_configuration_errors(tmp_path, capsys, args):
    code = main(args + ["--output-dir", str(tmp_path)])
    assert code == 2
    assert "Invalid configuration" in capsys.readouterr().err
