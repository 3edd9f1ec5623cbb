"""
Shared fixtures for the model comparison tests.
"""

import pytest

from annealing import AnnealingState, BetaMode
from log_samples import LogSampleStream
from power_posterior import PowerPosterior

# (beta, U) rows of a oneway 0 -> 1 log with a one-row plateau at the start
SCENARIO_A = [(0.0, 2.0), (0.0, 2.0), (0.25, 3.0), (0.5, 4.0), (0.75, 5.0), (1.0, 6.0)]

# (beta, U) rows of a bothways 0 -> 1 -> 0 log
SCENARIO_B = [(0.0, 2.0), (0.0, 2.0), (0.5, 4.0), (1.0, 6.0), (0.5, 4.0), (0.0, 2.0)]


@pytest.fixture
def write_log(tmp_path):
    """
    Factory writing a tab-separated log into tmp_path.

    With the default header each (beta, U) pair is prefixed by its sample
    number; with a custom header the rows are written as given.
    """
    def _write(rows, name="run.log", header=None, comments=()):
        path = tmp_path / name
        lines = [f"# {c}" for c in comments]
        if header is None:
            lines.append("Sample\tBetaValue\tUValue")
            lines.extend(f"{i}\t{beta!r}\t{u!r}" for i, (beta, u) in enumerate(rows))
        else:
            lines.append("\t".join(header))
            lines.extend("\t".join(str(cell) for cell in row) for row in rows)
        path.write_text("\n".join(lines) + "\n")
        return str(path)

    return _write


@pytest.fixture
def scenario_a_log(write_log):
    return write_log(SCENARIO_A, name="scenario_a.log")


@pytest.fixture
def scenario_b_log(write_log):
    return write_log(SCENARIO_B, name="scenario_b.log")


@pytest.fixture
def linear_models():
    """Two toy log-densities with U = 2 * x + 1."""
    def log_p0(params):
        return -params["x"] ** 2

    def log_p1(params):
        return -params["x"] ** 2 + 2.0 * params["x"] + 1.0

    return log_p0, log_p1


@pytest.fixture
def static_state():
    return AnnealingState(mode=BetaMode.STATIC, beta=0.25)


@pytest.fixture
def power_posterior(linear_models, static_state):
    log_p0, log_p1 = linear_models
    return PowerPosterior(log_p0, log_p1, static_state)


@pytest.fixture
def scenario_a_stream():
    return LogSampleStream.from_samples(SCENARIO_A, source="scenario_a")


@pytest.fixture
def scenario_b_stream():
    return LogSampleStream.from_samples(SCENARIO_B, source="scenario_b")
