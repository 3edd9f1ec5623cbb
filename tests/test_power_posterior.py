"""Tests for the power posterior and its inner-likelihood cache."""

import numpy as np
import pytest

from annealing import AnnealingState, BetaMode
from power_posterior import InnerLogLikelihoods, PosteriorEvaluator, PowerPosterior, combine


class TestCombine:
    @pytest.mark.parametrize("beta, expected", [(0.0, -3.0), (1.0, 5.0), (0.25, -1.0)])
    def test_convex_combination(self, beta, expected):
        assert combine(-3.0, 5.0, beta) == pytest.approx(expected)

    def test_negative_infinity_propagates(self):
        assert combine(-np.inf, -1.0, 0.5) == -np.inf
        assert combine(-1.0, -np.inf, 0.5) == -np.inf

    def test_nan_propagates(self):
        assert np.isnan(combine(np.nan, -1.0, 0.5))


class TestInnerLogLikelihoods:
    def test_u_is_model1_minus_model0(self):
        assert InnerLogLikelihoods(-4.0, -1.5).u == pytest.approx(2.5)


class TestPowerPosterior:
    def test_is_a_posterior_evaluator(self, power_posterior):
        assert isinstance(power_posterior, PosteriorEvaluator)

    def test_initialize_caches_starting_state(self, power_posterior):
        log_p = power_posterior.initialize({"x": 1.0})
        assert log_p == pytest.approx(0.75 * -1.0 + 0.25 * 2.0)
        assert power_posterior.cached == (-1.0, 2.0)
        assert power_posterior.cached_u() == pytest.approx(3.0)
        assert power_posterior.n_cache_updates == 1

    def test_evaluate_does_not_touch_cache(self, power_posterior):
        power_posterior.initialize({"x": 1.0})
        power_posterior.evaluate({"x": 0.0})
        assert power_posterior.cached_u() == pytest.approx(3.0)
        assert power_posterior.n_cache_updates == 1

    def test_accept_commits_last_evaluation(self, power_posterior):
        power_posterior.initialize({"x": 1.0})
        power_posterior.evaluate({"x": 0.0})
        power_posterior.accept()
        assert power_posterior.cached_u() == pytest.approx(1.0)
        assert power_posterior.n_cache_updates == 2

    def test_rejected_proposal_never_reaches_cache(self, power_posterior):
        power_posterior.initialize({"x": 1.0})
        power_posterior.evaluate({"x": 5.0})
        power_posterior.reject()
        assert power_posterior.cached_u() == pytest.approx(3.0)
        with pytest.raises(RuntimeError):
            power_posterior.accept()

    def test_accept_without_evaluate_raises(self, power_posterior):
        with pytest.raises(RuntimeError):
            power_posterior.accept()

    def test_no_accepted_state_yet(self, power_posterior):
        with pytest.raises(RuntimeError):
            power_posterior.current_log_p()
        with pytest.raises(RuntimeError):
            power_posterior.cached_u()

    def test_reads_beta_from_shared_state(self, linear_models):
        state = AnnealingState(mode=BetaMode.ONEWAY, beta=0.0)
        posterior = PowerPosterior(*linear_models, state)
        posterior.initialize({"x": 1.0})
        assert posterior.current_log_p() == pytest.approx(-1.0)

        state.beta = 1.0
        assert posterior.beta == 1.0
        assert posterior.current_log_p() == pytest.approx(2.0)
        # U does not depend on beta
        assert posterior.cached_u() == pytest.approx(3.0)

    def test_evaluate_uses_current_beta(self, linear_models):
        state = AnnealingState(mode=BetaMode.ONEWAY, beta=0.5)
        posterior = PowerPosterior(*linear_models, state)
        assert posterior.evaluate({"x": 0.0}) == pytest.approx(0.5)


class TestPosteriorEvaluator:
    @pytest.mark.parametrize("method", ["accept", "reject", "current_log_p"])
    def test_interface_methods_are_abstract(self, method):
        with pytest.raises(NotImplementedError):
            getattr(PosteriorEvaluator(), method)()

    def test_evaluate_is_abstract(self):
        with pytest.raises(NotImplementedError):
            PosteriorEvaluator().evaluate({})
