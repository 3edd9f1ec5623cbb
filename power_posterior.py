# -*- coding: utf-8 -*-
"""
Power posterior for thermodynamic integration (Lartillot & Philippe 2006).

The log-density at annealing parameter beta is the convex combination
(1 - beta) * logP0 + beta * logP1 of the two models' log-densities.
"""

import logging
from collections import namedtuple

logger = logging.getLogger("POWER_POSTERIOR")


class InnerLogLikelihoods(namedtuple("InnerLogLikelihoods", ["log_p0", "log_p1"])):
    """Log-densities of model 0 and model 1 at one chain state."""
    __slots__ = ()

    @property
    def u(self):
        return self.log_p1 - self.log_p0


def combine(log_p0, log_p1, beta):
    """
    Combine the two inner log-likelihoods at annealing parameter beta.

    -inf and NaN inputs propagate unchanged; the chain's acceptance test is
    responsible for rejecting such states.

    Args:
        log_p0 (float): Log-density under model 0
        log_p1 (float): Log-density under model 1
        beta (float): Annealing parameter in [0, 1]

    Returns:
        float: (1 - beta) * log_p0 + beta * log_p1
    """
    return (1.0 - beta) * log_p0 + beta * log_p1


class PosteriorEvaluator:
    """
    What the chain loop sees of a posterior.

    evaluate(params) scores a trial state, accept() commits the last trial
    as the chain's current state, reject() drops it, and current_log_p()
    rescores the current state (needed when the target density changed,
    e.g. beta moved).
    """

    def evaluate(self, params):
        raise NotImplementedError

    def accept(self):
        raise NotImplementedError

    def reject(self):
        raise NotImplementedError

    def current_log_p(self):
        raise NotImplementedError


class PowerPosterior(PosteriorEvaluator):
    """
    Blends two model log-densities with the beta held in a shared AnnealingState.

    The inner-likelihood cache always holds the pair for the last accepted
    state. A trial pair from evaluate() only reaches the cache through
    accept(), so U read from the cache never reflects a rejected proposal.

    Args:
        log_p0_func: Function returning the log-density of model 0 given parameters
        log_p1_func: Function returning the log-density of model 1 given parameters
        state (AnnealingState): Shared state; only beta is read from it
    """

    def __init__(self, log_p0_func, log_p1_func, state):
        self.log_p0_func = log_p0_func
        self.log_p1_func = log_p1_func
        self.state = state
        self._cached = None
        self._pending = None
        self.n_cache_updates = 0

    @property
    def beta(self):
        return self.state.beta

    def inner_log_likelihoods(self, params):
        """Evaluate both models at params. Does not touch the cache."""
        return InnerLogLikelihoods(float(self.log_p0_func(params)), float(self.log_p1_func(params)))

    def initialize(self, params):
        """
        Score the chain's starting state and cache it as accepted.

        Returns:
            float: Combined log-density of the starting state
        """
        pair = self.inner_log_likelihoods(params)
        self._pending = None
        self.cache_inner(pair)
        logger.info(f"Initial inner log-densities: logP0={pair.log_p0:.4f}, "
                    f"logP1={pair.log_p1:.4f}, U={pair.u:.4f}")
        return combine(pair.log_p0, pair.log_p1, self.state.beta)

    def evaluate(self, params):
        """
        Score a trial state at the current beta.

        The trial pair is held back until accept() is called.

        Returns:
            float: Combined log-density of the trial state
        """
        pair = self.inner_log_likelihoods(params)
        self._pending = pair
        return combine(pair.log_p0, pair.log_p1, self.state.beta)

    def accept(self):
        """Commit the pair from the last evaluate() call as the accepted state."""
        if self._pending is None:
            raise RuntimeError("accept() called without a pending evaluate()")
        self.cache_inner(self._pending)
        self._pending = None

    def reject(self):
        self._pending = None

    def cache_inner(self, pair):
        self._cached = InnerLogLikelihoods(*pair)
        self.n_cache_updates += 1

    @property
    def cached(self):
        return self._cached

    def current_log_p(self):
        """Combined log-density of the accepted state at the current beta."""
        if self._cached is None:
            raise RuntimeError("PowerPosterior has no accepted state yet; call initialize() first")
        return combine(self._cached.log_p0, self._cached.log_p1, self.state.beta)

    def cached_u(self):
        """U = logP1 - logP0 of the accepted state, taken from the cache."""
        if self._cached is None:
            raise RuntimeError("PowerPosterior has no accepted state yet; call initialize() first")
        return self._cached.u
