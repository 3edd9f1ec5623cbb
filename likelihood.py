# -*- coding: utf-8 -*-
"""
Observations and log-likelihoods for the two compared Gaussian-noise models.
"""

import os
import logging

import numpy as np
import pandas as pd
from scipy import stats

from parameters import fiducial_params, models, priors as default_priors
from priors import log_prior

logger = logging.getLogger("LIKELIHOOD")


def simulate_observations(n=None, mu=None, sigma=None, seed=None):
    """
    Draw Gaussian observations around mu.

    Args:
        n (int, optional): Number of observations (default from fiducial_params)
        mu (float, optional): True location
        sigma (float, optional): True noise scale
        seed (int, optional): Seed for reproducible draws

    Returns:
        ndarray: Simulated observations
    """
    n = fiducial_params["n_observations"] if n is None else n
    mu = fiducial_params["mu"] if mu is None else mu
    sigma = fiducial_params["noise_sigma"] if sigma is None else sigma
    rng = np.random.default_rng(seed)
    data = rng.normal(loc=mu, scale=sigma, size=n)
    logger.info(f"Simulated {n} observations with mu={mu}, sigma={sigma}, seed={seed}")
    return data


def load_observations(path):
    """
    Load observations from a whitespace-separated text file (first column).
    Lines starting with '#' are ignored.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Observation file not found: {path}")
    df = pd.read_csv(path, sep=r'\s+', comment='#', header=None, engine='python')
    data = df.iloc[:, 0].to_numpy(dtype=float)
    logger.info(f"Loaded {len(data)} observations from {path}")
    return data


def gaussian_log_likelihood(mu, data, sigma):
    """Sum of Normal(mu, sigma) log-densities of the observations."""
    return float(np.sum(stats.norm.logpdf(data, loc=mu, scale=sigma)))


def make_log_posterior(data, sigma, priors=None):
    """
    Build the unnormalised log-posterior of one model.

    Args:
        data (ndarray): Observations
        sigma (float): Noise scale assumed by the model
        priors (dict, optional): Prior specification

    Returns:
        callable: params dict -> log_prior + log_likelihood
    """
    def log_posterior(params):
        lp = log_prior(params, priors)
        if not np.isfinite(lp):
            return -np.inf
        return lp + gaussian_log_likelihood(params["mu"], data, sigma)

    return log_posterior


def model_log_posteriors(data, priors=None):
    """Log-posterior functions of model 0 and model 1, in that order."""
    return (make_log_posterior(data, models[0]["sigma"], priors),
            make_log_posterior(data, models[1]["sigma"], priors))


def analytic_log_evidence(data, sigma, prior_mean, prior_sigma):
    """
    Exact log marginal likelihood of a Gaussian-noise model with a Gaussian
    prior on its location: data ~ MVN(prior_mean, sigma^2 I + prior_sigma^2 J).
    """
    data = np.asarray(data, dtype=float)
    n = len(data)
    cov = sigma**2 * np.eye(n) + prior_sigma**2 * np.ones((n, n))
    return float(stats.multivariate_normal.logpdf(data, mean=np.full(n, prior_mean), cov=cov))


def exact_log_bayes_factor(data, priors=None):
    """
    log(Z1 / Z0) for the configured model pair.

    Only defined for an unbounded Gaussian prior on mu.
    """
    prior = (priors or default_priors)["mu"]
    if prior["dist"] != "gaussian" or "min" in prior or "max" in prior:
        raise ValueError("Exact evidence needs an unbounded Gaussian prior on mu")
    log_z = [analytic_log_evidence(data, models[k]["sigma"], prior["mean"], prior["sigma"])
             for k in (0, 1)]
    return log_z[1] - log_z[0]
