# -*- coding: utf-8 -*-
"""
Log-prior shared by the two compared models.
"""

import logging

import numpy as np

from parameters import priors as default_priors

logger = logging.getLogger("PRIORS")


def log_prior(params, priors=None):
    """
    Compute the log prior probability for the given parameters.
    Returns -inf if any parameter is outside its prior bounds.
    Otherwise, returns the sum of log-probabilities of each prior.

    Args:
        params (dict): Dictionary of parameter values
        priors (dict, optional): Prior specification, defaults to parameters.priors

    Returns:
        float: Log-prior probability, or -inf if any parameter is outside bounds
    """
    if priors is None:
        priors = default_priors
    logp = 0.0

    for name, value in params.items():
        if name not in priors:
            continue

        pinfo = priors[name]

        if ("min" in pinfo and value < pinfo["min"]) or ("max" in pinfo and value > pinfo["max"]):
            return -np.inf

        if pinfo["dist"] == "uniform":
            width = pinfo["max"] - pinfo["min"]
            logp += -np.log(width)

        elif pinfo["dist"] == "gaussian":
            mu, sigma = pinfo["mean"], pinfo["sigma"]
            logp += -0.5 * ((value - mu)/sigma)**2 - np.log(sigma * np.sqrt(2*np.pi))

        else:
            raise ValueError(f"Unknown prior distribution type for {name}")

    return logp
