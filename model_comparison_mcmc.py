# -*- coding: utf-8 -*-
"""
Metropolis-Hastings chain over the power posterior.

Each step runs, in this order: the annealing controller moves beta; if
beta changed the current state is rescored; a Gaussian random-walk
proposal is scored; the accept/reject test is applied; on acceptance
the posterior caches the new inner log-densities; the (beta, U) row is
logged from that cache.
"""

import time
import logging

import numpy as np

from exceptions import ConfigurationError
from log_samples import BetaULogWriter
from parameters import param_ranges, chain_defaults

logger = logging.getLogger("MC_MCMC")


def accept_proposal(current_log_prob, proposed_log_prob, rng):
    """
    Metropolis acceptance test in log space.

    Proposals scoring NaN or -inf are always rejected.

    Args:
        current_log_prob (float): Log-density of the current state
        proposed_log_prob (float): Log-density of the proposed state
        rng (numpy.random.Generator): Source of uniform draws

    Returns:
        bool: True if the proposal should be accepted
    """
    if np.isnan(proposed_log_prob) or proposed_log_prob == -np.inf:
        return False

    log_accept_ratio = proposed_log_prob - current_log_prob
    if log_accept_ratio >= 0:
        return True
    return np.log(rng.random()) < log_accept_ratio


def default_proposal_scale(param_keys, fraction=None):
    """Proposal std-dev per parameter: a fraction of its range (default 5%)."""
    if fraction is None:
        fraction = chain_defaults["proposal_fraction"]
    scales = {}
    for param in param_keys:
        if param in param_ranges:
            min_val, max_val = param_ranges[param]
            scales[param] = fraction * (max_val - min_val)
        else:
            scales[param] = 0.01
    return scales


def run_model_comparison_mcmc(posterior, controller, initial_params, proposal_scale=None,
                              log_file=None, log_every=1, checkpoint_every=1000,
                              chain_file=None, seed=None):
    """
    Run the thermodynamic-integration chain.

    The chain runs controller.burn_in + controller.n_steps steps. The
    starting state is logged as sample 0, and the final sample is always
    logged so that the log ends on the schedule's last beta.

    Args:
        posterior (PosteriorEvaluator): Power posterior driven by the chain
        controller (AnnealingScheduleController): Beta schedule, sharing its state with posterior
        initial_params (dict): Starting parameter values
        proposal_scale (dict, optional): Proposal std-dev for each parameter
        log_file (str, optional): Path of the beta/U log to write
        log_every (int): Write a beta/U row every this many steps
        checkpoint_every (int): How often to report progress and checkpoint
        chain_file (str, optional): Prefix for checkpoint and final .npz files
        seed (int, optional): Seed for the proposal and acceptance draws

    Returns:
        chain (ndarray): Parameter values after each step, shape (n_total, n_params)
        log_posterior_values (ndarray): Combined log-density after each step
        betas (ndarray): Beta after each step
        u_values (ndarray): Cached U after each step
    """
    if checkpoint_every < 1:
        raise ConfigurationError(f"checkpoint_every must be at least 1, got {checkpoint_every}")

    rng = np.random.default_rng(seed)
    params = dict(initial_params)
    param_keys = list(params.keys())
    n_total = controller.burn_in + controller.n_steps

    if proposal_scale is None:
        proposal_scale = default_proposal_scale(param_keys)

    logger.info(f"Starting model comparison MCMC: {n_total} steps "
                f"({controller.burn_in} burn-in, {controller.n_steps} annealing)")
    logger.info(f"Beta schedule: {controller.mode.value}, starting beta={controller.beta}")
    logger.info(f"Initial parameters: {params}")
    logger.info(f"Proposal scales: {proposal_scale}")

    current_logpost = posterior.initialize(params)
    if not np.isfinite(current_logpost):
        logger.error("Initial parameters have zero probability. Check priors.")
        raise ValueError("Initial parameters have zero probability. Check priors.")

    chain = np.zeros((n_total, len(param_keys)))
    log_posterior_values = np.zeros(n_total)
    betas = np.zeros(n_total)
    u_values = np.zeros(n_total)

    comments = [
        f"beta schedule: {controller.mode.value}",
        f"starting beta: {controller.beta}",
        f"burn-in steps: {controller.burn_in}",
        f"annealing steps: {controller.n_steps}",
    ]
    writer = BetaULogWriter(log_file, posterior, log_every=log_every, comments=comments)

    accept_count = 0
    start_time = time.time()
    last_checkpoint_time = start_time

    with writer:
        writer.log(0, force=True)

        for i in range(n_total):
            sample_nr = i + 1

            if controller.step():
                current_logpost = posterior.current_log_p()

            proposal = {name: rng.normal(loc=val, scale=proposal_scale[name])
                        for name, val in params.items()}
            prop_logpost = posterior.evaluate(proposal)

            if accept_proposal(current_logpost, prop_logpost, rng):
                params = proposal
                current_logpost = prop_logpost
                posterior.accept()
                accept_count += 1
            else:
                posterior.reject()

            for j, param in enumerate(param_keys):
                chain[i, j] = params[param]
            log_posterior_values[i] = current_logpost
            betas[i] = posterior.beta
            u_values[i] = posterior.cached_u()

            writer.log(sample_nr, force=(sample_nr == n_total))

            if sample_nr % checkpoint_every == 0:
                accept_rate = accept_count / sample_nr
                elapsed_time = time.time() - start_time
                remaining_time = elapsed_time / sample_nr * (n_total - sample_nr)
                logger.info(
                    f"Step {sample_nr}/{n_total} ({sample_nr/n_total*100:.1f}%) - "
                    f"beta={posterior.beta:.4f} - "
                    f"Log-posterior: {current_logpost:.2f} - "
                    f"U: {u_values[i]:.3f} - "
                    f"Accept rate: {accept_rate:.2f} - "
                    f"Elapsed: {elapsed_time:.1f}s - "
                    f"Est. remaining: {remaining_time:.1f}s"
                )

                if chain_file and (time.time() - last_checkpoint_time > 300):  # At most every 5 minutes
                    checkpoint_file = f"{chain_file}_checkpoint_{sample_nr}.npz"
                    np.savez(checkpoint_file, chain=chain[:sample_nr],
                             log_posterior=log_posterior_values[:sample_nr],
                             betas=betas[:sample_nr], u_values=u_values[:sample_nr],
                             accept_count=accept_count, i=i, elapsed_time=elapsed_time)
                    logger.info(f"Saved checkpoint to {checkpoint_file}")
                    last_checkpoint_time = time.time()

    final_accept_rate = accept_count / n_total if n_total else 0.0
    total_time = time.time() - start_time
    logger.info(f"MCMC completed in {total_time:.2f} seconds")
    logger.info(f"Final acceptance rate: {final_accept_rate:.2f}")
    if controller.reversal_steps:
        logger.info(f"Beta reversed at step(s): {controller.reversal_steps}")
    if log_file:
        logger.info(f"Beta/U log written to {log_file}")

    if chain_file:
        final_file = f"{chain_file}_final.npz"
        np.savez(final_file, chain=chain, log_posterior=log_posterior_values,
                 betas=betas, u_values=u_values, accept_rate=final_accept_rate,
                 total_time=total_time, initial_params=initial_params,
                 param_names=param_keys, beta_mode=controller.mode.value)
        logger.info(f"Saved final results to {final_file}")

    return chain, log_posterior_values, betas, u_values
