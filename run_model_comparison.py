#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Run a thermodynamic-integration chain between the two noise models and
estimate their log Bayes factor.

The chain writes a beta/U log, which is then analysed exactly as
model_comparison_calculator.py would. For the demo models the exact log
Bayes factor is also printed for comparison.

Usage:
    python run_model_comparison.py --mode bothways --n-steps 40000 --seed 1
"""

import os
import sys
import time
import logging
import argparse

import numpy as np

from annealing import AnnealingScheduleController, BetaMode
from bayes_factor import analyze_log_file, interpret_log_bayes_factor, ScheduleShape
from exceptions import ConfigurationError
from likelihood import simulate_observations, load_observations, model_log_posteriors, exact_log_bayes_factor
from model_comparison_mcmc import run_model_comparison_mcmc
from parameters import chain_defaults, fiducial_params, models, priors
from power_posterior import PowerPosterior

logger = logging.getLogger("RUN_MODEL_COMPARISON")


def setup_logging(output_dir, run_timestamp):
    log_dir = os.path.join(output_dir, "logs")
    os.makedirs(log_dir, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(os.path.join(log_dir, f"model_comparison_{run_timestamp}.log")),
            logging.StreamHandler()
        ]
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Thermodynamic-integration model comparison run")
    parser.add_argument("--mode", default=chain_defaults["beta_mode"],
                        choices=[m.value for m in BetaMode],
                        help=f"Beta schedule (default: {chain_defaults['beta_mode']})")
    parser.add_argument("--start-beta", type=float, default=chain_defaults["start_beta"],
                        help=f"Starting beta (default: {chain_defaults['start_beta']})")
    parser.add_argument("--n-steps", type=int, default=chain_defaults["n_steps"],
                        help=f"Annealing steps after burn-in (default: {chain_defaults['n_steps']})")
    parser.add_argument("--burn-in", type=int, default=chain_defaults["burn_in"],
                        help=f"Steps held at the starting beta (default: {chain_defaults['burn_in']})")
    parser.add_argument("--log-every", type=int, default=chain_defaults["log_every"],
                        help=f"Write a beta/U row every N steps (default: {chain_defaults['log_every']})")
    parser.add_argument("--checkpoint-every", type=int, default=chain_defaults["checkpoint_every"],
                        help="Progress report interval in steps")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for data and chain")
    parser.add_argument("--data", default=None,
                        help="Whitespace-separated observation file (default: simulate observations)")
    parser.add_argument("--output-dir", default="./model_comparison_results",
                        help="Directory for the beta/U log, chain file and logs")
    return parser.parse_args(argv)


def run(args):
    """
    Run one chain and analyse its log.

    Returns:
        dict: log file path, BayesFactorResult and exact log Bayes factor (or None)
    """
    run_timestamp = time.strftime("%Y%m%d_%H%M%S")
    os.makedirs(args.output_dir, exist_ok=True)

    if args.data:
        data = load_observations(args.data)
    else:
        data = simulate_observations(seed=args.seed)

    log_p0, log_p1 = model_log_posteriors(data, priors)
    controller = AnnealingScheduleController(args.mode, args.start_beta, args.n_steps, burn_in=args.burn_in)
    posterior = PowerPosterior(log_p0, log_p1, controller.state)

    logger.info(f"Comparing model 0 ({models[0]['name']}, sigma={models[0]['sigma']}) "
                f"with model 1 ({models[1]['name']}, sigma={models[1]['sigma']}) "
                f"on {len(data)} observations")

    log_file = os.path.join(args.output_dir, f"beta_u_{args.mode}_{run_timestamp}.log")
    chain_file = os.path.join(args.output_dir, f"chain_{args.mode}_{run_timestamp}")
    initial_params = {"mu": float(np.mean(data)) if len(data) else fiducial_params["mu"]}

    run_model_comparison_mcmc(
        posterior, controller, initial_params,
        log_file=log_file,
        log_every=args.log_every,
        checkpoint_every=args.checkpoint_every,
        chain_file=chain_file,
        seed=args.seed,
    )

    analysis = analyze_log_file(log_file)

    try:
        exact = exact_log_bayes_factor(data, priors)
    except ValueError as e:
        logger.warning(f"No exact log Bayes factor available: {e}")
        exact = None

    return {"log_file": log_file, "analysis": analysis, "exact": exact}


def report(outcome):
    analysis = outcome["analysis"]
    exact = outcome["exact"]

    print("\n===== Model comparison results =====")
    print(f"Beta/U log: {outcome['log_file']}")
    if not analysis.ok:
        print(f"Could not analyse the log: {analysis.error}")
        return False

    result = analysis.result
    if result.shape is ScheduleShape.ONEWAY:
        labels = ["Thermodynamic log Bayes factor"]
    else:
        labels = ["Thermodynamic log Bayes factor (first direction)",
                  "Thermodynamic log Bayes factor (second direction)"]
    for label, segment in zip(labels, result.segments):
        if segment.ok:
            print(f"{label}: {segment.log_bayes_factor:.4f} "
                  f"({interpret_log_bayes_factor(segment.log_bayes_factor)})")
        else:
            print(f"{label}: not computed ({segment.error})")
    if exact is not None:
        print(f"Exact log Bayes factor: {exact:.4f} ({interpret_log_bayes_factor(exact)})")
    return bool(result.estimates)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.output_dir, time.strftime("%Y%m%d_%H%M%S"))

    try:
        outcome = run(args)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    return 0 if report(outcome) else 1


if __name__ == "__main__":
    sys.exit(main())
