# -*- coding: utf-8 -*-
"""
Diagnostic plots for beta/U logs.
"""

import os
import logging

import matplotlib
matplotlib.use('Agg')  # Use Agg backend for non-interactive environments
import matplotlib.pyplot as plt
import numpy as np

from bayes_factor import segment_samples, useful_sample_indices

logger = logging.getLogger("ANALYSIS")


def _segment_colors(n):
    colors = plt.cm.tab10.colors
    return [colors[i % len(colors)] for i in range(n)]


def plot_beta_schedule(stream, result=None, output_file='beta_schedule.png'):
    """
    Plot beta against log row, marking the turning points found by the estimator.

    Args:
        stream (LogSampleStream): The log that was analysed
        result (BayesFactorResult, optional): Estimator output for the same log
        output_file (str): Where to save the figure
    """
    fig, ax = plt.subplots(figsize=(10, 6))
    rows = np.arange(len(stream))
    ax.plot(rows, stream.beta, color='k', lw=1)

    if result is not None:
        for row in result.reversal_rows:
            ax.axvline(row, color='r', ls='--', alpha=0.7)

    ax.set_xlabel('Log row')
    ax.set_ylabel(r'$\beta$')
    ax.set_ylim(-0.05, 1.05)
    ax.set_title(f"Beta schedule: {stream.name}")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=300)
    plt.close(fig)
    logger.info(f"Saved beta schedule to {output_file}")
    return output_file


def plot_u_vs_beta(stream, result, output_file='u_vs_beta.png'):
    """
    Plot U against beta for the retained rows, one colour per segment.
    The area under each curve is that segment's log Bayes factor estimate.
    """
    fig, ax = plt.subplots(figsize=(10, 6))
    colors = _segment_colors(len(result.segments))

    segments, _ = segment_samples(stream.beta, useful_sample_indices(stream.beta), result.shape)

    for segment, estimate, color in zip(segments, result.segments, colors):
        if not segment.rows:
            continue
        label = f"Segment {segment.segment_id} ({segment.direction.name.lower()})"
        if estimate.ok:
            label += f": log BF = {estimate.log_bayes_factor:.3f}"
        ax.plot(stream.beta[segment.rows], stream.u[segment.rows], marker='.', ms=3,
                color=color, alpha=0.8, label=label)

    ax.axhline(0, color='gray', lw=0.8)
    ax.set_xlabel(r'$\beta$')
    ax.set_ylabel(r'$U = \log P_1 - \log P_0$')
    ax.set_title(f"U against beta: {stream.name}")
    ax.grid(True, alpha=0.3)
    ax.legend()

    plt.tight_layout()
    plt.savefig(output_file, dpi=300)
    plt.close(fig)
    logger.info(f"Saved U against beta to {output_file}")
    return output_file


def plot_log_diagnostics(stream, result, output_dir):
    """
    Write both diagnostic plots for one log into output_dir.

    Returns:
        list of str: The files written
    """
    os.makedirs(output_dir, exist_ok=True)
    stem = os.path.splitext(os.path.basename(stream.name))[0]
    return [
        plot_beta_schedule(stream, result, os.path.join(output_dir, f"{stem}_beta_schedule.png")),
        plot_u_vs_beta(stream, result, os.path.join(output_dir, f"{stem}_u_vs_beta.png")),
    ]
