#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Compute log Bayes factors from one or more completed beta/U log files.

Each file is analysed on its own: a file that cannot be read or classified
is reported and skipped, and the remaining files are still analysed.

Usage:
    python model_comparison_calculator.py run1.log run2.log --csv results.csv
"""

import os
import sys
import glob
import logging
import argparse

from bayes_factor import analyze_log_files, export_to_csv, interpret_log_bayes_factor, ScheduleShape
from log_samples import read_log_file

logger = logging.getLogger("MC_CALCULATOR")

DIRECTION_LABELS = ("First Direction", "Second Direction")


def setup_logging(log_dir):
    os.makedirs(log_dir, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(os.path.join(log_dir, "model_comparison_calculator.log")),
            logging.StreamHandler()
        ]
    )


def expand_paths(paths):
    """Replace each directory in `paths` by the .log files it contains."""
    expanded = []
    for path in paths:
        if os.path.isdir(path):
            found = sorted(glob.glob(os.path.join(path, "*.log")))
            if not found:
                logger.warning(f"No .log files found in {path}")
            expanded.extend(found)
        else:
            expanded.append(path)
    return expanded


def format_estimate(value):
    return f"{value:.6f} ({interpret_log_bayes_factor(value)})"


def print_analysis(analysis):
    print(f"\n{analysis.path}")
    if not analysis.ok:
        print(f"Could not analyse log file: {analysis.error}")
        return

    result = analysis.result
    if result.shape is ScheduleShape.ONEWAY:
        segment = result.segments[0]
        if segment.ok:
            print(f"Log file analysed. The log Bayes factor calculated is: "
                  f"{format_estimate(segment.log_bayes_factor)}")
        else:
            print(f"Log file analysed, but no log Bayes factor could be computed: {segment.error}")
        return

    print("Log file analysed. The log Bayes factors calculated are:")
    for label, segment in zip(DIRECTION_LABELS, result.segments):
        if segment.ok:
            print(f" - {label} ({segment.direction.name.lower()}): "
                  f"{format_estimate(segment.log_bayes_factor)}")
        else:
            print(f" - {label}: not computed ({segment.error})")
    if len(result.estimates) == 2:
        print(f" Discrepancy between directions: {result.discrepancy:.6f}")


def write_plots(analyses, plot_dir):
    from analysis import plot_log_diagnostics

    for analysis in analyses:
        if not analysis.ok:
            continue
        stream = read_log_file(analysis.path)
        plot_log_diagnostics(stream, analysis.result, plot_dir)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Compute log Bayes factors from beta/U log files")
    parser.add_argument("paths", nargs="+", help="Log files, or directories of .log files, to analyse")
    parser.add_argument("--processes", type=int, default=1,
                        help="Number of processes for analysing several files (default: 1)")
    parser.add_argument("--csv", default=None, help="Write all estimates to this CSV file")
    parser.add_argument("--plot-dir", default=None, help="Save diagnostic plots to this directory")
    parser.add_argument("--log-dir", default=os.path.join(os.getcwd(), "logs"),
                        help="Directory for the calculator's own log file")
    args = parser.parse_args(argv)

    setup_logging(args.log_dir)

    paths = expand_paths(args.paths)
    if not paths:
        print("No log files to analyse.", file=sys.stderr)
        return 2

    logger.info(f"Analysing {len(paths)} log file(s)")
    analyses = analyze_log_files(paths, processes=args.processes)

    for analysis in analyses:
        print_analysis(analysis)

    if args.csv:
        export_to_csv(analyses, args.csv)
        print(f"\nEstimates written to {args.csv}")
    if args.plot_dir:
        write_plots(analyses, args.plot_dir)
        print(f"Plots written to {args.plot_dir}")

    n_ok = sum(1 for a in analyses if a.ok)
    logger.info(f"{n_ok} of {len(analyses)} file(s) analysed successfully")
    return 0 if n_ok else 1


if __name__ == "__main__":
    sys.exit(main())
