# -*- coding: utf-8 -*-
"""
Log Bayes factor from a completed beta/U log by thermodynamic integration.

Lartillot & Philippe (2006): log(Z1/Z0) = integral over beta in [0, 1] of
E_beta[U], with U = logP1 - logP0. With beta moving by a fixed amount per
logged sample, the integral is approximated by the trapezoid rule over the
sample index divided by the number of samples.

The shape of the schedule is read off the first and last beta:
    0 -> 1 or 1 -> 0   oneway    (one estimate)
    0 -> 0 or 1 -> 1   bothways  (one estimate per sweep direction)
"""

import logging
import multiprocessing
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import pandas as pd
from scipy.integrate import trapezoid

from annealing import BETA_EPSILON, Direction, snap_to_extreme
from exceptions import (ClassificationError, InsufficientSamplesError,
                        ModelComparisonError, SegmentIntegrationError)
from log_samples import read_log_file

logger = logging.getLogger("BAYES_FACTOR")

CLASSIFICATION_EPSILON = BETA_EPSILON


class ScheduleShape(Enum):
    ONEWAY = "oneway"
    BOTHWAYS = "bothways"


@dataclass
class Segment:
    """Rows (indices into the log) integrated together as one sweep."""
    segment_id: int
    direction: Direction
    rows: list = field(default_factory=list)


@dataclass
class SegmentEstimate:
    segment_id: int
    direction: Direction
    n_samples: int
    log_bayes_factor: float = float("nan")
    error: str = None

    @property
    def ok(self):
        return self.error is None


@dataclass
class BayesFactorResult:
    source: str
    shape: ScheduleShape
    n_rows: int
    n_retained: int
    segments: list
    reversal_rows: list = field(default_factory=list)

    @property
    def estimates(self):
        """Successful log Bayes factor estimates, one per segment."""
        return [s.log_bayes_factor for s in self.segments if s.ok]

    @property
    def log_bayes_factor(self):
        """The single estimate of a oneway log, or None if it could not be computed."""
        if self.shape is not ScheduleShape.ONEWAY:
            raise AttributeError("A bothways log has one estimate per sweep; use .estimates")
        return self.segments[0].log_bayes_factor if self.segments[0].ok else None

    @property
    def discrepancy(self):
        """Absolute difference between the two bothways estimates (NaN if unavailable)."""
        if self.shape is ScheduleShape.BOTHWAYS and len(self.estimates) == 2:
            return abs(self.estimates[0] - self.estimates[1])
        return float("nan")


@dataclass
class FileAnalysis:
    """Outcome of analysing one log file: a result, or the error that stopped it."""
    path: str
    result: BayesFactorResult = None
    error: str = None

    @property
    def ok(self):
        return self.result is not None


def classify_schedule(stream, epsilon=CLASSIFICATION_EPSILON):
    """
    Classify a stream as oneway or bothways from its first and last beta.

    Both ends must lie within epsilon of 0 or 1 (no tolerance scaling).

    Raises:
        InsufficientSamplesError: if the stream has fewer than 2 rows
        ClassificationError: if either end is not at an extreme
    """
    if len(stream) < 2:
        raise InsufficientSamplesError(len(stream), path=stream.source)
    first = snap_to_extreme(stream.first_beta, epsilon)
    last = snap_to_extreme(stream.last_beta, epsilon)
    if first is None or last is None:
        raise ClassificationError(stream.first_beta, stream.last_beta, path=stream.source)
    return ScheduleShape.ONEWAY if first != last else ScheduleShape.BOTHWAYS


def useful_sample_indices(beta):
    """
    Indices of the rows that take part in the integration.

    Rows recorded while beta is constant are dropped, apart from the last
    row of each constant run (the row just before beta moves again). A row
    that beta has just moved to is always kept.

    Args:
        beta (array-like): Beta values in chain order

    Returns:
        ndarray: Retained row indices, ascending
    """
    beta = np.asarray(beta, dtype=float)
    n = len(beta)
    changed = beta[1:] != beta[:-1]
    keep = np.zeros(n, dtype=bool)
    keep[1:] |= changed   # beta moved to this row
    keep[:-1] |= changed  # beta moves away from this row
    return np.flatnonzero(keep)


def segment_samples(beta, rows, shape):
    """
    Split retained rows into sweeps.

    For a bothways log the direction is set by the first move. When the
    sign of a beta delta flips, the segment id toggles between 0 and 1 and
    the turning-point row opens the new segment (it also closes the old
    one, being the extreme both sweeps share).

    Args:
        beta (array-like): Beta values of the full log
        rows (array-like): Retained row indices, ascending
        shape (ScheduleShape): Classified schedule shape

    Returns:
        tuple: (list of Segment, list of turning-point rows)
    """
    beta = np.asarray(beta, dtype=float)
    rows = [int(r) for r in rows]

    if shape is ScheduleShape.ONEWAY:
        direction = Direction.of(beta[rows[-1]] - beta[rows[0]]) if rows else Direction.UNSET
        return [Segment(0, direction, rows)], []

    segments = [Segment(0, Direction.UNSET), Segment(1, Direction.UNSET)]
    reversals = []
    current = 0
    direction = Direction.UNSET
    previous = None

    for row in rows:
        if previous is not None:
            step = Direction.of(beta[row] - beta[previous])
            if step is not Direction.UNSET:
                if direction is Direction.UNSET:
                    direction = step
                elif step is not direction:
                    current = 1 - current
                    direction = step
                    reversals.append(previous)
                    segments[current].rows.append(previous)
                if segments[current].direction is Direction.UNSET:
                    segments[current].direction = step
        segments[current].rows.append(row)
        previous = row

    return segments, reversals


def trapezoid_mean(u_values, segment_id=0, rows=None, path=None):
    """
    Trapezoid rule over sample index, divided by the number of samples.

    The first and last values get weight 1/2, interior values weight 1.

    Raises:
        InsufficientSamplesError: if fewer than 2 values are given
        SegmentIntegrationError: if any value is NaN or infinite
    """
    u = np.asarray(u_values, dtype=float)
    if len(u) < 2:
        raise InsufficientSamplesError(len(u), segment=segment_id, path=path)
    bad = ~np.isfinite(u)
    if bad.any():
        i = int(np.argmax(bad))
        row = rows[i] if rows is not None else i
        raise SegmentIntegrationError(segment_id, row, float(u[i]), path=path)
    return float(trapezoid(u) / len(u))


def estimate_log_bayes_factor(stream, epsilon=CLASSIFICATION_EPSILON):
    """
    Classify, filter, segment and integrate a beta/U stream.

    A failing segment is recorded on its SegmentEstimate and does not stop
    the other segment from being computed.

    Args:
        stream (LogSampleStream): Completed log in chain order
        epsilon (float): Tolerance for the classification of the end points

    Returns:
        BayesFactorResult

    Raises:
        ClassificationError: if the schedule shape cannot be determined
        InsufficientSamplesError: if fewer than 2 rows survive plateau filtering
    """
    shape = classify_schedule(stream, epsilon)
    logger.info(f"{stream.name}: classified as {shape.value} ({len(stream)} rows, "
                f"beta {stream.first_beta} -> {stream.last_beta})")

    rows = useful_sample_indices(stream.beta)
    if len(rows) < 2:
        raise InsufficientSamplesError(len(rows), path=stream.source)
    logger.info(f"{stream.name}: {len(rows)} of {len(stream)} rows retained after plateau filtering")

    segments, reversals = segment_samples(stream.beta, rows, shape)
    for row in reversals:
        logger.info(f"{stream.name}: changed direction at row {row} (beta={stream.beta[row]})")
    if len(reversals) > 1:
        logger.warning(f"{stream.name}: {len(reversals)} direction changes found; "
                       f"a bothways schedule is expected to reverse once")

    estimates = []
    for segment in segments:
        estimate = SegmentEstimate(segment.segment_id, segment.direction, len(segment.rows))
        try:
            estimate.log_bayes_factor = trapezoid_mean(stream.u[segment.rows], segment.segment_id,
                                                       rows=segment.rows, path=stream.source)
        except (InsufficientSamplesError, SegmentIntegrationError) as e:
            estimate.error = str(e)
            logger.error(f"{stream.name}: {e}")
        estimates.append(estimate)

    return BayesFactorResult(source=stream.source, shape=shape, n_rows=len(stream),
                             n_retained=len(rows), segments=estimates, reversal_rows=reversals)


def analyze_log_file(path):
    """
    Read and analyse one log file, turning any input or classification error
    into a FileAnalysis carrying the message.
    """
    try:
        stream = read_log_file(path)
        return FileAnalysis(path=str(path), result=estimate_log_bayes_factor(stream))
    except ModelComparisonError as e:
        logger.error(f"Skipping {path}: {e}")
        return FileAnalysis(path=str(path), error=str(e))


def analyze_log_files(paths, processes=1):
    """
    Analyse independent log files, optionally in a process pool.

    Returns:
        list of FileAnalysis in the order of `paths`
    """
    paths = [str(p) for p in paths]
    if processes is None or processes <= 1 or len(paths) < 2:
        return [analyze_log_file(p) for p in paths]

    n_workers = min(processes, len(paths), multiprocessing.cpu_count())
    logger.info(f"Analysing {len(paths)} files with {n_workers} processes")
    with multiprocessing.Pool(n_workers) as pool:
        return pool.map(analyze_log_file, paths)


# Kass & Raftery (1995) thresholds on the natural-log scale
SUPPORT_LEVELS = [
    (1.0, "weak"),
    (3.0, "positive"),
    (5.0, "strong"),
    (float("inf"), "very strong"),
]


def interpret_log_bayes_factor(log_bf):
    """
    Describe the support a log Bayes factor log(Z1/Z0) gives.

    Returns:
        str: e.g. "strong support for model 1"
    """
    if not np.isfinite(log_bf):
        return "undetermined"
    if log_bf == 0:
        return "no preference between the models"
    favoured = "model 1" if log_bf > 0 else "model 0"
    for threshold, label in SUPPORT_LEVELS:
        if abs(log_bf) <= threshold:
            return f"{label} support for {favoured}"


def results_to_dataframe(analyses):
    """One row per analysed segment, or per failed file."""
    records = []
    for analysis in analyses:
        if not analysis.ok:
            records.append({
                'file': analysis.path, 'schedule': None, 'segment': None, 'direction': None,
                'n_samples': 0, 'log_bayes_factor': np.nan, 'support': None,
                'error': analysis.error,
            })
            continue
        result = analysis.result
        for segment in result.segments:
            records.append({
                'file': analysis.path,
                'schedule': result.shape.value,
                'segment': segment.segment_id,
                'direction': segment.direction.name.lower(),
                'n_samples': segment.n_samples,
                'log_bayes_factor': segment.log_bayes_factor,
                'support': interpret_log_bayes_factor(segment.log_bayes_factor) if segment.ok else None,
                'error': segment.error,
            })
    return pd.DataFrame.from_records(records, columns=[
        'file', 'schedule', 'segment', 'direction', 'n_samples',
        'log_bayes_factor', 'support', 'error'])


def export_to_csv(analyses, output_file):
    df = results_to_dataframe(analyses)
    df.to_csv(output_file, index=False)
    logger.info(f"Saved Bayes factor estimates to {output_file}")
    return df
