# -*- coding: utf-8 -*-
"""
Reading and writing beta/U logs.

A log is tab-separated. Lines starting with '#' are comments, the first
other line is the header, and every further line holds one chain sample.
The beta column is named BetaValue (or beta.value) and the U column UValue
(or u.value), matched case-insensitively.
"""

import io
import os
import logging
from collections import namedtuple

import numpy as np
import pandas as pd

from exceptions import ConfigurationError, LogFormatError, MissingColumnError

logger = logging.getLogger("LOG_SAMPLES")

BETA_COLUMN_NAMES = ("betavalue", "beta.value")
U_COLUMN_NAMES = ("uvalue", "u.value")

LogSample = namedtuple("LogSample", ["beta", "u"])


class LogSampleStream:
    """
    Ordered, immutable sequence of (beta, U) samples in chain order.

    Args:
        beta (array-like): Beta value of each sample
        u (array-like): U value of each sample
        source (str, optional): File the samples were read from
    """

    def __init__(self, beta, u, source=None):
        beta = np.array(beta, dtype=float)
        u = np.array(u, dtype=float)
        if beta.ndim != 1 or beta.shape != u.shape:
            raise ValueError(f"beta and U must be 1-D and of equal length, "
                             f"got shapes {beta.shape} and {u.shape}")
        beta.setflags(write=False)
        u.setflags(write=False)
        self.beta = beta
        self.u = u
        self.source = source

    @classmethod
    def from_samples(cls, samples, source=None):
        samples = list(samples)
        return cls([s[0] for s in samples], [s[1] for s in samples], source=source)

    def __len__(self):
        return len(self.beta)

    def __iter__(self):
        for beta, u in zip(self.beta, self.u):
            yield LogSample(float(beta), float(u))

    def __getitem__(self, index):
        return LogSample(float(self.beta[index]), float(self.u[index]))

    @property
    def name(self):
        return self.source if self.source is not None else "<memory>"

    @property
    def first_beta(self):
        return float(self.beta[0]) if len(self) else None

    @property
    def last_beta(self):
        return float(self.beta[-1]) if len(self) else None

    def __repr__(self):
        return f"LogSampleStream(n={len(self)}, source={self.source!r})"


def find_column(columns, accepted_names):
    """Index of the first column whose lower-cased, stripped name is accepted, else None."""
    for i, name in enumerate(columns):
        if str(name).strip().lower() in accepted_names:
            return i
    return None


def _parse_column(cells, column, path):
    values = np.empty(len(cells))
    for row, cell in enumerate(cells):
        if not isinstance(cell, str):
            raise LogFormatError(f"Missing {column} value", path=path, row=row)
        try:
            values[row] = float(cell)
        except ValueError:
            raise LogFormatError(f"Cannot parse {column} value {cell!r} as a number",
                                 path=path, row=row) from None
    return values


def read_log_file(path):
    """
    Read the beta and U columns of a log file.

    Args:
        path (str): Path to a tab-separated beta/U log

    Returns:
        LogSampleStream: Samples in file order

    Raises:
        LogFormatError: if the file cannot be read or a cell is not a number
        MissingColumnError: if the beta column, the U column or both are absent
    """
    path = str(path)
    if not os.path.isfile(path) or not os.access(path, os.R_OK):
        raise LogFormatError("Unable to read file; check that it exists and is accessible", path=path)

    try:
        with open(path) as f:
            lines = [line for line in f if not line.lstrip().startswith("#")]
    except (OSError, UnicodeDecodeError) as e:
        raise LogFormatError(f"Unable to read file: {e}", path=path) from None

    try:
        df = pd.read_csv(io.StringIO("".join(lines)), sep="\t", dtype=str, keep_default_na=False,
                         index_col=False, skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        raise LogFormatError("Log file contains no header line", path=path) from None
    except pd.errors.ParserError as e:
        raise LogFormatError(f"Malformed log file: {e}", path=path) from None

    columns = list(df.columns)
    beta_index = find_column(columns, BETA_COLUMN_NAMES)
    u_index = find_column(columns, U_COLUMN_NAMES)
    missing = [name for name, index in (("beta", beta_index), ("U", u_index)) if index is None]
    if missing:
        raise MissingColumnError(" and ".join(missing), path=path)

    beta = _parse_column(df.iloc[:, beta_index].tolist(), "beta", path)
    u = _parse_column(df.iloc[:, u_index].tolist(), "U", path)

    logger.info(f"Read {len(beta)} samples from {path}")
    return LogSampleStream(beta, u, source=path)


class BetaULogWriter:
    """
    Writes one (beta, U) row every `log_every` chain samples.

    Beta is read from the shared AnnealingState held by the posterior and U
    from the posterior's cache of the last accepted state.

    Args:
        path (str): Output file, or None to keep samples in memory only
        posterior (PowerPosterior): Posterior whose beta and cached U are logged
        log_every (int): Sampling interval
        comments (list of str, optional): Lines written as '#' comments before the header
    """

    header = ("Sample", "BetaValue", "UValue")

    def __init__(self, path, posterior, log_every=1, comments=None):
        if log_every < 1:
            raise ConfigurationError(f"log_every must be at least 1, got {log_every}")
        self.path = path
        self.posterior = posterior
        self.log_every = int(log_every)
        self.comments = list(comments or [])
        self.samples = []
        self._handle = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def open(self):
        if self.path is None:
            return
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        self._handle = open(self.path, "w")
        for line in self.comments:
            self._handle.write(f"# {line}\n")
        self._handle.write("\t".join(self.header) + "\n")

    def log(self, sample_nr, force=False):
        """
        Record the current (beta, U) if sample_nr falls on the logging interval.

        Returns:
            bool: True if a row was written
        """
        if not force and sample_nr % self.log_every != 0:
            return False
        beta = float(self.posterior.beta)
        u = float(self.posterior.cached_u())
        self.samples.append(LogSample(beta, u))
        if self._handle is not None:
            self._handle.write(f"{sample_nr}\t{beta!r}\t{u!r}\n")
        return True

    def close(self):
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def to_stream(self):
        return LogSampleStream.from_samples(self.samples, source=self.path)
