# -*- coding: utf-8 -*-
"""
Exceptions raised by the model comparison code.

Hierarchy:
    ModelComparisonError
    ├── ConfigurationError        (bad chain setup, raised before sampling)
    ├── LogFormatError            (unreadable or malformed beta/U log)
    │   └── MissingColumnError    (beta or U column not in the header)
    ├── ClassificationError       (schedule is neither oneway nor bothways)
    ├── InsufficientSamplesError  (fewer than 2 usable rows)
    └── SegmentIntegrationError   (NaN/inf inside a segment)
"""


class ModelComparisonError(Exception):
    """Base class for all model comparison errors."""


class ConfigurationError(ModelComparisonError, ValueError):
    """Invalid annealing/chain configuration. Fatal before any sampling starts."""


class LogFormatError(ModelComparisonError):
    """
    A beta/U log file could not be read or parsed.

    Args:
        message (str): Description of the problem
        path (str, optional): Log file the problem was found in
        row (int, optional): Zero-based data row index of the offending line
    """

    def __init__(self, message, path=None, row=None):
        self.path = path
        self.row = row
        parts = [message]
        if path is not None:
            parts.append(f"file: {path}")
        if row is not None:
            parts.append(f"row: {row}")
        super().__init__(" | ".join(parts))


class MissingColumnError(LogFormatError):
    """The header does not contain the beta or the U column."""

    def __init__(self, column, path=None):
        self.column = column
        super().__init__(f"Couldn't find the column for {column} in the log file", path=path)


class ClassificationError(ModelComparisonError):
    """First/last beta values match neither the oneway nor the bothways pattern."""

    def __init__(self, first_beta, last_beta, path=None):
        self.first_beta = first_beta
        self.last_beta = last_beta
        self.path = path
        message = (f"Cannot classify beta schedule starting at {first_beta!r} "
                   f"and ending at {last_beta!r}; expected each end to be 0 or 1")
        if path is not None:
            message += f" | file: {path}"
        super().__init__(message)


class InsufficientSamplesError(ModelComparisonError):
    """Too few usable rows to establish a direction or to integrate."""

    def __init__(self, n_samples, segment=None, path=None):
        self.n_samples = n_samples
        self.segment = segment
        self.path = path
        where = "" if segment is None else f" in segment {segment}"
        message = f"Need at least 2 usable samples{where}, found {n_samples}"
        if path is not None:
            message += f" | file: {path}"
        super().__init__(message)


class SegmentIntegrationError(ModelComparisonError):
    """A segment contains a NaN or infinite U value."""

    def __init__(self, segment, row, value, path=None):
        self.segment = segment
        self.row = row
        self.value = value
        self.path = path
        message = f"Segment {segment} contains non-finite U value {value!r} at row {row}"
        if path is not None:
            message += f" | file: {path}"
        super().__init__(message)
