# -*- coding: utf-8 -*-
"""
Beta schedule control for thermodynamic integration.

The controller owns the AnnealingState and is the only writer of beta.
The PowerPosterior holds a reference to the same state and only reads it.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from exceptions import ConfigurationError

logger = logging.getLogger("ANNEALING")

# Tolerance used when deciding whether a beta value sits on an extreme (0 or 1)
BETA_EPSILON = 1e-7


class BetaMode(Enum):
    STATIC = "static"
    ONEWAY = "oneway"
    BOTHWAYS = "bothways"

    @classmethod
    def from_string(cls, value):
        """
        Parse a schedule mode string ('static', 'oneway' or 'bothways').

        Raises:
            ConfigurationError: if the string names no known mode
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(f"'{m.value}'" for m in cls)
            raise ConfigurationError(
                f"Invalid beta control mode {value!r}; valid options are {valid}") from None


class Direction(Enum):
    UNSET = 0
    INCREASING = 1
    DECREASING = -1

    @classmethod
    def of(cls, delta):
        if delta > 0:
            return cls.INCREASING
        if delta < 0:
            return cls.DECREASING
        return cls.UNSET


@dataclass
class AnnealingState:
    """Shared annealing state. Mutated only by AnnealingScheduleController."""
    mode: BetaMode
    beta: float
    increment: float = 0.0
    direction: Direction = Direction.UNSET


def snap_to_extreme(beta, epsilon=BETA_EPSILON):
    """Return 0.0 or 1.0 if beta lies within epsilon of it, otherwise None."""
    if abs(beta) < epsilon:
        return 0.0
    if abs(beta - 1.0) < epsilon:
        return 1.0
    return None


class AnnealingScheduleController:
    """
    Advances beta once per chain step.

    static:   beta never changes.
    oneway:   beta moves linearly from its start (0 or 1) to the opposite
              extreme over exactly n_steps steps.
    bothways: beta moves to the opposite extreme over n_steps // 2 steps and
              back again with the same increment magnitude.

    The first `burn_in` calls to step() hold beta at its start value, which
    leaves a constant-beta plateau at the head of the beta/U log.
    """

    def __init__(self, mode, start_beta, n_steps, burn_in=0):
        mode = BetaMode.from_string(mode)
        start_beta = float(start_beta)

        if not 0.0 <= start_beta <= 1.0:
            raise ConfigurationError(f"Starting beta must lie in [0, 1], got {start_beta!r}")
        if burn_in < 0:
            raise ConfigurationError(f"Burn-in length must be non-negative, got {burn_in}")
        if int(n_steps) < 1:
            raise ConfigurationError(f"Step count must be at least 1, got {n_steps}")

        self.n_steps = int(n_steps)
        self.burn_in = int(burn_in)
        self.sweep_steps = 0
        self.reversal_steps = []
        self.steps_taken = 0
        self._moves = 0
        self._plateau_remaining = self.burn_in

        if mode is BetaMode.STATIC:
            self.start = start_beta
            self.target = start_beta
            self.state = AnnealingState(mode=mode, beta=start_beta)
            logger.info(f"Static beta schedule at beta={start_beta}")
            return

        start = snap_to_extreme(start_beta)
        if start is None:
            raise ConfigurationError(
                f"A {mode.value} schedule must start at beta=0 or beta=1, got {start_beta!r}")

        if mode is BetaMode.ONEWAY:
            self.sweep_steps = self.n_steps
        else:
            self.sweep_steps = self.n_steps // 2
            if self.n_steps % 2:
                logger.warning(f"Odd step count {self.n_steps} for a bothways schedule; "
                               f"the final step holds beta at {start}")
        if self.sweep_steps < 1:
            raise ConfigurationError(
                f"Step count {self.n_steps} is too small for a {mode.value} schedule")

        self.start = start
        self.target = 1.0 - start
        # |1 - 2*start| is the full distance to the opposite extreme
        magnitude = abs(1.0 - 2.0 * start) / self.sweep_steps
        increment = magnitude if self.target > start else -magnitude
        self.state = AnnealingState(mode=mode, beta=start, increment=increment)

        logger.info(f"{mode.value} beta schedule: start={start}, target={self.target}, "
                    f"increment={increment:.6g}, burn-in plateau={self.burn_in} steps")

    @property
    def beta(self):
        return self.state.beta

    @property
    def mode(self):
        return self.state.mode

    @property
    def finished(self):
        """True once beta has completed its schedule and will no longer move."""
        if self.state.mode is BetaMode.STATIC:
            return True
        if self.state.mode is BetaMode.ONEWAY:
            return self._moves >= self.sweep_steps
        return self._moves >= 2 * self.sweep_steps

    def step(self):
        """
        Advance the schedule by one chain step.

        Returns:
            bool: True if beta changed, meaning the current state must be
                  rescored before the next accept/reject test.
        """
        self.steps_taken += 1
        state = self.state

        if state.mode is BetaMode.STATIC:
            return False
        if self._plateau_remaining > 0:
            self._plateau_remaining -= 1
            return False
        if self.finished:
            return False

        needed = Direction.of(self.target - state.beta)
        applied = Direction.of(state.increment)
        if needed is not applied:
            state.increment = -state.increment
            state.direction = needed
            self.reversal_steps.append(self.steps_taken)
            logger.info(f"Reversed beta direction at step {self.steps_taken} "
                        f"(beta={state.beta:.6g}, now {needed.name.lower()})")
        elif state.direction is Direction.UNSET:
            state.direction = applied

        state.beta += state.increment
        self._moves += 1

        if self._moves % self.sweep_steps == 0:
            # land exactly on the extreme, then head back for bothways
            state.beta = self.target
            if state.mode is BetaMode.BOTHWAYS and self._moves == self.sweep_steps:
                self.target = self.start
        else:
            state.beta = min(1.0, max(0.0, state.beta))

        return True
