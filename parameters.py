# -*- coding: utf-8 -*-
"""
Default settings for the two-model comparison run.

Both models describe the same observations as Gaussian noise around a
common location mu. They differ only in the assumed noise scale.
"""

# Values used to simulate observations when no data file is given
fiducial_params = {
    "mu": 0.5,             # True location of the observations
    "noise_sigma": 1.2,    # True noise scale
    "n_observations": 40,
}

# The two competing models; beta=0 is model 0, beta=1 is model 1
models = {
    0: {"name": "narrow_noise", "sigma": 1.0},
    1: {"name": "wide_noise", "sigma": 2.0},
}

# Prior distributions shared by both models
priors = {
    "mu": {
        "dist": "gaussian",
        "mean": 0.0, "sigma": 2.0,
    },
}

# Ranges used to scale the proposal
param_ranges = {
    "mu": (-2.0, 2.0),
}

# Chain and annealing defaults (overridable from the command line)
chain_defaults = {
    "beta_mode": "oneway",    # 'static', 'oneway' or 'bothways'
    "start_beta": 0.0,
    "n_steps": 20000,         # annealing steps after the burn-in plateau
    "burn_in": 1000,          # steps at the starting beta before it moves
    "log_every": 10,
    "checkpoint_every": 5000,
    "proposal_fraction": 0.05,  # proposal std-dev as a fraction of the parameter range
}
