"""
dsplab Defaults
===============

Centralized configuration for sampling, integration, formula limits and
classification.

Usage:
    from dsplab.config.defaults import (
        DEFAULT_NUM_SAMPLES,
        CATALOG_INTERVAL,
        DELTA_EPSILON,
    )

Modification:
    Values here change results for every caller. Per-call overrides are
    available as keyword arguments on the analysis functions.
"""

import os

# =============================================================================
# SAMPLING
# =============================================================================
# Used in: dsplab/analysis/sampling.py, dsplab/analysis/classify.py

DEFAULT_NUM_SAMPLES = 500          # User formulas (plot + analysis)
CATALOG_NUM_SAMPLES = 1000         # Catalog batch classification
DEFAULT_INTERVAL = (-5.0, 5.0)     # User formulas and catalog plots
CATALOG_INTERVAL = (-10.0, 10.0)   # Catalog batch classification
POWER_INTERVAL = (0.0, 10.0)       # Single-signal power calculation


# =============================================================================
# SIGNAL LIBRARY
# =============================================================================
# Used in: dsplab/formula/registry.py, dsplab/analysis/derivatives.py

DELTA_EPSILON = 0.01               # Width of the Gaussian impulse approximation
DERIVATIVE_STEP = 1e-5             # Central difference step h
DERIVATIVE_CLIP = 500.0            # |f''| above this is not plotted


# =============================================================================
# FORMULA LIMITS
# =============================================================================
# Used in: dsplab/formula/parser.py
# Bounds keep parsing and evaluation below the interpreter recursion limit.

MAX_AST_NODES = int(os.environ.get("DSPLAB_MAX_AST_NODES", "2000"))
MAX_NESTING_DEPTH = int(os.environ.get("DSPLAB_MAX_NESTING_DEPTH", "64"))
FORMULA_CACHE_SIZE = 256


# =============================================================================
# CLASSIFICATION
# =============================================================================
# Used in: dsplab/analysis/classify.py
# Heuristic only: one dashboard variant called a user formula finite-energy
# when its windowed energy stayed below this magnitude. Not a classification law.

ENERGY_THRESHOLD_HEURISTIC = 1e10


# =============================================================================
# FORMATTING
# =============================================================================
# Used in: dsplab/analysis/formatting.py

FORMAT_DECIMALS = 3
FORMAT_SCIENTIFIC_BELOW = 0.001
FORMAT_SCIENTIFIC_ABOVE = 1000.0
PLOT_T_DECIMALS = 3
