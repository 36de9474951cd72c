"""
config.py
---------
Centralised configuration for the deal valuation engine.
Solver and logging parameters are read from environment variables with
sensible defaults, so the same engine can be tuned per deployment without
code changes.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SolverConfig:
    """IRR root-finding parameters (Newton-Raphson with bisection fallback)."""
    guess:    float = float(os.getenv("DEAL_VAL_IRR_GUESS",    "0.20"))
    lower:    float = -0.99         # bisection bracket, lower bound
    upper:    float = 10.0          # bisection bracket, upper bound
    tol:      float = float(os.getenv("DEAL_VAL_IRR_TOL",      "1e-6"))
    max_iter: int   = int(os.getenv("DEAL_VAL_IRR_MAX_ITER",   "100"))


@dataclass
class EngineConfig:
    """Master configuration for the valuation engine."""
    solver: SolverConfig = field(default_factory=SolverConfig)

    # Minimum number of projected years shown regardless of exit year
    min_projection_years: int = 7

    # Logging
    log_level: str           = os.getenv("DEAL_VAL_LOG_LEVEL", "INFO")
    log_dir:   Optional[str] = os.getenv("DEAL_VAL_LOG_DIR") or None

    # Charts and reports written by main.py
    output_dir: str = os.path.join(os.path.dirname(__file__), "..", "outputs")


# Singleton instance used throughout the project
CONFIG = EngineConfig()
