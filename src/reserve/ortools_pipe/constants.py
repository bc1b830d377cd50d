"""
Default settings for the OR-Tools reserve models (SCIP, CBC, CP-SAT).
"""

from __future__ import annotations

GAP = 0.1
NUM_THREADS = 1

# Milliseconds, as pywraplp expects; when set it takes precedence over GAP
TIME_LIMIT_MS: int | None = None

# CP-SAT integer scaling keeps at most this many decimals
MAX_SCALE_DIGITS = 6

# Shortfall below a target still accepted, as in ReserveModel.is_feasible
TARGET_TOLERANCE = 1e-6
