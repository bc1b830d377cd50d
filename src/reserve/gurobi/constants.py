"""
Default constants for the Gurobi reserve model.
"""

# Boundary penalty
BLM = 1.0
EDGE_FACTOR = 1.0

# Representation targets
TARGET = 0.3
TARGET_TYPE = "percent"

# Solver tuning
GAP = 0.1
HEURISTICS = 0.05
FOCUS = 0
THREADS = 1

# Time limit in seconds; when set it takes precedence over GAP
TIME_LIMIT: float | None = None
