"""Protocol constants for reClAMM pools.

Fixed-point quantities are raw integers scaled by 1e18.
"""

from reclamm.math.fixed_point import ONE_18

SECONDS_PER_DAY = 86_400

# Timestamps are stored as uint32 (safe through year 2106)
MAX_TIMESTAMP = 2**32 - 1

# Calibration constant K between the external daily price shift exponent and
# the internal per-second decay base: base = 1 - exponent / K.
# K = floor(86400 / ln 2), so 100%/day doubles or halves the range in one day:
# (1 - 1/K)^86400 ~= 0.5
PRICE_SHIFT_EXPONENT_INTERNAL_ADJUSTMENT = 124_649

# Reference magnitude of token A used to derive theoretical seeding balances.
# Only ratios derived from it are meaningful.
INITIALIZATION_MAX_BALANCE_A = 1_000_000 * ONE_18

# Relative tolerance when checking seeding balances against the theoretical ratio (0.01%)
BALANCE_RATIO_TOLERANCE = 10**14
