"""Fixed-point primitives for reClAMM calculations.

- Bfp: 18-decimal fixed-point arithmetic with explicit rounding
- Rounding: rounding-direction selector
"""

from reclamm.math.fixed_point import ONE_18, ONE_36, Bfp, Rounding, pow_raw, sqrt_36

__all__ = ["Bfp", "Rounding", "ONE_18", "ONE_36", "pow_raw", "sqrt_36"]
