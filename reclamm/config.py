"""Parameter bounds for reClAMM pools."""

from dataclasses import dataclass

from reclamm.constants import SECONDS_PER_DAY
from reclamm.math.fixed_point import ONE_18


@dataclass(frozen=True)
class ReClammPoolConfig:
    """Centralized bounds for pool parameters.

    Governance setters and the initializer validate against these values;
    the engine itself only assumes they were respected. Keeping them in one
    place makes it easy to test alternative bounds.

    Attributes:
        max_centeredness_margin: Upper bound for the centeredness margin (90%)
        max_daily_price_shift_exponent: Upper bound for the daily price shift
            rate (100%, the range doubles or halves in a day)
        min_price_ratio_update_duration: Shortest allowed price ratio update, in seconds
        max_daily_price_ratio_update_rate: Largest factor by which the price
            ratio may grow or shrink per day during an update (2x)
        min_fourth_root_price_ratio: Smallest allowed fourth root of the price ratio
    """

    max_centeredness_margin: int = 90 * 10**16
    max_daily_price_shift_exponent: int = 100 * 10**16
    min_price_ratio_update_duration: int = SECONDS_PER_DAY
    max_daily_price_ratio_update_rate: int = 2 * ONE_18
    min_fourth_root_price_ratio: int = ONE_18 + 1


DEFAULT_POOL_CONFIG = ReClammPoolConfig()
