from datetime import date, datetime, time
import math
from typing import Optional

from config.settings import DAYS_PER_YEAR, WEEKS_PER_YEAR

SECONDS_PER_DAY = 86400


def calc_current_age_years(birth_date: date, now: datetime) -> float:
    """
    Fractional years elapsed since midnight of birth_date.

    Uses a 365.25-day year. Timezone-aware `now` values are compared in their
    own local wall time.
    """
    born = datetime.combine(birth_date, time())
    if now.tzinfo is not None:
        now = now.replace(tzinfo=None)
    elapsed = (now - born).total_seconds()
    return elapsed / (SECONDS_PER_DAY * DAYS_PER_YEAR)


def weeks_for_years(years: float) -> int:
    """
    floor(years * 52.1775).

    This is the scalar count behind weeks lived / total weeks. The grid itself
    uses exactly 52 weeks per row, so the two drift by ~1.25 days a year.
    """
    return math.floor(years * WEEKS_PER_YEAR)


def percentage_lived(weeks_lived: int, total_weeks: int) -> Optional[float]:
    """
    Share of the estimated lifespan already lived, in percent (1 decimal).

    Returns None when total_weeks is not positive. Values above 100 are kept:
    outliving the estimate is a valid state.
    """
    if total_weeks is None or total_weeks <= 0:
        return None
    return round(weeks_lived / total_weeks * 100, 1)
