"""Life in Weeks Tools Module.

This module contains deterministic, side-effect-free helpers.

Tools:
    calc_current_age_years: Fractional age from a birth date.
    weeks_for_years: Scalar week count (52.1775 weeks per year).
    percentage_lived: Share of the estimated lifespan already lived.
    normalize_provider_milestone: Provider milestone -> Milestone.
    normalize_custom_milestone: User goal -> Milestone.
    provider_or_fallback_milestones: Provider milestones or the fixed fallback set.
    aggregate_milestones: Stable chronological merge of milestone groups.
    build_timeline: Provider-or-fallback + cultural + custom, sorted.
"""
from tools.life_metrics import (
    calc_current_age_years,
    weeks_for_years,
    percentage_lived,
)
from tools.milestones import (
    CULTURAL_MILESTONES,
    FALLBACK_MILESTONES,
    normalize_provider_milestone,
    normalize_custom_milestone,
    provider_or_fallback_milestones,
    aggregate_milestones,
    build_timeline,
)

__all__ = [
    "calc_current_age_years",
    "weeks_for_years",
    "percentage_lived",
    "CULTURAL_MILESTONES",
    "FALLBACK_MILESTONES",
    "normalize_provider_milestone",
    "normalize_custom_milestone",
    "provider_or_fallback_milestones",
    "aggregate_milestones",
    "build_timeline",
]
