"""LifeExpectancyEstimator - fail-closed estimation façade

Turns a UserInput into a LifeExpectancyResult:
    1. Computes the current age (365.25-day years) and weeks lived.
    2. Awaits the injected estimation provider exactly once.
    3. On any provider failure, builds the full fallback result.
    4. Otherwise defaults each missing/invalid payload field on its own
       (resolve_payload).
    5. Merges provider-or-fallback, cultural and custom milestones.

Only InputError leaves estimate(); every provider problem ends in a
renderable result.
"""
from typing import Callable, Optional, Sequence, Tuple
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
import logging
import math

from config.settings import (
    FALLBACK_AGE_YEARS,
    FUTURE_STAGE_COLOR,
    MAX_ESTIMATED_AGE_YEARS,
    PAST_STAGE_COLOR,
    STAGE_PALETTE,
)
from core.observability import Tracer
from models.life import (
    InputError,
    LifeExpectancyResult,
    LifeStage,
    MilestonePayload,
    ProviderPayload,
    StagePayload,
    UserInput,
)
from tools.life_metrics import calc_current_age_years, weeks_for_years
from tools.milestones import build_timeline
from agents.provider import EstimationProvider, EstimationRequest, ProviderError

logger = logging.getLogger(__name__)

# Partial payload defaults
DEFAULT_ANALYSIS = "Based on general population averages."
DEFAULT_HEALTH_TIPS = ("Maintain a balanced diet.", "Exercise regularly.", "Get enough sleep.")

# Full fallback (provider unavailable or unusable)
FALLBACK_ANALYSIS = "Could not generate precise estimate. Using global average."
FALLBACK_HEALTH_TIPS = ("Focus on cardio.", "Reduce sugar intake.", "Stay hydrated.")


def default_life_stages(estimated_age: int) -> Tuple[LifeStage, ...]:
    """Canonical three-stage partition used when the provider sends none."""
    return (
        LifeStage("Youth", 0, 18, "#22d3ee", "Learning & Growth"),
        LifeStage("Prime", 19, 60, "#facc15", "Building & Creating"),
        LifeStage("Wisdom", 61, estimated_age, "#f472b6", "Reflection & Legacy"),
    )


def fallback_life_stages(current_age_years: float) -> Tuple[LifeStage, ...]:
    """Past / Future split at the current whole age."""
    lived = math.floor(current_age_years)
    return (
        LifeStage("Past", 0, lived, PAST_STAGE_COLOR, "Time already lived"),
        LifeStage("Future", lived, FALLBACK_AGE_YEARS, FUTURE_STAGE_COLOR, "Time remaining"),
    )


def resolve_estimated_age(value: Optional[int]) -> int:
    """Provider estimate if it is a plausible human age, else the fallback.

    Estimates above MAX_ESTIMATED_AGE_YEARS count as unusable, same as
    missing or non-positive ones.
    """
    if value is None or value <= 0 or value > MAX_ESTIMATED_AGE_YEARS:
        return FALLBACK_AGE_YEARS
    return value


def resolve_life_stages(
    stages: Optional[Sequence[StagePayload]], estimated_age: int
) -> Tuple[LifeStage, ...]:
    """Provider stages with palette colors filled in by position.

    Position is the index in the provider's list, dropped stages included.
    Stages without both ages are dropped; if nothing is left the canonical
    partition is used. Overlaps and gaps are kept as sent.
    """
    usable = [(index, s) for index, s in enumerate(stages or ()) if s.is_usable]
    if not usable:
        return default_life_stages(estimated_age)
    return tuple(
        LifeStage(
            name=s.name or f"Stage {index + 1}",
            start_age=s.start_age,
            end_age=s.end_age,
            color=s.color or STAGE_PALETTE[index % len(STAGE_PALETTE)],
            description=s.description or "",
        )
        for index, s in usable
    )


@dataclass(frozen=True)
class ResolvedPayload:
    """A ProviderPayload with every field decided."""
    estimated_age: int
    analysis: str
    health_tips: Tuple[str, ...]
    life_stages: Tuple[LifeStage, ...]
    milestones: Optional[Tuple[MilestonePayload, ...]]


def resolve_payload(payload: ProviderPayload) -> ResolvedPayload:
    """Apply every per-field default in one place.

    Milestones stay raw here: choosing between provider and fallback
    milestones is part of the timeline merge (tools.milestones).
    """
    estimated_age = resolve_estimated_age(payload.estimated_age)
    return ResolvedPayload(
        estimated_age=estimated_age,
        analysis=payload.analysis or DEFAULT_ANALYSIS,
        health_tips=payload.health_tips or DEFAULT_HEALTH_TIPS,
        life_stages=resolve_life_stages(payload.life_stages, estimated_age),
        milestones=payload.milestones,
    )


class LifeExpectancyEstimator:
    """
    Fail-closed estimation façade.

    Args:
        provider: EstimationProvider used for the one awaited call per
            estimate. None means "not configured": every estimate is the
            fallback result.
        clock: Returns "now". Injected so week counts are reproducible.
    """

    def __init__(
        self,
        provider: Optional[EstimationProvider] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.provider = provider
        self.clock = clock

    async def estimate(self, user_input: UserInput) -> LifeExpectancyResult:
        """
        Raises:
            InputError: birth date missing or not in the past.
        """
        if user_input is None or user_input.birth_date is None:
            raise InputError("Birth date is required")

        current_age = calc_current_age_years(user_input.birth_date, self.clock())
        if current_age <= 0:
            raise InputError("Birth date must be in the past")

        request = EstimationRequest.from_user_input(user_input, current_age)

        with Tracer("EstimationProvider", f"age={current_age:.1f}") as trace:
            payload = await self._fetch_payload(request)
            trace.used_fallback = payload is None

        if payload is None:
            return self._fallback_result(user_input, current_age)
        return self._assemble(user_input, current_age, payload)

    async def _fetch_payload(self, request: EstimationRequest) -> Optional[ProviderPayload]:
        """One provider call. None means "use the full fallback"."""
        if not self.provider:
            logger.warning("No estimation provider configured, using fallback result.")
            return None

        try:
            raw = await self.provider.estimate(request)
            if not isinstance(raw, Mapping):
                raise ProviderError(f"Provider returned {type(raw).__name__}, expected a mapping")
            return ProviderPayload.from_json(raw)
        except Exception as e:
            logger.error(f"Estimation provider failed, using fallback: {e}", exc_info=True)
            return None

    def _assemble(
        self, user_input: UserInput, current_age: float, payload: ProviderPayload
    ) -> LifeExpectancyResult:
        resolved = resolve_payload(payload)
        milestones = build_timeline(resolved.milestones, user_input.custom_milestones)

        logger.info(
            f"Estimate: {resolved.estimated_age}y, {len(resolved.life_stages)} stages, "
            f"{len(milestones)} milestones"
        )
        return LifeExpectancyResult(
            estimated_age_years=resolved.estimated_age,
            weeks_lived=weeks_for_years(current_age),
            total_weeks=weeks_for_years(resolved.estimated_age),
            analysis=resolved.analysis,
            health_tips=resolved.health_tips,
            life_stages=resolved.life_stages,
            milestones=milestones,
        )

    def _fallback_result(self, user_input: UserInput, current_age: float) -> LifeExpectancyResult:
        """Deterministic, provider-independent result."""
        return LifeExpectancyResult(
            estimated_age_years=FALLBACK_AGE_YEARS,
            weeks_lived=weeks_for_years(current_age),
            total_weeks=weeks_for_years(FALLBACK_AGE_YEARS),
            analysis=FALLBACK_ANALYSIS,
            health_tips=FALLBACK_HEALTH_TIPS,
            life_stages=fallback_life_stages(current_age),
            milestones=build_timeline(None, user_input.custom_milestones),
            used_fallback=True,
        )
