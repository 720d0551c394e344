"""Unit Tests for the LifeExpectancyEstimator.

The estimation provider is replaced by small in-test fakes, so no API key is
needed.

Run with: pytest tests/ -v
"""
import asyncio
from datetime import date, datetime, time, timedelta

import pytest

from agents.estimator import (
    DEFAULT_ANALYSIS,
    DEFAULT_HEALTH_TIPS,
    FALLBACK_ANALYSIS,
    FALLBACK_HEALTH_TIPS,
    LifeExpectancyEstimator,
    default_life_stages,
    resolve_estimated_age,
    resolve_payload,
)
from config.settings import STAGE_PALETTE
from models.life import CustomMilestone, InputError, ProviderPayload, UserInput
from tools.milestones import CULTURAL_MILESTONES, FALLBACK_MILESTONES, PLACEHOLDER_GLYPH

BIRTH = date(1990, 6, 15)
# Exactly 30.00 years of 365.25 days after BIRTH
THIRTY_YEARS_LATER = datetime.combine(BIRTH, time()) + timedelta(days=30 * 365.25)


class StaticProvider:
    """Returns a canned payload and remembers every request."""

    def __init__(self, payload):
        self.payload = payload
        self.requests = []

    async def estimate(self, request):
        self.requests.append(request)
        return self.payload


class FailingProvider:
    def __init__(self, error=ConnectionError("network down")):
        self.error = error
        self.calls = 0

    async def estimate(self, request):
        self.calls += 1
        raise self.error


def full_payload(**overrides):
    payload = {
        "estimatedAge": 84,
        "analysis": "Healthy habits push your horizon past the average.",
        "healthTips": ["Walk daily.", "Sleep eight hours.", "Eat more fiber."],
        "lifeStages": [
            {"stage": "Youth", "startAge": 0, "endAge": 20, "color": "#111111", "description": "Growing"},
            {"stage": "Prime", "startAge": 21, "endAge": 60, "color": "#222222", "description": "Building"},
        ],
        "milestones": [
            {"age": 25, "title": "Frontal Lobe Maturity", "emoji": "🧠", "description": "Prefrontal cortex finishes maturing."},
        ],
    }
    payload.update(overrides)
    return payload


def run_estimate(provider, user_input=None, now=THIRTY_YEARS_LATER):
    estimator = LifeExpectancyEstimator(provider=provider, clock=lambda: now)
    return asyncio.run(estimator.estimate(user_input or UserInput(birth_date=BIRTH)))


class TestWeekArithmetic:
    """Week counts use floor(years * 52.1775)."""

    def test_thirty_years_with_eighty_year_estimate(self):
        """30.00 years lived, 80 estimated -> 1565 / 4174 / 2609."""
        result = run_estimate(StaticProvider(full_payload(estimatedAge=80)))
        assert result.weeks_lived == 1565
        assert result.total_weeks == 4174
        assert result.remaining_weeks == 2609

    def test_fallback_has_same_week_counts(self):
        """The fallback result also uses 80 years."""
        result = run_estimate(FailingProvider())
        assert (result.weeks_lived, result.total_weeks, result.remaining_weeks) == (1565, 4174, 2609)

    @pytest.mark.parametrize("birth", [date(1950, 1, 1), date(2000, 2, 29), date(2025, 12, 31)])
    def test_counts_are_consistent(self, birth):
        """remaining_weeks is always total - lived and counts are non-negative."""
        result = run_estimate(StaticProvider(full_payload()), UserInput(birth_date=birth),
                              now=datetime(2026, 1, 1, 12, 0))
        assert result.weeks_lived >= 0
        assert result.total_weeks >= 0
        assert result.remaining_weeks == result.total_weeks - result.weeks_lived

    def test_outliving_the_estimate_gives_negative_remaining(self):
        """An estimate below the current age is a valid, displayable state."""
        result = run_estimate(StaticProvider(full_payload(estimatedAge=20)))
        assert result.estimated_age_years == 20
        assert result.remaining_weeks < 0

    def test_request_carries_current_age(self):
        """The provider sees the fractional current age."""
        provider = StaticProvider(full_payload())
        run_estimate(provider)
        assert len(provider.requests) == 1
        assert provider.requests[0].current_age_years == pytest.approx(30.0)
        assert provider.requests[0].gender == "other"
        assert provider.requests[0].activity_level == "moderate"


class TestFallbackResult:
    """Provider failures resolve into the deterministic fallback result."""

    def test_provider_exception(self):
        """A raising provider yields age 80 and the two-stage partition."""
        provider = FailingProvider()
        result = run_estimate(provider)

        assert provider.calls == 1  # no retries
        assert result.used_fallback
        assert result.estimated_age_years == 80
        assert result.analysis == FALLBACK_ANALYSIS
        assert result.health_tips == FALLBACK_HEALTH_TIPS
        assert [(s.name, s.start_age, s.end_age) for s in result.life_stages] == [
            ("Past", 0, 30),
            ("Future", 30, 80),
        ]

    def test_fallback_milestones(self):
        """Fallback biology + all cultural milestones, chronologically."""
        result = run_estimate(FailingProvider())
        titles = {m.title for m in result.milestones}
        assert {m.title for m in FALLBACK_MILESTONES} <= titles
        assert {m.title for m in CULTURAL_MILESTONES} <= titles
        assert len(result.milestones) == len(FALLBACK_MILESTONES) + len(CULTURAL_MILESTONES)

    def test_no_provider_configured(self):
        """provider=None goes straight to the fallback."""
        result = run_estimate(None)
        assert result.used_fallback
        assert result.estimated_age_years == 80

    def test_non_mapping_payload(self):
        """A list instead of an object counts as unparseable."""
        result = run_estimate(StaticProvider(["not", "an", "object"]))
        assert result.used_fallback
        assert result.analysis == FALLBACK_ANALYSIS

    def test_fallback_is_deterministic(self):
        """Two failures give identical results."""
        assert run_estimate(FailingProvider()) == run_estimate(FailingProvider(ValueError("bad json")))


class TestPartialPayload:
    """Each missing field is defaulted on its own."""

    def test_missing_health_tips_only(self):
        """Missing healthTips -> generic tips, everything else untouched."""
        payload = full_payload()
        del payload["healthTips"]
        result = run_estimate(StaticProvider(payload))

        assert result.health_tips == DEFAULT_HEALTH_TIPS
        assert len(result.health_tips) == 3
        assert result.estimated_age_years == 84
        assert result.analysis == "Healthy habits push your horizon past the average."
        assert [s.color for s in result.life_stages] == ["#111111", "#222222"]
        assert not result.used_fallback

    def test_empty_health_tips(self):
        assert run_estimate(StaticProvider(full_payload(healthTips=[]))).health_tips == DEFAULT_HEALTH_TIPS

    def test_missing_analysis(self):
        payload = full_payload()
        del payload["analysis"]
        assert run_estimate(StaticProvider(payload)).analysis == DEFAULT_ANALYSIS

    @pytest.mark.parametrize("bad_age", [None, 0, -5, "eighty", 82.5, 500, True])
    def test_invalid_estimated_age(self, bad_age):
        """Unusable ages fall back to 80."""
        result = run_estimate(StaticProvider(full_payload(estimatedAge=bad_age)))
        assert result.estimated_age_years == 80
        assert result.total_weeks == 4174

    def test_missing_life_stages(self):
        """No stages -> Youth / Prime / Wisdom up to the estimated age."""
        result = run_estimate(StaticProvider(full_payload(lifeStages=[])))
        assert result.life_stages == default_life_stages(84)
        assert result.life_stages[-1].end_age == 84

    def test_stage_colors_from_palette(self):
        """Stages without color get the palette color for their position."""
        stages = [{"stage": f"S{i}", "startAge": i * 10, "endAge": i * 10 + 9} for i in range(6)]
        stages[1]["color"] = "#abcdef"
        result = run_estimate(StaticProvider(full_payload(lifeStages=stages)))

        colors = [s.color for s in result.life_stages]
        assert colors[0] == STAGE_PALETTE[0]
        assert colors[1] == "#abcdef"
        assert colors[2] == STAGE_PALETTE[2]
        assert colors[5] == STAGE_PALETTE[0]  # wraps after 5

    def test_dropped_stage_keeps_later_colors(self):
        """Palette index counts the dropped stage too."""
        stages = [
            {"stage": "NoAges"},
            {"stage": "Youth", "startAge": 0, "endAge": 18},
            {"stage": "Prime", "startAge": 19, "endAge": 60},
        ]
        result = run_estimate(StaticProvider(full_payload(lifeStages=stages)))

        assert [s.name for s in result.life_stages] == ["Youth", "Prime"]
        assert [s.color for s in result.life_stages] == [STAGE_PALETTE[1], STAGE_PALETTE[2]]

    def test_estimate_above_cap_uses_fallback_age(self):
        assert resolve_estimated_age(121) == 80
        assert resolve_estimated_age(120) == 120

    def test_empty_milestones_use_fallback_set(self):
        """Zero provider milestones -> fixed fallback set, never merged."""
        result = run_estimate(StaticProvider(full_payload(milestones=[])))
        assert sum(1 for m in result.milestones if m in FALLBACK_MILESTONES) == len(FALLBACK_MILESTONES)

    def test_provider_milestones_replace_fallback(self):
        """Provider milestones exclude the fallback set."""
        result = run_estimate(StaticProvider(full_payload()))
        assert not any(m in FALLBACK_MILESTONES for m in result.milestones)
        assert any(m.title == "Frontal Lobe Maturity" for m in result.milestones)

    def test_missing_emoji_gets_placeholder(self):
        result = run_estimate(StaticProvider(full_payload(milestones=[{"age": 40, "title": "Midlife"}])))
        midlife = [m for m in result.milestones if m.title == "Midlife"]
        assert midlife[0].glyph == PLACEHOLDER_GLYPH

    def test_resolve_payload_on_empty_payload(self):
        """An empty object defaults every field."""
        resolved = resolve_payload(ProviderPayload())
        assert resolved.estimated_age == 80
        assert resolved.analysis == DEFAULT_ANALYSIS
        assert resolved.health_tips == DEFAULT_HEALTH_TIPS
        assert resolved.life_stages == default_life_stages(80)
        assert resolved.milestones is None


class TestTimeline:
    """Merged milestones are chronological with stable source precedence."""

    def test_sorted_by_age(self):
        result = run_estimate(StaticProvider(full_payload()))
        ages = [m.age_years for m in result.milestones]
        assert all(a <= b for a, b in zip(ages, ages[1:]))

    def test_custom_milestone_between_forty_and_fifty(self):
        """'Climb Everest' at 45 sits after every age <= 45 and before 50."""
        user_input = UserInput(
            birth_date=BIRTH,
            custom_milestones=(CustomMilestone(title="Climb Everest", age=45, glyph="🏔"),),
        )
        result = run_estimate(StaticProvider(full_payload(milestones=[])), user_input)

        titles = [m.title for m in result.milestones]
        everest = titles.index("Climb Everest")
        assert all(m.age_years <= 45 for m in result.milestones[:everest])
        assert all(m.age_years >= 45 for m in result.milestones[everest + 1:])
        assert titles.index("Presbyopia") < everest < titles.index("Cognitive Shift")
        assert result.milestones[everest].description == "Personal Goal"
        assert result.milestones[everest].glyph == "🏔"

    def test_same_age_keeps_source_precedence(self):
        """At age 25: provider first, then the cultural Vivaha, then custom."""
        user_input = UserInput(
            birth_date=BIRTH,
            custom_milestones=(CustomMilestone(title="Start a company", age=25, glyph=""),),
        )
        result = run_estimate(StaticProvider(full_payload()), user_input)

        at_25 = [m.title for m in result.milestones if m.age_years == 25]
        assert at_25 == ["Frontal Lobe Maturity", "Vivaha", "Start a company"]


class TestInputErrors:
    """Input errors are the only exceptions estimate() raises."""

    def test_birth_date_in_future(self):
        provider = StaticProvider(full_payload())
        with pytest.raises(InputError):
            run_estimate(provider, UserInput(birth_date=date(2030, 1, 1)),
                         now=datetime(2026, 1, 1))
        assert provider.requests == []  # estimation not attempted

    def test_birth_date_today(self):
        with pytest.raises(InputError):
            run_estimate(None, UserInput(birth_date=date(2026, 1, 1)),
                         now=datetime(2026, 1, 1))
