"""Unit Tests for milestone normalization and aggregation."""
from models.life import CustomMilestone, Milestone, MilestonePayload
from tools.milestones import (
    CULTURAL_MILESTONES,
    CUSTOM_DESCRIPTION,
    CUSTOM_GLYPH,
    FALLBACK_MILESTONES,
    PLACEHOLDER_GLYPH,
    aggregate_milestones,
    build_timeline,
    normalize_custom_milestone,
    normalize_provider_milestone,
    provider_or_fallback_milestones,
)


class TestFixedCalendars:
    def test_cultural_calendar(self):
        """Sixteen sanskaras spanning ages 0-80."""
        assert len(CULTURAL_MILESTONES) == 16
        assert CULTURAL_MILESTONES[0].age_years == 0
        assert CULTURAL_MILESTONES[-1].age_years == 80
        assert all(m.glyph for m in CULTURAL_MILESTONES)

    def test_fallback_set(self):
        assert len(FALLBACK_MILESTONES) == 8
        assert [m.age_years for m in FALLBACK_MILESTONES] == [25, 30, 35, 45, 50, 60, 65, 70]


class TestNormalize:
    def test_provider_glyph_defaulted(self):
        milestone = normalize_provider_milestone(MilestonePayload(age=45, title="Presbyopia"))
        assert milestone == Milestone(45, "Presbyopia", PLACEHOLDER_GLYPH, "")

    def test_provider_without_title_is_dropped(self):
        assert normalize_provider_milestone(MilestonePayload(age=45)) is None

    def test_custom_defaults(self):
        milestone = normalize_custom_milestone(CustomMilestone("Run a marathon", 35, "  "))
        assert milestone.glyph == CUSTOM_GLYPH
        assert milestone.description == CUSTOM_DESCRIPTION
        assert (milestone.age_years, milestone.title) == (35, "Run a marathon")

    def test_custom_glyph_kept(self):
        assert normalize_custom_milestone(CustomMilestone("Climb Everest", 45, "🏔")).glyph == "🏔"


class TestProviderOrFallback:
    """Provider milestones and the fallback set are mutually exclusive."""

    def test_none_uses_fallback(self):
        assert provider_or_fallback_milestones(None) == FALLBACK_MILESTONES

    def test_empty_uses_fallback(self):
        assert provider_or_fallback_milestones(()) == FALLBACK_MILESTONES

    def test_only_unusable_entries_use_fallback(self):
        assert provider_or_fallback_milestones((MilestonePayload(title="No age"),)) == FALLBACK_MILESTONES

    def test_provider_entries_win(self):
        result = provider_or_fallback_milestones((MilestonePayload(age=27, title="Physical Peak", glyph="💪"),))
        assert result == (Milestone(27, "Physical Peak", "💪", ""),)


class TestAggregate:
    def test_stable_sort(self):
        """Equal ages keep group precedence, then original order."""
        a1, a2 = Milestone(30, "a1", "·"), Milestone(10, "a2", "·")
        b1 = Milestone(30, "b1", "·")
        c1, c2 = Milestone(30, "c1", "·"), Milestone(0, "c2", "·")

        merged = aggregate_milestones([a1, a2], [b1], [c1, c2])
        assert [m.title for m in merged] == ["c2", "a2", "a1", "b1", "c1"]

    def test_adjacent_pairs_ordered(self):
        merged = build_timeline(None, [CustomMilestone("Late goal", 99), CustomMilestone("Early goal", 2)])
        ages = [m.age_years for m in merged]
        assert all(a <= b for a, b in zip(ages, ages[1:]))

    def test_timeline_contains_all_sources(self):
        merged = build_timeline(None, [CustomMilestone("Climb Everest", 45, "🏔")])
        assert len(merged) == len(FALLBACK_MILESTONES) + len(CULTURAL_MILESTONES) + 1

    def test_inputs_not_mutated(self):
        group = [Milestone(5, "x", "·"), Milestone(1, "y", "·")]
        aggregate_milestones(group)
        assert [m.title for m in group] == ["x", "y"]
