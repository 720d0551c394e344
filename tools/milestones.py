"""Milestone normalization and aggregation.

Three sources feed the timeline, merged in this precedence order:
    1. Estimation provider milestones, or FALLBACK_MILESTONES when it sent none
    2. CULTURAL_MILESTONES, always present
    3. The user's custom milestones

All functions here are pure.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

from models.life import CustomMilestone, Milestone, MilestonePayload

PLACEHOLDER_GLYPH = "📍"
CUSTOM_GLYPH = "🎯"
CUSTOM_DESCRIPTION = "Personal Goal"


# Biological / sociological markers used when the provider sends no milestones
FALLBACK_MILESTONES: Tuple[Milestone, ...] = (
    Milestone(25, "Frontal Lobe Maturity", "🧠", "Brain fully developed."),
    Milestone(30, "Physical Peak", "💪", "Peak muscle mass and bone density."),
    Milestone(35, "Sarcopenia", "📉", "Muscle mass naturally begins to decrease."),
    Milestone(45, "Presbyopia", "👓", "Reading glasses often needed."),
    Milestone(50, "Cognitive Shift", "🧩", "Processing speed changes."),
    Milestone(60, "Empty Nest", "🐦", "Children leave home."),
    Milestone(65, "Retirement", "🌅", "Standard retirement age."),
    Milestone(70, "Peak Happiness", "😊", "Happiness U-curve upswing."),
)

# The sixteen Hindu sanskaras (sacraments)
CULTURAL_MILESTONES: Tuple[Milestone, ...] = (
    # Pre-natal
    Milestone(0, "Garbhadhana", "🌱", "The ritual for conception."),
    Milestone(0, "Pumsavana", "🤰", "A ceremony for fetal protection and well-being."),
    Milestone(0, "Simantonnayana", "🙏", "A ritual during pregnancy to ensure mother's and child's well-being."),
    # Childhood
    Milestone(0, "Jatakarma", "👶", "Birth rituals performed immediately after a child is born."),
    Milestone(0, "Namakarana", "📜", "The naming ceremony for the child."),
    Milestone(0, "Nishkramana", "🚪", "The child's first outing from the home."),
    Milestone(1, "Annaprashana", "🍚", "The ceremony for the child's first solid food."),
    Milestone(3, "Chudakarana", "✂️", "The first haircutting ceremony (Mundan)."),
    Milestone(5, "Karnavedha", "💎", "The piercing of the earlobes."),
    # Education
    Milestone(5, "Vidyarambha", "📖", "The initiation into learning the alphabet."),
    Milestone(8, "Upanayana", "🧵", "The sacred thread ceremony."),
    Milestone(12, "Vedarambha", "📿", "The commencement of Vedic studies."),
    Milestone(16, "Keshant", "🪒", "The ceremony for shaving the beard (Godaan)."),
    Milestone(20, "Samavartan", "🎓", "The ritual marking the completion of studentship."),
    # Householder and final rites
    Milestone(25, "Vivaha", "💍", "The marriage ceremony."),
    Milestone(80, "Antyeshti", "🕯️", "The final rites or funeral rituals performed after death."),
)


def normalize_provider_milestone(raw: MilestonePayload) -> Optional[Milestone]:
    """Provider milestone -> Milestone, or None if it has no title or age."""
    if not raw.is_usable:
        return None
    return Milestone(
        age_years=raw.age,
        title=raw.title,
        glyph=raw.glyph or PLACEHOLDER_GLYPH,
        description=raw.description or "",
    )


def normalize_custom_milestone(raw: CustomMilestone) -> Milestone:
    """Age and title verbatim; the description is always the personal-goal tag."""
    return Milestone(
        age_years=raw.age,
        title=raw.title,
        glyph=(raw.glyph or "").strip() or CUSTOM_GLYPH,
        description=CUSTOM_DESCRIPTION,
    )


def provider_or_fallback_milestones(raw: Optional[Sequence[MilestonePayload]]) -> Tuple[Milestone, ...]:
    """Normalized provider milestones, or the fixed fallback set if none survive.

    The two are never mixed.
    """
    normalized = [m for m in (normalize_provider_milestone(r) for r in raw or ()) if m is not None]
    if not normalized:
        return FALLBACK_MILESTONES
    return tuple(normalized)


def aggregate_milestones(*groups: Iterable[Milestone]) -> Tuple[Milestone, ...]:
    """Concatenate groups in precedence order, then stable-sort by age.

    sorted() is stable, so same-age milestones keep source precedence and
    their original order within a source.
    """
    merged: List[Milestone] = []
    for group in groups:
        merged.extend(group)
    return tuple(sorted(merged, key=lambda m: m.age_years))


def build_timeline(
    provider_milestones: Optional[Sequence[MilestonePayload]],
    custom_milestones: Sequence[CustomMilestone] = (),
) -> Tuple[Milestone, ...]:
    """Full chronological timeline: provider-or-fallback, cultural, custom."""
    return aggregate_milestones(
        provider_or_fallback_milestones(provider_milestones),
        CULTURAL_MILESTONES,
        [normalize_custom_milestone(m) for m in custom_milestones],
    )
