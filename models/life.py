import math
from typing import Any, Dict, List, Mapping, Optional, Tuple
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class InputError(ValueError):
    """User input that cannot be estimated (e.g. a missing birth date)."""


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(Enum):
    SEDENTARY = "sedentary"
    MODERATE = "moderate"
    ACTIVE = "active"
    ATHLETE = "athlete"


# Glyphs offered by the custom milestone picker
COMMON_GLYPHS = ("🏠", "🎓", "💍", "👶", "🚀", "💰", "🌍", "🏆", "🏔️", "🎸", "📚", "🏥", "🐕")
DEFAULT_CUSTOM_GLYPH = "🎯"

NUMERIC_FIELDS = (
    "height_cm",
    "weight_kg",
    "blood_pressure_sys",
    "blood_pressure_dia",
    "blood_sugar",
)


def _parse_number(name: str, value: Any) -> Optional[float]:
    """Form numbers: '' / None mean absent, anything else must be finite and >= 0."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise InputError(f"{name} must be a number")
    try:
        number = float(value)
    except (ValueError, TypeError):
        raise InputError(f"{name} must be a number")
    if not math.isfinite(number) or number < 0:
        raise InputError(f"{name} must be a finite non-negative number")
    return number


def _parse_birth_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise InputError("Birth date is required")
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InputError(f"Birth date must be YYYY-MM-DD, got {value!r}")


def _parse_enum(enum_cls, value: Any, default):
    if value is None or value == "":
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InputError(f"Unknown {enum_cls.__name__} {value!r} (expected one of: {allowed})")


def _milestone_text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InputError(f"Milestone {key} must be text, got {value!r}")
    return value.strip()


@dataclass(frozen=True)
class CustomMilestone:
    """A personal goal entered by the user."""
    title: str
    age: int
    glyph: str = DEFAULT_CUSTOM_GLYPH

    def __post_init__(self):
        if isinstance(self.age, bool) or not isinstance(self.age, int) or self.age < 0:
            raise InputError(f"Milestone age must be a non-negative whole number, got {self.age!r}")


@dataclass(frozen=True)
class UserInput:
    """Everything the form collects before an estimation."""
    birth_date: date
    ethnicity: Optional[str] = None
    gender: Gender = Gender.OTHER
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    blood_pressure_sys: Optional[float] = None
    blood_pressure_dia: Optional[float] = None
    blood_sugar: Optional[float] = None          # mg/dL
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    custom_milestones: Tuple[CustomMilestone, ...] = ()

    def __post_init__(self):
        for name in NUMERIC_FIELDS:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _parse_number(name, value))

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "UserInput":
        """Build a UserInput from raw form values.

        Empty strings mean "not provided". Custom milestone rows without both a
        title and an age are skipped, the same way the form's add button
        ignores them.

        Raises:
            InputError: missing/invalid birth date, unknown enum value, a
                negative/non-numeric measurement, or a malformed milestone row.
        """
        custom: List[CustomMilestone] = []
        for row in form.get("custom_milestones") or []:
            if not isinstance(row, Mapping):
                raise InputError(f"Milestone entry must be a mapping, got {row!r}")
            title = _milestone_text(row, "title")
            age = row.get("age")
            if not title or age is None or age == "":
                continue
            age_value = _parse_number("milestone age", age)
            if age_value is None or age_value != int(age_value):
                raise InputError(f"Milestone age must be a whole number, got {age!r}")
            custom.append(CustomMilestone(
                title=title,
                age=int(age_value),
                glyph=_milestone_text(row, "glyph"),
            ))

        ethnicity = form.get("ethnicity")
        return cls(
            birth_date=_parse_birth_date(form.get("birth_date")),
            ethnicity=ethnicity.strip() if isinstance(ethnicity, str) and ethnicity.strip() else None,
            gender=_parse_enum(Gender, form.get("gender"), Gender.OTHER),
            height_cm=_parse_number("height_cm", form.get("height_cm")),
            weight_kg=_parse_number("weight_kg", form.get("weight_kg")),
            blood_pressure_sys=_parse_number("blood_pressure_sys", form.get("blood_pressure_sys")),
            blood_pressure_dia=_parse_number("blood_pressure_dia", form.get("blood_pressure_dia")),
            blood_sugar=_parse_number("blood_sugar", form.get("blood_sugar")),
            activity_level=_parse_enum(ActivityLevel, form.get("activity_level"), ActivityLevel.MODERATE),
            custom_milestones=tuple(custom),
        )


@dataclass(frozen=True)
class Milestone:
    """A titled event anchored to a whole age. age_years is the only sort key."""
    age_years: int
    title: str
    glyph: str
    description: str = ""


@dataclass(frozen=True)
class LifeStage:
    name: str
    start_age: int
    end_age: int
    color: str
    description: str = ""

    def contains(self, age_years: int) -> bool:
        return self.start_age <= age_years <= self.end_age


@dataclass(frozen=True)
class LifeExpectancyResult:
    """Built once per estimation, read-only afterwards."""
    estimated_age_years: int
    weeks_lived: int
    total_weeks: int
    analysis: str
    health_tips: Tuple[str, ...]
    life_stages: Tuple[LifeStage, ...]
    milestones: Tuple[Milestone, ...]
    used_fallback: bool = False

    @property
    def remaining_weeks(self) -> int:
        # Negative once the estimate has been outlived
        return self.total_weeks - self.weeks_lived


def _as_int(value: Any) -> Optional[int]:
    """Whole numbers only; JSON floats like 82.0 are accepted, 82.5 is not."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return None


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


@dataclass(frozen=True)
class StagePayload:
    name: Optional[str] = None
    start_age: Optional[int] = None
    end_age: Optional[int] = None
    color: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        return self.start_age is not None and self.end_age is not None


@dataclass(frozen=True)
class MilestonePayload:
    age: Optional[int] = None
    title: Optional[str] = None
    glyph: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        return self.title is not None and self.age is not None and self.age >= 0


@dataclass(frozen=True)
class ProviderPayload:
    """What the estimation provider sent back. Any field may be None.

    None means the field was absent or had the wrong type; deciding what to
    use instead belongs to the estimator.
    """
    estimated_age: Optional[int] = None
    analysis: Optional[str] = None
    health_tips: Optional[Tuple[str, ...]] = None
    life_stages: Optional[Tuple[StagePayload, ...]] = None
    milestones: Optional[Tuple[MilestonePayload, ...]] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ProviderPayload":
        tips = data.get("healthTips")
        stages = data.get("lifeStages")
        milestones = data.get("milestones")
        return cls(
            estimated_age=_as_int(data.get("estimatedAge")),
            analysis=_as_text(data.get("analysis")),
            health_tips=(
                tuple(t.strip() for t in tips if isinstance(t, str) and t.strip())
                if isinstance(tips, list) else None
            ),
            life_stages=(
                tuple(_stage_from_json(s) for s in stages if isinstance(s, dict))
                if isinstance(stages, list) else None
            ),
            milestones=(
                tuple(_milestone_from_json(m) for m in milestones if isinstance(m, dict))
                if isinstance(milestones, list) else None
            ),
        )


def _stage_from_json(data: Dict[str, Any]) -> StagePayload:
    return StagePayload(
        name=_as_text(data.get("stage")) or _as_text(data.get("name")),
        start_age=_as_int(data.get("startAge")),
        end_age=_as_int(data.get("endAge")),
        color=_as_text(data.get("color")),
        description=_as_text(data.get("description")),
    )


def _milestone_from_json(data: Dict[str, Any]) -> MilestonePayload:
    return MilestonePayload(
        age=_as_int(data.get("age")),
        title=_as_text(data.get("title")),
        glyph=_as_text(data.get("emoji")) or _as_text(data.get("glyph")),
        description=_as_text(data.get("description")),
    )
