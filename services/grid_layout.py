"""Week-Grid Layout Engine

Maps a LifeExpectancyResult onto decades of 52-week rows.

Addressing:
    absolute_week_index = age_years * 52 + week_of_year   (week_of_year 0-51)

The grid is always 52 cells per year, while weeks_lived/total_weeks use
52.1775 weeks per year. The current-week marker therefore drifts about one
cell every 5-6 years relative to the birthday row. Both constants are kept
as they are: reconciling them would move every milestone and marker.

layout() is pure. Lookups go through two indexes built once per call:
    age_years -> first matching LifeStage
    absolute_week_index -> milestones anchored there (aggregation order)
"""
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum
import math

from config.settings import GRID_WEEKS_PER_YEAR, MILESTONE_ANCHOR_WEEK, NEUTRAL_STAGE_COLOR
from models.life import LifeExpectancyResult, LifeStage, Milestone

YEARS_PER_DECADE = 10

CURRENT_WEEK_COLOR = "#1C1917"
FUTURE_WEEK_COLOR = "#fff"
FUTURE_BORDER_COLOR = "#e5e5e5"


class TemporalBucket(Enum):
    PAST = "past"
    CURRENT = "current"
    FUTURE = "future"


@dataclass(frozen=True)
class WeekCell:
    absolute_week_index: int
    age_years: int
    week_of_year: int
    temporal_bucket: TemporalBucket
    stage_color: Optional[str]
    milestones: Tuple[Milestone, ...] = ()

    @property
    def glyph(self) -> Optional[str]:
        """Only the first milestone is drawn; the rest live in the tooltip."""
        return self.milestones[0].glyph if self.milestones else None


@dataclass(frozen=True)
class YearRow:
    age_years: int
    weeks: Tuple[WeekCell, ...]


@dataclass(frozen=True)
class Decade:
    index: int
    start_age: int
    end_age: int
    rows: Tuple[YearRow, ...]

    @property
    def years(self) -> Tuple[int, ...]:
        return tuple(row.age_years for row in self.rows)


@dataclass(frozen=True)
class WeekStyle:
    background: str
    opacity: float
    border: str


@dataclass(frozen=True)
class Tooltip:
    heading: str
    week_label: str
    milestones: Tuple[Milestone, ...]
    status: str


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: Optional[str] = None
    glyph: Optional[str] = None


def absolute_week_index(age_years: int, week_of_year: int) -> int:
    return age_years * GRID_WEEKS_PER_YEAR + week_of_year


def milestone_week_index(milestone: Milestone) -> int:
    return absolute_week_index(milestone.age_years, MILESTONE_ANCHOR_WEEK)


def temporal_bucket(week_index: int, weeks_lived: int) -> TemporalBucket:
    if week_index < weeks_lived:
        return TemporalBucket.PAST
    if week_index == weeks_lived:
        return TemporalBucket.CURRENT
    return TemporalBucket.FUTURE


def decade_bounds(estimated_age_years: int) -> List[Tuple[int, int]]:
    """[(start_age, end_age)] per decade, end inclusive, clipped to the estimate."""
    count = math.ceil(estimated_age_years / YEARS_PER_DECADE)
    bounds = []
    for i in range(count):
        start = i * YEARS_PER_DECADE
        end = min(start + YEARS_PER_DECADE - 1, estimated_age_years - 1)
        bounds.append((start, end))
    return bounds


def build_stage_index(stages: Tuple[LifeStage, ...], max_age: int) -> Dict[int, LifeStage]:
    """age -> first stage containing it. Ages in a gap are simply absent."""
    index: Dict[int, LifeStage] = {}
    for age in range(max_age + 1):
        for stage in stages:
            if stage.contains(age):
                index[age] = stage
                break
    return index


def build_milestone_index(milestones: Tuple[Milestone, ...]) -> Dict[int, Tuple[Milestone, ...]]:
    """absolute week -> milestones anchored there, in aggregation order."""
    grouped: Dict[int, List[Milestone]] = {}
    for milestone in milestones:
        grouped.setdefault(milestone_week_index(milestone), []).append(milestone)
    return {week: tuple(items) for week, items in grouped.items()}


def _stage_color(
    bucket: TemporalBucket, age_years: int, stage_index: Dict[int, LifeStage]
) -> Optional[str]:
    if bucket is TemporalBucket.FUTURE:
        return None
    stage = stage_index.get(age_years)
    return stage.color if stage else NEUTRAL_STAGE_COLOR


def layout(result: LifeExpectancyResult) -> Tuple[Decade, ...]:
    """Decades of 52-week rows with per-week bucket, stage color and milestones.

    Never raises on malformed stage ranges or colliding milestones.
    """
    bounds = decade_bounds(result.estimated_age_years)
    max_age = bounds[-1][1] if bounds else -1
    stage_index = build_stage_index(result.life_stages, max_age)
    milestone_index = build_milestone_index(result.milestones)

    decades = []
    for i, (start_age, end_age) in enumerate(bounds):
        rows = []
        for age in range(start_age, end_age + 1):
            cells = []
            for week in range(GRID_WEEKS_PER_YEAR):
                week_index = absolute_week_index(age, week)
                bucket = temporal_bucket(week_index, result.weeks_lived)
                cells.append(WeekCell(
                    absolute_week_index=week_index,
                    age_years=age,
                    week_of_year=week,
                    temporal_bucket=bucket,
                    stage_color=_stage_color(bucket, age, stage_index),
                    milestones=milestone_index.get(week_index, ()),
                ))
            rows.append(YearRow(age_years=age, weeks=tuple(cells)))
        decades.append(Decade(index=i, start_age=start_age, end_age=end_age, rows=tuple(rows)))
    return tuple(decades)


def week_style(cell: WeekCell) -> WeekStyle:
    """Background / opacity / border per temporal bucket."""
    if cell.temporal_bucket is TemporalBucket.PAST:
        return WeekStyle(cell.stage_color or NEUTRAL_STAGE_COLOR, 0.8, "transparent")
    if cell.temporal_bucket is TemporalBucket.CURRENT:
        return WeekStyle(CURRENT_WEEK_COLOR, 1.0, CURRENT_WEEK_COLOR)
    return WeekStyle(FUTURE_WEEK_COLOR, 1.0, FUTURE_BORDER_COLOR)


_STATUS_LABELS = {
    TemporalBucket.PAST: "Past",
    TemporalBucket.CURRENT: "Present",
    TemporalBucket.FUTURE: "Future",
}


def tooltip(cell: WeekCell) -> Tooltip:
    return Tooltip(
        heading=f"Age {cell.age_years}",
        week_label=f"WK {cell.week_of_year + 1}",
        milestones=cell.milestones,
        status=_STATUS_LABELS[cell.temporal_bucket],
    )


def legend(result: LifeExpectancyResult) -> Tuple[Tuple[LegendEntry, ...], Tuple[LegendEntry, ...]]:
    """(stage entries + the current-week marker, milestone entries)."""
    stages = tuple(LegendEntry(label=s.name, color=s.color) for s in result.life_stages)
    stages += (LegendEntry(label="Current", color=CURRENT_WEEK_COLOR),)
    markers = tuple(LegendEntry(label=m.title, glyph=m.glyph) for m in result.milestones)
    return stages, markers
