"""Life in Weeks - terminal edition

Composition root: the only place that reads settings, builds the Gemini
model and wires provider -> estimator -> submission controller.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from config.llm import get_gemini_model
from config.settings import GEMINI_MODEL_NAME, GOOGLE_API_KEY
from core.observability import get_metrics_summary
from models.life import COMMON_GLYPHS, LifeExpectancyResult
from agents.estimator import LifeExpectancyEstimator
from agents.provider import GeminiEstimationProvider
from services.grid_layout import Decade, TemporalBucket, legend
from services.submission import SubmissionController, SubmissionOutcome
from tools.life_metrics import percentage_lived

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "Disclaimer: This tool is for entertainment and informational purposes only. "
    "The life expectancy and milestones generated are estimates based on general "
    "statistical data and AI analysis. They do not constitute medical advice, "
    "diagnosis, or prognosis."
)

# Terminal cells
PAST_CELL = "■"
CURRENT_CELL = "◉"
FUTURE_CELL = "□"


class LifeWeeksSystem:
    """
    Wires the estimation pipeline.

    Attributes:
        provider: GeminiEstimationProvider, or None without an API key.
        estimator: LifeExpectancyEstimator using that provider.
        controller: SubmissionController guarding against concurrent submissions.
    """

    def __init__(self, model=None, api_key: Optional[str] = GOOGLE_API_KEY,
                 model_name: str = GEMINI_MODEL_NAME):
        if model is None:
            model = get_gemini_model(model_name=model_name, api_key=api_key)
        self.provider = GeminiEstimationProvider(model) if model else None
        self.estimator = LifeExpectancyEstimator(provider=self.provider)
        self.controller = SubmissionController(self.estimator)

    async def submit(self, form: Dict[str, Any]) -> SubmissionOutcome:
        outcome = await self.controller.submit(form)
        logger.info(f"Submission finished. Metrics: {get_metrics_summary()}")
        return outcome


def render_grid(decades: Tuple[Decade, ...]) -> str:
    """One text line per year; a milestone's glyph replaces its cell."""
    lines: List[str] = []
    for decade in decades:
        lines.append("")
        for row in decade.rows:
            cells = []
            for cell in row.weeks:
                if cell.glyph:
                    cells.append(cell.glyph)
                elif cell.temporal_bucket is TemporalBucket.CURRENT:
                    cells.append(CURRENT_CELL)
                elif cell.temporal_bucket is TemporalBucket.PAST:
                    cells.append(PAST_CELL)
                else:
                    cells.append(FUTURE_CELL)
            label = f"{row.age_years:>3}" if row.age_years == decade.start_age else "   "
            lines.append(f"{label} {''.join(cells)}")
    return "\n".join(lines)


def render_dashboard(result: LifeExpectancyResult, decades: Tuple[Decade, ...]) -> str:
    percent = percentage_lived(result.weeks_lived, result.total_weeks)
    stages, markers = legend(result)

    out = [
        "=== Life in Weeks ===",
        f"Projected Horizon: {result.estimated_age_years} years",
        f"Completed: {percent if percent is not None else '?'}%",
        f"Weeks Lived: {result.weeks_lived:,}",
        f"Weeks Left: {result.remaining_weeks:,}",
        "",
        f'Actuarial Analysis: "{result.analysis}"',
        "Optimization Protocol:",
    ]
    out += [f"  ✦ {tip}" for tip in result.health_tips]
    out.append("")
    out.append("Life Stages: " + " | ".join(entry.label for entry in stages))
    out.append("Key Markers & Goals:")
    out += [f"  {entry.glyph} {entry.label}" for entry in markers]
    out.append(render_grid(decades))
    out.append("")
    out.append(DISCLAIMER)
    return "\n".join(out)


def prompt_form() -> Dict[str, Any]:
    """Collect the form fields from stdin. Blank answers mean 'not provided'."""
    form: Dict[str, Any] = {
        "birth_date": input("Birth date (YYYY-MM-DD): "),
        "gender": input("Gender [male/female/other]: "),
        "ethnicity": input("Ethnicity (optional): "),
        "activity_level": input("Activity [sedentary/moderate/active/athlete]: "),
        "height_cm": input("Height cm (optional): "),
        "weight_kg": input("Weight kg (optional): "),
        "blood_pressure_sys": input("Blood pressure systolic (optional): "),
        "blood_pressure_dia": input("Blood pressure diastolic (optional): "),
        "blood_sugar": input("Blood sugar mg/dL (optional): "),
        "custom_milestones": [],
    }
    print(f"Add personal goals (blank title to finish). Glyph ideas: {' '.join(COMMON_GLYPHS)}")
    while True:
        title = input("  Goal title: ").strip()
        if not title:
            break
        form["custom_milestones"].append({
            "title": title,
            "age": input("  At age: "),
            "glyph": input("  Glyph (default 🎯): "),
        })
    return form


def main():
    print("=== Life in Weeks ===")
    if not GOOGLE_API_KEY:
        print("GOOGLE_API_KEY not found: showing the global-average estimate.")

    system = LifeWeeksSystem()
    outcome = asyncio.run(system.submit(prompt_form()))

    if not outcome.ok:
        print(f"⚠️  {outcome.error}")
        return
    print(render_dashboard(outcome.result, outcome.decades))


if __name__ == "__main__":
    main()
