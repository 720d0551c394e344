"""Estimation Provider - Gemini-backed life expectancy estimate

This module owns the only network call in the system. The provider is built
by the composition root and injected into the LifeExpectancyEstimator; it
never holds process-wide state of its own.

Wire format (JSON object, every field optional from our point of view):
    estimatedAge: integer years
    analysis: one sentence
    healthTips: [string]
    lifeStages: [{stage, startAge, endAge, color, description}]
    milestones: [{age, title, emoji, description}]
"""
from typing import Any, Dict, Optional, Protocol
from dataclasses import dataclass
import json
import logging

from models.life import UserInput

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """The provider could not produce a JSON object."""


@dataclass(frozen=True)
class EstimationRequest:
    """What the provider gets to see about the user."""
    current_age_years: float
    ethnicity: Optional[str] = None
    gender: Optional[str] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    blood_pressure_sys: Optional[float] = None
    blood_pressure_dia: Optional[float] = None
    blood_sugar: Optional[float] = None
    activity_level: Optional[str] = None

    @classmethod
    def from_user_input(cls, user_input: UserInput, current_age_years: float) -> "EstimationRequest":
        return cls(
            current_age_years=current_age_years,
            ethnicity=user_input.ethnicity,
            gender=user_input.gender.value,
            height_cm=user_input.height_cm,
            weight_kg=user_input.weight_kg,
            blood_pressure_sys=user_input.blood_pressure_sys,
            blood_pressure_dia=user_input.blood_pressure_dia,
            blood_sugar=user_input.blood_sugar,
            activity_level=user_input.activity_level.value,
        )


class EstimationProvider(Protocol):
    async def estimate(self, request: EstimationRequest) -> Dict[str, Any]:
        """Return the decoded JSON object. May raise anything."""
        ...


def build_prompt(request: EstimationRequest) -> str:
    """Actuary-style prompt asking for the JSON described in the module docstring."""
    def fmt(val, missing="?"):
        if val is None:
            return missing
        return f"{val:g}" if isinstance(val, float) else str(val)

    return f"""
Act as a medical actuary and human life analyst.
Based on the following user data, estimate life expectancy and map out significant biological, psychological, and sociological milestones.

User Data:
- Current Age: {request.current_age_years:.1f} years
- Ethnicity: {fmt(request.ethnicity, 'Not specified')}
- Gender: {fmt(request.gender, 'Not specified')}
- BMI Context: Height {fmt(request.height_cm)}cm, Weight {fmt(request.weight_kg)}kg
- Blood Pressure: {fmt(request.blood_pressure_sys)} / {fmt(request.blood_pressure_dia)}
- Blood Sugar: {fmt(request.blood_sugar)} mg/dL
- Activity Level: {fmt(request.activity_level, 'Not specified')}

Task:
1. Estimate life expectancy (integer years) based on health factors.
2. Provide a short, insightful analysis (1 sentence).
3. Give 3 actionable, specific health tips.
4. Define life stages (Youth, Growth, Prime, Wisdom, Legacy) with integer startAge/endAge and a hex color.
5. IDENTIFY MILESTONES (ages are integers). You MUST include these SPECIFIC BIOLOGICAL/SOCIOLOGICAL MARKERS with their corresponding EMOJIS:
   - "Frontal Lobe Maturity" (Brain fully developed, ~25) -> 🧠
   - "Physical Peak" (Max strength/speed, ~27-30) -> 💪
   - "Bone Density Peak" (Peak skeletal mass, ~30) -> 🦴
   - "Sarcopenia Onset" (Muscle mass decline begins, usually ~30-40) -> 📉
   - "Fertility Changes" (Biological shifts, ~35-40) -> 🧬
   - "Presbyopia" (Need reading glasses, ~45) -> 👓
   - "Cognitive Decline Onset" (Processing speed slows, usually ~45-50) -> 🧩
   - "Parental Loss" (Statistical estimate of parents passing, ~50-65) -> 🕯️
   - "Empty Nest" (Kids leaving home, statistical estimate) -> 🐦
   - "Grandparenthood" (~55-65) -> 🍼
   - "Retirement" (~60-67) -> 🌅
   - "Peak Happiness" (U-curve upswing, ~70+) -> 😊

OUTPUT JSON only:
{{
  "estimatedAge": 82,
  "analysis": "...",
  "healthTips": ["...", "...", "..."],
  "lifeStages": [{{"stage": "Youth", "startAge": 0, "endAge": 18, "color": "#22d3ee", "description": "..."}}],
  "milestones": [{{"age": 25, "title": "Frontal Lobe Maturity", "emoji": "🧠", "description": "..."}}]
}}"""


def parse_response_text(text: Optional[str]) -> Dict[str, Any]:
    """Decode the model's text into a JSON object.

    Raises:
        ProviderError: empty text, invalid JSON, or JSON that is not an object.
    """
    if not text or not text.strip():
        raise ProviderError("Empty response from estimation model")

    # Clean up potential markdown formatting
    cleaned = text.replace("```json", "").replace("```", "").strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ProviderError(f"Estimation model returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProviderError(f"Estimation model returned {type(data).__name__}, expected an object")
    return data


class GeminiEstimationProvider:
    """
    Asks Gemini for a structured life-expectancy estimate.

    The model instance comes from config.llm.get_gemini_model(); passing None
    (no API key) makes every call raise ProviderError so the estimator falls
    back immediately. No retries are attempted.
    """

    def __init__(self, model):
        self.model = model

    async def estimate(self, request: EstimationRequest) -> Dict[str, Any]:
        if not self.model:
            raise ProviderError("Gemini model is not configured")

        prompt = build_prompt(request)
        response = await self.model.generate_content_async(
            prompt,
            generation_config={"response_mime_type": "application/json"},
        )
        data = parse_response_text(response.text)
        logger.info(f"GeminiEstimationProvider: payload keys {sorted(data.keys())}")
        return data
