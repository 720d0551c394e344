"""Life in Weeks Data Models.

This module contains frozen dataclasses for inputs, provider payloads and results.

Models:
    UserInput: Birth date, demographics, biometrics and personal goals.
    CustomMilestone: A personal goal row from the form.
    Milestone: A titled event anchored to a whole age.
    LifeStage: A named, colored age range.
    LifeExpectancyResult: The estimation result consumed by the grid.
    ProviderPayload: Partial, typed view of the estimation provider response.
    InputError: Raised for input that cannot be estimated.
"""
from models.life import (
    ActivityLevel,
    COMMON_GLYPHS,
    CustomMilestone,
    Gender,
    InputError,
    LifeExpectancyResult,
    LifeStage,
    Milestone,
    MilestonePayload,
    ProviderPayload,
    StagePayload,
    UserInput,
)

__all__ = [
    "ActivityLevel",
    "COMMON_GLYPHS",
    "CustomMilestone",
    "Gender",
    "InputError",
    "LifeExpectancyResult",
    "LifeStage",
    "Milestone",
    "MilestonePayload",
    "ProviderPayload",
    "StagePayload",
    "UserInput",
]
