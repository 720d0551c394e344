"""Life in Weeks Estimation Module.

This module contains the estimation provider and the fail-closed façade in
front of it.

Components:
    GeminiEstimationProvider: Asks Gemini for a structured life-expectancy payload.
    LifeExpectancyEstimator: Computes week counts, applies fallbacks, merges milestones.
"""
from agents.provider import (
    EstimationProvider,
    EstimationRequest,
    GeminiEstimationProvider,
    ProviderError,
)
from agents.estimator import LifeExpectancyEstimator, resolve_payload

__all__ = [
    "EstimationProvider",
    "EstimationRequest",
    "GeminiEstimationProvider",
    "ProviderError",
    "LifeExpectancyEstimator",
    "resolve_payload",
]
