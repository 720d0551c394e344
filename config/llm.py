"""LLM Configuration for the Life in Weeks system.

This module handles Gemini model initialization with appropriate safety settings.
The returned model is handed to the estimation provider by the composition root.
"""
import logging
from typing import Optional
import google.generativeai as genai
from config.settings import GOOGLE_API_KEY, GEMINI_MODEL_NAME

logger = logging.getLogger(__name__)

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]


def get_gemini_model(model_name: str = GEMINI_MODEL_NAME, api_key: Optional[str] = GOOGLE_API_KEY):
    """
    Configures and returns a Gemini model instance.

    Args:
        model_name: Gemini model to use (default: GEMINI_MODEL_NAME from settings)
        api_key: Google API key (default: GOOGLE_API_KEY from settings)

    Returns:
        GenerativeModel instance or None if API key is missing.
    """
    if not api_key:
        logger.warning("GOOGLE_API_KEY not set. Estimates will use the fallback result.")
        return None

    genai.configure(api_key=api_key)

    model = genai.GenerativeModel(
        model_name=model_name,
        safety_settings=SAFETY_SETTINGS,
    )
    logger.info(f"Gemini model ready: {model_name}")
    return model
