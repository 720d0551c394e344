"""Central Configuration for the Life in Weeks system."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Base Directory (Root of the project)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load Environment Variables
load_dotenv(BASE_DIR / ".env")

# LLM Settings
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GEMINI_MODEL_NAME = os.getenv("GEMINI_MODEL_NAME", "gemini-2.5-flash")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Life Arithmetic
DAYS_PER_YEAR = 365.25        # Julian year, used for current age
WEEKS_PER_YEAR = 52.1775      # 365.2425 / 7, used for weeks lived / total weeks
GRID_WEEKS_PER_YEAR = 52      # Grid rows are always 52 cells wide
MILESTONE_ANCHOR_WEEK = 26    # Mid-year cell a milestone is drawn on

# Estimation Defaults
FALLBACK_AGE_YEARS = 80
MAX_ESTIMATED_AGE_YEARS = 120

# Palette
STAGE_PALETTE = ("#22d3ee", "#4ade80", "#facc15", "#f472b6", "#a78bfa")
NEUTRAL_STAGE_COLOR = "#cbd5e1"
PAST_STAGE_COLOR = "#94a3b8"
FUTURE_STAGE_COLOR = "#e2e8f0"
