"""Submission Controller

Form-facing boundary around the estimator:
- A busy/idle flag rejects a second submission while one is in flight
  (nothing is queued, retried or cancelled).
- InputError becomes a user-facing notice; provider failures never reach
  this layer because the estimator absorbs them.
- Each successful submission gets a fresh result and its grid layout.
"""
from typing import Any, Mapping, Optional, Tuple, Union
from dataclasses import dataclass
import logging

from models.life import InputError, LifeExpectancyResult, UserInput
from agents.estimator import LifeExpectancyEstimator
from services.grid_layout import Decade, layout

logger = logging.getLogger(__name__)

BUSY_NOTICE = "A calculation is already in progress."
GENERIC_NOTICE = "An error occurred while calculating. Please try again."


@dataclass(frozen=True)
class SubmissionOutcome:
    result: Optional[LifeExpectancyResult] = None
    decades: Tuple[Decade, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


class SubmissionController:
    """Runs at most one estimation at a time."""

    def __init__(self, estimator: LifeExpectancyEstimator):
        self.estimator = estimator
        self.busy = False

    async def submit(self, form: Union[UserInput, Mapping[str, Any]]) -> SubmissionOutcome:
        if self.busy:
            logger.warning("Submission rejected: estimation already running")
            return SubmissionOutcome(error=BUSY_NOTICE)

        self.busy = True
        try:
            user_input = form if isinstance(form, UserInput) else UserInput.from_form(form)
            result = await self.estimator.estimate(user_input)
            return SubmissionOutcome(result=result, decades=layout(result))
        except InputError as e:
            logger.info(f"Input rejected: {e}")
            return SubmissionOutcome(error=str(e))
        except Exception as e:
            logger.error(f"Submission failed: {e}", exc_info=True)
            return SubmissionOutcome(error=GENERIC_NOTICE)
        finally:
            self.busy = False
