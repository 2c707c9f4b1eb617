import logging
from typing import Optional

from pydantic import BaseModel

from .errors import SubmissionFailed

logger = logging.getLogger(__name__)


class SubmissionResult(BaseModel):
    word_id: str
    remembered: bool
    ok: bool
    error: Optional[str] = None


class SubmissionAdapter:
    """Turns one review verdict into one remote write and reports the result."""

    def __init__(self, service):
        self.service = service

    async def submit(self, word_id: str, remembered: bool) -> SubmissionResult:
        # Callers get a result for every outcome; nothing is raised from here.
        try:
            await self.service.submit_verdict(word_id, remembered)
        except Exception as e:
            logger.warning(f"Verdict for {word_id} not recorded: {e!r}")
            return SubmissionResult(
                word_id=word_id,
                remembered=remembered,
                ok=False,
                error=SubmissionFailed.message,
            )
        logger.info(f"Recorded {word_id} as {'remembered' if remembered else 'forgotten'}")
        return SubmissionResult(word_id=word_id, remembered=remembered, ok=True)
