"""
Review session state machine.

A ReviewSession walks a fixed batch of due words in the order the service
returned them. Each word gets exactly one verdict (remembered or forgotten):
asserted by the user in card mode, or produced by checking a typed answer in
the spelling modes. The verdict is counted immediately, then written to the
service; only a successful write moves the session on.

ReviewEngine owns the current session for one client and replaces it
wholesale on refresh.
"""

import logging
from typing import List, Optional, Sequence

from .errors import FetchFailed, InvalidTransition, ServiceError
from .models import (
    AnswerFeedback,
    ItemState,
    Phase,
    ReviewMode,
    ReviewStats,
    SessionView,
    Stage,
    VerdictOutcome,
    WordCard,
)
from .submission import SubmissionAdapter
from .verifier import expected_answer, verify

logger = logging.getLogger(__name__)


class ReviewSession:
    def __init__(self, items: Sequence[WordCard], submitter: SubmissionAdapter):
        self.items: List[WordCard] = list(items)
        self.submitter = submitter
        self.current_index = 0
        self.mode = ReviewMode.CARD
        self.item = ItemState()
        self.stats = ReviewStats()
        self.stage = Stage.REVIEWING
        self.last_feedback: Optional[AnswerFeedback] = None
        self.error: Optional[str] = None
        self.phase = Phase.ACTIVE if self.items else Phase.EMPTY

    @property
    def current(self) -> Optional[WordCard]:
        if self.phase is not Phase.ACTIVE:
            return None
        return self.items[self.current_index]

    @property
    def is_last(self) -> bool:
        return self.current_index == len(self.items) - 1

    @property
    def submitting(self) -> bool:
        return self.stage is Stage.SUBMITTING

    def _require_active(self, action: str) -> None:
        if self.phase is not Phase.ACTIVE:
            raise InvalidTransition(f"Cannot {action} while session is {self.phase.value}")

    # --- Synchronous gestures ---
    def set_mode(self, mode: ReviewMode) -> None:
        self._require_active("change mode")
        self.mode = ReviewMode(mode)
        self.item = ItemState()

    def flip(self) -> bool:
        self._require_active("flip")
        if self.mode is not ReviewMode.CARD:
            raise InvalidTransition("Only cards can be flipped")
        self.item.revealed = not self.item.revealed
        return self.item.revealed

    def set_input(self, text: str) -> None:
        self._require_active("type")
        if not self.mode.is_spelling:
            raise InvalidTransition("Card mode takes no typed answer")
        if self.item.result_shown:
            raise InvalidTransition("Answer already checked")
        self.item.input = text

    def dismiss_feedback(self) -> None:
        self.last_feedback = None

    # --- Verdicts ---
    async def check_answer(self, text: Optional[str] = None) -> VerdictOutcome:
        """Verify a typed answer and record the resulting verdict."""
        self._require_active("check an answer")
        if self.submitting:
            return VerdictOutcome.IGNORED
        if not self.mode.is_spelling:
            raise InvalidTransition("Card mode takes no typed answer")
        if self.item.result_shown:
            raise InvalidTransition("Answer already checked")

        answer = self.item.input if text is None else text
        if not answer.strip():
            raise InvalidTransition("Empty answer")

        card = self.items[self.current_index]
        correct = verify(self.mode, answer, card)
        self.item = ItemState(input=answer, result_shown=True, was_correct=correct)
        self.last_feedback = AnswerFeedback(
            word_id=card.id,
            mode=self.mode,
            user_input=answer,
            expected=expected_answer(self.mode, card),
            correct=correct,
        )
        return await self._record(correct)

    async def record_verdict(self, remembered: bool) -> VerdictOutcome:
        """
        Record a verdict for the current word.

        In card mode the caller's verdict is taken as-is. In the spelling
        modes the verdict must already have been produced by check_answer;
        this call then only re-sends it (after a failed write), and a verdict
        that disagrees with the checked result is refused.
        """
        self._require_active("record a verdict")
        if self.submitting:
            return VerdictOutcome.IGNORED
        if self.mode.is_spelling:
            if not self.item.result_shown:
                raise InvalidTransition("Check the answer before recording a verdict")
            if remembered != self.item.was_correct:
                raise InvalidTransition("Verdict disagrees with the checked answer")
        return await self._record(remembered)

    async def _record(self, remembered: bool) -> VerdictOutcome:
        card = self.items[self.current_index]
        # Counted before the write is confirmed; a failed write keeps the count.
        if remembered:
            self.stats.remembered += 1
        else:
            self.stats.forgotten += 1

        self.stage = Stage.SUBMITTING
        self.error = None
        try:
            result = await self.submitter.submit(card.id, remembered)
        finally:
            self.stage = Stage.REVIEWING

        if not result.ok:
            self.error = result.error
            return VerdictOutcome.FAILED

        if self.is_last:
            self.phase = Phase.COMPLETED
            logger.info(
                f"Session completed: {self.stats.remembered} remembered, "
                f"{self.stats.forgotten} forgotten"
            )
            return VerdictOutcome.COMPLETED

        self.current_index += 1
        self.item = ItemState()
        return VerdictOutcome.ADVANCED

    # --- Projection ---
    def view(self) -> SessionView:
        total = len(self.items)
        if self.phase is Phase.COMPLETED:
            progress = 100
        elif total:
            progress = round((self.current_index + 1) / total * 100)
        else:
            progress = 0
        return SessionView(
            phase=self.phase,
            stage=self.stage if self.phase is Phase.ACTIVE else None,
            submitting=self.submitting,
            mode=self.mode,
            current=self.current,
            current_index=self.current_index,
            total=total,
            progress=progress,
            item=self.item.model_copy(),
            stats=self.stats.model_copy(),
            accuracy=self.stats.accuracy,
            last_feedback=self.last_feedback,
            error=self.error,
        )


class ReviewEngine:
    """Holds the live review session of one client."""

    def __init__(self, service):
        self.service = service
        self.submitter = SubmissionAdapter(service)
        self.session: Optional[ReviewSession] = None
        self.error: Optional[str] = None
        self._generation = 0

    @property
    def phase(self) -> Phase:
        if self.session is None:
            return Phase.LOADING
        return self.session.phase

    def start(self, items: Sequence[WordCard]) -> ReviewSession:
        """Replace whatever session existed with a fresh one over items."""
        self._generation += 1
        self.error = None
        self.session = ReviewSession(items, self.submitter)
        logger.info(f"Review session started with {len(self.session.items)} words")
        return self.session

    async def reset(self) -> Phase:
        """Fetch the due batch and start over, discarding prior session state."""
        self._generation += 1
        generation = self._generation
        self.session = None
        self.error = None
        try:
            items = await self.service.fetch_due_words()
        except ServiceError as e:
            if generation == self._generation:
                self.error = FetchFailed.message
            logger.error(f"Fetching due words failed: {e}")
            raise
        if generation != self._generation:
            logger.info("Discarding due words from a superseded refresh")
            return self.phase
        self.start(items)
        return self.phase

    refresh = reset

    def _session(self) -> ReviewSession:
        if self.session is None:
            raise InvalidTransition("No review session loaded")
        return self.session

    def set_mode(self, mode: ReviewMode) -> None:
        self._session().set_mode(mode)

    def flip(self) -> bool:
        return self._session().flip()

    def set_input(self, text: str) -> None:
        self._session().set_input(text)

    def dismiss_feedback(self) -> None:
        if self.session is not None:
            self.session.dismiss_feedback()

    async def check_answer(self, text: Optional[str] = None) -> VerdictOutcome:
        return await self._session().check_answer(text)

    async def record_verdict(self, remembered: bool) -> VerdictOutcome:
        return await self._session().record_verdict(remembered)

    def view(self) -> SessionView:
        if self.session is None:
            return SessionView(phase=Phase.LOADING, error=self.error)
        return self.session.view()
