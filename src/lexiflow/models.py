from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ReviewMode(str, Enum):
    CARD = "card"
    SPELL_TO_WORD = "spell-en"
    SPELL_TO_MEANING = "spell-cn"

    @property
    def is_spelling(self) -> bool:
        return self is not ReviewMode.CARD


class Phase(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    EMPTY = "empty"
    COMPLETED = "completed"


class Stage(str, Enum):
    """Sub-state of an active session."""

    REVIEWING = "reviewing"
    SUBMITTING = "submitting"


class VerdictOutcome(str, Enum):
    ADVANCED = "advanced"
    COMPLETED = "completed"
    FAILED = "failed"
    IGNORED = "ignored"


# --- Remote payloads ---
class WordCard(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    word: str = Field(min_length=1)
    phonetic: Optional[str] = None
    part_of_speech: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("partOfSpeech", "part_of_speech"),
    )
    meaning: str = Field(min_length=1)
    example: Optional[str] = None


class WordStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    today_review: int = Field(0, alias="todayReview")
    today_reviewed: int = Field(0, alias="todayReviewed")


class Quote(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, validation_alias=AliasChoices("id", "_id"))
    content: str
    translation: str = ""
    author: str = ""
    image_url: Optional[str] = Field(
        None, validation_alias=AliasChoices("imageUrl", "image_url")
    )


class Badge(BaseModel):
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    days: int
    icon: str
    name: str


class Milestone(BaseModel):
    model_config = ConfigDict(frozen=True)

    days: int
    name: str
    icon: str


class CheckInState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    consecutive_days: int = Field(0, ge=0, alias="consecutiveDays")
    today_checked_in: bool = Field(False, alias="todayCheckIn")
    badges: List[Badge] = Field(default_factory=list)


class CheckInResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    consecutive_days: int = Field(ge=0, alias="consecutiveDays")
    badges: Optional[List[Badge]] = None
    new_badge: Optional[str] = Field(None, alias="newBadge")


# --- Engine state exposed to the presentation layer ---
class ReviewStats(BaseModel):
    remembered: int = 0
    forgotten: int = 0

    @property
    def total(self) -> int:
        return self.remembered + self.forgotten

    @property
    def accuracy(self) -> int:
        if not self.total:
            return 0
        return round(self.remembered / self.total * 100)


class ItemState(BaseModel):
    revealed: bool = False
    input: str = ""
    result_shown: bool = False
    was_correct: bool = False


class AnswerFeedback(BaseModel):
    word_id: str
    mode: ReviewMode
    user_input: str
    expected: str
    correct: bool


class SessionView(BaseModel):
    phase: Phase
    stage: Optional[Stage] = None
    submitting: bool = False
    mode: ReviewMode = ReviewMode.CARD
    current: Optional[WordCard] = None
    current_index: int = 0
    total: int = 0
    progress: int = 0
    item: ItemState = Field(default_factory=ItemState)
    stats: ReviewStats = Field(default_factory=ReviewStats)
    accuracy: int = 0
    last_feedback: Optional[AnswerFeedback] = None
    error: Optional[str] = None
