"""Answer checking for the spelling review modes."""

from .models import ReviewMode, WordCard


def verify_word(user_input: str, word: str) -> bool:
    """Exact match on the foreign word, ignoring case and surrounding spaces."""
    answer = user_input.strip().lower()
    if not answer:
        return False
    return answer == word.strip().lower()


def verify_meaning(user_input: str, meaning: str) -> bool:
    """
    Loose match on the native-language meaning.

    Only surrounding whitespace is ignored; case is kept as typed. Besides an
    exact match, the answer is accepted when it is part of the meaning or the
    meaning is part of the answer, so paraphrases with extra words pass.
    An empty answer is always wrong even though "" is a substring of anything.
    """
    answer = user_input.strip()
    if not answer:
        return False
    return answer == meaning or answer in meaning or meaning in answer


def verify(mode: ReviewMode, user_input: str, card: WordCard) -> bool:
    if mode is ReviewMode.SPELL_TO_WORD:
        return verify_word(user_input, card.word)
    if mode is ReviewMode.SPELL_TO_MEANING:
        return verify_meaning(user_input, card.meaning)
    raise ValueError(f"Mode {mode.value} has no answer to verify")


def expected_answer(mode: ReviewMode, card: WordCard) -> str:
    if mode is ReviewMode.SPELL_TO_WORD:
        return card.word
    if mode is ReviewMode.SPELL_TO_MEANING:
        return card.meaning
    raise ValueError(f"Mode {mode.value} has no expected answer")
