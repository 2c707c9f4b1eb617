import asyncio
from typing import List, Optional

import pytest

from lexiflow.errors import CheckInFailed, FetchFailed, SubmissionFailed
from lexiflow.models import CheckInResult, CheckInState, Quote, WordCard, WordStats


def make_words(n: int) -> List[WordCard]:
    samples = [
        ("apple", "苹果"),
        ("happy", "感到快乐"),
        ("river", "河流"),
        ("window", "窗户"),
    ]
    return [
        WordCard(id=f"w{i + 1}", word=samples[i % 4][0], meaning=samples[i % 4][1])
        for i in range(n)
    ]


class FakeService:
    """In-memory stand-in for RemoteService."""

    def __init__(self, words: Optional[List[WordCard]] = None):
        self.words = list(words or [])
        self.fail_fetch = False
        self.fail_submit = False
        self.submissions = []
        self.submit_gate: Optional[asyncio.Event] = None
        self.fetch_calls = 0

        self.checkin_state = CheckInState()
        self.checkin_result = CheckInResult(consecutive_days=1)
        self.fail_checkin = False
        self.checkin_calls = 0
        self.checkin_gate: Optional[asyncio.Event] = None

        self.stats = WordStats(today_review=3, today_reviewed=1)
        self.review_counts = {}
        self.quotes = [Quote(id="q1", content="Stay hungry", translation="求知若饥", author="Jobs")]

    async def fetch_due_words(self):
        self.fetch_calls += 1
        if self.fail_fetch:
            raise FetchFailed("GET /words/review: ConnectError")
        return list(self.words)

    async def submit_verdict(self, word_id, remembered):
        self.submissions.append((word_id, remembered))
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.fail_submit:
            raise SubmissionFailed("POST /words/review: HTTP 500", status_code=500)

    async def fetch_check_in_state(self):
        return self.checkin_state

    async def perform_check_in(self):
        self.checkin_calls += 1
        if self.checkin_gate is not None:
            await self.checkin_gate.wait()
        if self.fail_checkin:
            raise CheckInFailed("POST /checkin: HTTP 503", status_code=503)
        return self.checkin_result

    async def get_stats(self):
        return self.stats

    async def get_review_stats(self, year):
        return dict(self.review_counts)

    async def random_quote(self):
        return self.quotes[0] if self.quotes else None

    async def list_quotes(self):
        return list(self.quotes)

    async def list_words(self):
        return list(self.words)


@pytest.fixture
def words():
    return make_words(3)


@pytest.fixture
def service(words):
    return FakeService(words)
