"""Async client for the remote word, quote and check-in service."""

import logging
from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

import httpx

from .errors import CheckInFailed, FetchFailed, ServiceError, SubmissionFailed
from .models import CheckInResult, CheckInState, Quote, WordCard, WordStats

logger = logging.getLogger(__name__)


def unwrap(body: Any) -> Any:
    """Strip the service's optional {"data": ...} envelope."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class RemoteService:
    """
    Thin wrapper over httpx.AsyncClient.

    Every failure (transport error, timeout, non-2xx status, malformed body)
    surfaces as the ServiceError subclass passed by the calling operation.
    Nothing is retried here.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        error: Type[ServiceError],
        json: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"{method} {path} failed with status {status}")
            raise error(f"{method} {path}: HTTP {status}", status_code=status) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise error(f"{method} {path}: {e.__class__.__name__}") from e

        if not response.content:
            return None
        try:
            return unwrap(response.json())
        except ValueError as e:
            raise error(f"{method} {path}: invalid JSON body") from e

    def _parse(self, model, payload: Any, error: Type[ServiceError], what: str):
        try:
            return model.model_validate(payload)
        except ValueError as e:
            logger.error(f"Malformed {what} payload: {e}")
            raise error(f"malformed {what} payload") from e

    # --- Review ---
    async def fetch_due_words(self) -> List[WordCard]:
        payload = await self._request("GET", "/words/review", FetchFailed)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise FetchFailed("due words payload is not a list")
        return [self._parse(WordCard, item, FetchFailed, "word") for item in payload]

    async def submit_verdict(self, word_id: str, remembered: bool) -> None:
        await self._request(
            "POST",
            f"/words/review/{quote(word_id, safe='')}",
            SubmissionFailed,
            json={"remembered": remembered},
        )

    # --- Check-in ---
    async def fetch_check_in_state(self) -> CheckInState:
        payload = await self._request("GET", "/checkin/stats", FetchFailed)
        return self._parse(CheckInState, payload or {}, FetchFailed, "check-in")

    async def perform_check_in(self) -> CheckInResult:
        payload = await self._request("POST", "/checkin", CheckInFailed)
        return self._parse(CheckInResult, payload, CheckInFailed, "check-in result")

    # --- Statistics ---
    async def get_stats(self) -> WordStats:
        payload = await self._request("GET", "/words/stats", FetchFailed)
        return self._parse(WordStats, payload or {}, FetchFailed, "stats")

    async def get_review_stats(self, year: int) -> Dict[str, int]:
        payload = await self._request("GET", f"/words/review-stats/{year}", FetchFailed)
        if not isinstance(payload, dict):
            return {}
        try:
            return {str(day): int(count) for day, count in payload.items()}
        except (TypeError, ValueError) as e:
            raise FetchFailed("malformed review stats payload") from e

    # --- Words ---
    async def list_words(self) -> List[WordCard]:
        payload = await self._request("GET", "/words", FetchFailed)
        return [self._parse(WordCard, item, FetchFailed, "word") for item in payload or []]

    # --- Quotes ---
    async def random_quote(self) -> Optional[Quote]:
        payload = await self._request("GET", "/quotes/random", FetchFailed)
        if not payload:
            return None
        return self._parse(Quote, payload, FetchFailed, "quote")

    async def list_quotes(self) -> List[Quote]:
        payload = await self._request("GET", "/quotes", FetchFailed)
        return [self._parse(Quote, item, FetchFailed, "quote") for item in payload or []]

