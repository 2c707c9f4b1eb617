import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from pydantic import BaseModel, ConfigDict

from . import globals as g
from .checkin import CheckInTracker, achieved_milestones, next_milestone
from .config import MILESTONES, settings
from .dashboard import heatmap_series, today_progress
from .errors import InvalidTransition, ServiceError
from .models import ReviewMode
from .store import ClientState, ClientStore

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Request bodies ---
class ModeRequest(BaseModel):
    mode: ReviewMode


class AnswerRequest(BaseModel):
    answer: Optional[str] = None


class InputRequest(BaseModel):
    text: str


class VerdictRequest(BaseModel):
    remembered: bool


# --- Dependencies ---
def get_service():
    return g.service


def get_store() -> ClientStore:
    return g.client_store


def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


class Client(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    state: ClientState
    is_new: bool


def get_existing_client(
    session_id: Optional[str] = Depends(get_session_id),
    store: ClientStore = Depends(get_store),
) -> Optional[Client]:
    """Looks up the caller's state without creating one."""
    state = store.get(session_id)
    if state is None:
        return None
    return Client(id=session_id, state=state, is_new=False)


def get_client(
    existing: Optional[Client] = Depends(get_existing_client),
    store: ClientStore = Depends(get_store),
    service=Depends(get_service),
) -> Client:
    if existing is not None:
        return existing
    new_id, state = store.create(service)
    return Client(id=new_id, state=state, is_new=True)


def _finish(response: Response, client: Optional[Client]) -> Response:
    if client is not None and client.is_new:
        response.set_cookie(
            key=settings.SESSION_COOKIE_NAME,
            value=client.id,
            httponly=True,
            samesite="lax",
        )
    return response


def _redirect(url: str, client: Client) -> Response:
    return _finish(RedirectResponse(url=url, status_code=303), client)


async def _ensure_review_loaded(client: Client) -> None:
    if client.state.review.session is None:
        await client.state.review.reset()


def _tracker_for(client: Optional[Client], service) -> CheckInTracker:
    # Anonymous visitors get a throwaway tracker; nothing is stored for them.
    if client is not None:
        return client.state.checkin
    return CheckInTracker(service)


async def _ensure_checkin_loaded(tracker: CheckInTracker) -> None:
    if not tracker.loaded:
        await tracker.load()


def _checkin_payload(tracker: CheckInTracker) -> dict:
    state = tracker.state
    upcoming = next_milestone(state.consecutive_days, MILESTONES)
    return {
        "consecutive_days": state.consecutive_days,
        "today_checked_in": state.today_checked_in,
        "checking_in": tracker.in_flight,
        "badges": [b.model_dump() for b in state.badges],
        "milestones": [
            {**m.model_dump(), "achieved": state.consecutive_days >= m.days}
            for m in MILESTONES
        ],
        "achieved": [m.model_dump() for m in achieved_milestones(state.consecutive_days, MILESTONES)],
        "next_milestone": upcoming.model_dump() if upcoming else None,
    }


# --- HTML pages ---
@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    client: Optional[Client] = Depends(get_existing_client),
    service=Depends(get_service),
):
    notices = []
    progress = None
    quote = None
    tracker = _tracker_for(client, service)
    try:
        await _ensure_checkin_loaded(tracker)
    except ServiceError as e:
        notices.append(e.message)
    try:
        progress = today_progress(await service.get_stats())
        quote = await service.random_quote()
    except ServiceError as e:
        notices.append(e.message)

    notice = client.state.pop_notice() if client is not None else None
    if notice:
        notices.insert(0, notice)
    context = {
        "progress": progress,
        "quote": quote,
        "checkin": _checkin_payload(tracker),
        "notices": notices,
    }
    return templates_response(request, "dashboard.html", context)


@router.post("/checkin")
async def checkin_form(client: Client = Depends(get_client)):
    try:
        result = await client.state.checkin.check_in()
    except ServiceError as e:
        client.state.notice = e.message
    else:
        if result is not None:
            client.state.notice = (
                f"恭喜获得新徽章：{result.new_badge}" if result.new_badge else "签到成功！"
            )
    return _redirect("/", client)


@router.get("/review", response_class=HTMLResponse)
async def review_page(request: Request, client: Client = Depends(get_client)):
    notices = []
    try:
        await _ensure_review_loaded(client)
    except ServiceError as e:
        notices.append(e.message)
    notice = client.state.pop_notice()
    if notice:
        notices.insert(0, notice)
    view = client.state.review.view()
    if view.error and view.error not in notices:
        notices.append(view.error)
    context = {"view": view, "modes": list(ReviewMode), "notices": notices}
    return _finish(templates_response(request, "review.html", context), client)


async def _review_action(client: Client, action) -> Response:
    try:
        await action(client.state.review)
    except (ServiceError, InvalidTransition) as e:
        client.state.notice = getattr(e, "message", None) or str(e)
    return _redirect("/review", client)


@router.post("/review/refresh")
async def review_refresh_form(client: Client = Depends(get_client)):
    async def action(review):
        await review.reset()

    return await _review_action(client, action)


@router.post("/review/mode")
async def review_mode_form(mode: ReviewMode = Form(...), client: Client = Depends(get_client)):
    async def action(review):
        review.set_mode(mode)

    return await _review_action(client, action)


@router.post("/review/flip")
async def review_flip_form(client: Client = Depends(get_client)):
    async def action(review):
        review.flip()

    return await _review_action(client, action)


@router.post("/review/answer")
async def review_answer_form(answer: str = Form(""), client: Client = Depends(get_client)):
    async def action(review):
        await review.check_answer(answer)

    return await _review_action(client, action)


@router.post("/review/verdict")
async def review_verdict_form(remembered: bool = Form(...), client: Client = Depends(get_client)):
    async def action(review):
        await review.record_verdict(remembered)

    return await _review_action(client, action)


@router.post("/review/next")
async def review_next_form(client: Client = Depends(get_client)):
    async def action(review):
        review.dismiss_feedback()

    return await _review_action(client, action)


@router.get("/words", response_class=HTMLResponse)
async def words_page(request: Request, service=Depends(get_service)):
    notices = []
    words = []
    try:
        words = await service.list_words()
    except ServiceError as e:
        notices.append(e.message)
    context = {"words": words, "notices": notices}
    return templates_response(request, "words.html", context)


@router.get("/quotes", response_class=HTMLResponse)
async def quotes_page(request: Request, service=Depends(get_service)):
    notices = []
    quotes = []
    try:
        quotes = await service.list_quotes()
    except ServiceError as e:
        notices.append(e.message)
    context = {"quotes": quotes, "notices": notices}
    return templates_response(request, "quotes.html", context)


def templates_response(request: Request, name: str, context: dict):
    return g.templates.TemplateResponse(request, name, context)


# --- JSON API ---
def _review_json(client: Client, outcome=None) -> Response:
    payload = {"view": client.state.review.view().model_dump(mode="json")}
    if outcome is not None:
        payload["outcome"] = outcome.value
    return _finish(_json(payload), client)


def _json(payload, status_code: int = 200) -> Response:
    return JSONResponse(payload, status_code=status_code)


@router.get("/api/review")
async def get_review(client: Client = Depends(get_client)):
    await _ensure_review_loaded(client)
    return _review_json(client)


@router.post("/api/review/refresh")
async def refresh_review(client: Client = Depends(get_client)):
    await client.state.review.reset()
    return _review_json(client)


@router.post("/api/review/mode")
async def set_review_mode(body: ModeRequest, client: Client = Depends(get_client)):
    client.state.review.set_mode(body.mode)
    return _review_json(client)


@router.post("/api/review/flip")
async def flip_card(client: Client = Depends(get_client)):
    client.state.review.flip()
    return _review_json(client)


@router.post("/api/review/input")
async def set_answer_input(body: InputRequest, client: Client = Depends(get_client)):
    client.state.review.set_input(body.text)
    return _review_json(client)


@router.post("/api/review/answer")
async def check_answer(body: AnswerRequest, client: Client = Depends(get_client)):
    outcome = await client.state.review.check_answer(body.answer)
    return _review_json(client, outcome)


@router.post("/api/review/verdict")
async def record_verdict(body: VerdictRequest, client: Client = Depends(get_client)):
    outcome = await client.state.review.record_verdict(body.remembered)
    return _review_json(client, outcome)


@router.post("/api/review/next")
async def dismiss_feedback(client: Client = Depends(get_client)):
    client.state.review.dismiss_feedback()
    return _review_json(client)


@router.get("/api/checkin")
async def get_checkin(
    client: Optional[Client] = Depends(get_existing_client), service=Depends(get_service)
):
    tracker = _tracker_for(client, service)
    await _ensure_checkin_loaded(tracker)
    return _json(_checkin_payload(tracker))


@router.post("/api/checkin")
async def perform_checkin(client: Client = Depends(get_client)):
    result = await client.state.checkin.check_in()
    payload = _checkin_payload(client.state.checkin)
    payload["performed"] = result is not None
    payload["new_badge"] = result.new_badge if result else None
    return _finish(_json(payload), client)


@router.get("/api/dashboard")
async def get_dashboard(service=Depends(get_service)):
    stats = await service.get_stats()
    today = date.today()
    counts = await service.get_review_stats(today.year)
    return _json(
        {
            "today": today_progress(stats),
            "heatmap": heatmap_series(counts, today),
        }
    )


@router.post("/api/reset")
async def reset_client(
    session_id: Optional[str] = Depends(get_session_id),
    store: ClientStore = Depends(get_store),
):
    store.discard(session_id)
    response = _json({"status": "success"})
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
