import pytest
from fastapi.testclient import TestClient

from conftest import FakeService, make_words
from lexiflow.app import create_app
from lexiflow.config import settings
from lexiflow.models import CheckInState
from lexiflow.router import get_service, get_store
from lexiflow.store import ClientStore


@pytest.fixture
def service():
    return FakeService(make_words(2))


@pytest.fixture
def store():
    return ClientStore(settings.SESSION_TIMEOUT_MINUTES)


@pytest.fixture
def client(service, store, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "log"))
    app = create_app()
    app.dependency_overrides[get_service] = lambda: service
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app)


def test_review_loads_batch_and_sets_cookie(client, service):
    response = client.get("/api/review")

    assert response.status_code == 200
    view = response.json()["view"]
    assert view["phase"] == "active"
    assert view["current"]["id"] == "w1"
    assert view["total"] == 2
    assert settings.SESSION_COOKIE_NAME in response.cookies
    assert service.fetch_calls == 1

    client.get("/api/review")
    assert service.fetch_calls == 1


def test_card_mode_round_trip(client, service):
    client.get("/api/review")

    flipped = client.post("/api/review/flip").json()["view"]
    assert flipped["item"]["revealed"] is True

    first = client.post("/api/review/verdict", json={"remembered": True}).json()
    assert first["outcome"] == "advanced"
    assert first["view"]["item"]["revealed"] is False

    last = client.post("/api/review/verdict", json={"remembered": False}).json()
    assert last["outcome"] == "completed"
    assert last["view"]["phase"] == "completed"
    assert last["view"]["stats"] == {"remembered": 1, "forgotten": 1}
    assert last["view"]["accuracy"] == 50

    again = client.post("/api/review/verdict", json={"remembered": True})
    assert again.status_code == 409
    assert service.submissions == [("w1", True), ("w2", False)]


def test_spelling_answer(client, service):
    client.get("/api/review")
    mode = client.post("/api/review/mode", json={"mode": "spell-en"}).json()["view"]
    assert mode["mode"] == "spell-en"

    body = client.post("/api/review/answer", json={"answer": " Apple "}).json()

    assert body["outcome"] == "advanced"
    assert body["view"]["last_feedback"]["correct"] is True
    assert service.submissions == [("w1", True)]

    cleared = client.post("/api/review/next").json()["view"]
    assert cleared["last_feedback"] is None


def test_typed_input_is_checked(client, service):
    client.get("/api/review")
    client.post("/api/review/mode", json={"mode": "spell-en"})

    typed = client.post("/api/review/input", json={"text": "APPLE"}).json()["view"]
    assert typed["item"]["input"] == "APPLE"

    body = client.post("/api/review/answer", json={}).json()

    assert body["outcome"] == "advanced"
    assert body["view"]["last_feedback"]["user_input"] == "APPLE"
    assert service.submissions == [("w1", True)]


def test_spelling_verdict_must_follow_check(client):
    client.get("/api/review")
    client.post("/api/review/mode", json={"mode": "spell-cn"})

    response = client.post("/api/review/verdict", json={"remembered": True})

    assert response.status_code == 409


def test_failed_submission_reported_without_advancing(client, service):
    service.fail_submit = True
    client.get("/api/review")

    body = client.post("/api/review/verdict", json={"remembered": True}).json()

    assert body["outcome"] == "failed"
    assert body["view"]["current_index"] == 0
    assert body["view"]["error"]
    assert body["view"]["stats"]["remembered"] == 1


def test_fetch_failure_is_502(client, service):
    service.fail_fetch = True

    response = client.get("/api/review")

    assert response.status_code == 502
    assert response.json()["error"]


def test_empty_batch(client, service):
    service.words = []
    assert client.get("/api/review").json()["view"]["phase"] == "empty"


def test_refresh_restarts_session(client, service):
    client.get("/api/review")
    client.post("/api/review/verdict", json={"remembered": True})

    view = client.post("/api/review/refresh").json()["view"]

    assert view["current_index"] == 0
    assert view["stats"] == {"remembered": 0, "forgotten": 0}
    assert service.fetch_calls == 2


def test_checkin_only_once_per_day(client, service):
    state = client.get("/api/checkin").json()
    assert state["today_checked_in"] is False
    assert state["next_milestone"]["days"] == 1

    first = client.post("/api/checkin").json()
    second = client.post("/api/checkin").json()

    assert first["performed"] is True
    assert first["consecutive_days"] == 1
    assert [m["days"] for m in first["achieved"]] == [1]
    assert second["performed"] is False
    assert service.checkin_calls == 1


def test_first_checkin_respects_service_state(client, service):
    service.checkin_state = CheckInState(consecutive_days=4, today_checked_in=True)

    body = client.post("/api/checkin").json()

    assert body["performed"] is False
    assert body["today_checked_in"] is True
    assert body["consecutive_days"] == 4
    assert service.checkin_calls == 0


def test_checkin_failure_is_502(client, service):
    client.get("/api/checkin")
    service.fail_checkin = True

    assert client.post("/api/checkin").status_code == 502


def test_dashboard_api(client, service):
    service.review_counts = {}
    body = client.get("/api/dashboard").json()

    assert body["today"]["percent"] == 25
    assert len(body["heatmap"]) >= 365


def test_review_page_form_flow(client, service):
    page = client.get("/review")
    assert page.status_code == 200
    assert "apple" in page.text

    response = client.post("/review/verdict", data={"remembered": "true"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/review"

    page = client.get("/review")
    assert "happy" in page.text
    assert service.submissions == [("w1", True)]


def test_review_page_shows_notice_on_bad_action(client):
    client.get("/review")
    client.post("/review/mode", data={"mode": "spell-en"})

    page = client.post("/review/verdict", data={"remembered": "true"})

    assert page.status_code == 200
    assert "Check the answer before recording a verdict" in page.text


def test_review_page_fetch_failure(client, service):
    service.fail_fetch = True

    page = client.get("/review")

    assert page.status_code == 200
    assert "获取数据失败" in page.text


def test_dashboard_page(client, service):
    page = client.get("/")

    assert page.status_code == 200
    assert "Stay hungry" in page.text
    assert "新手打卡" in page.text

    client.post("/checkin")
    page = client.get("/")
    assert "今日已签到" in page.text


def test_words_and_quotes_pages(client):
    assert "苹果" in client.get("/words").text
    assert "求知若饥" in client.get("/quotes").text


def test_reset_drops_client_state(client):
    client.get("/api/review")
    response = client.post("/api/reset")
    assert response.json() == {"status": "success"}


def test_read_only_pages_keep_no_state(client, store):
    for _ in range(50):
        assert client.get("/quotes").status_code == 200
    client.get("/words")
    client.get("/")
    client.get("/api/checkin")
    client.get("/api/dashboard")

    assert store.states == {}
    assert settings.SESSION_COOKIE_NAME not in client.cookies


def test_dashboard_uses_existing_state(client, store):
    client.post("/checkin")
    assert len(store.states) == 1

    page = client.get("/")

    assert "今日已签到" in page.text
    assert len(store.states) == 1
