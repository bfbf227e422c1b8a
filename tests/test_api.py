import pytest
from fastapi.testclient import TestClient
from flag_quiz import main
from flag_quiz.state import SessionController


@pytest.fixture
def client(monkeypatch, controller):
    monkeypatch.setattr(main, "controller", controller)
    return TestClient(main.app)


def test_state_before_start(client):
    resp = client.get("/api/state")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "awaiting_start"
    assert body["pool_size"] == 10
    assert body["image_ref"] is None


def test_play_a_round(client, controller, scheduler):
    body = client.post("/api/game/start", json={"count": 5}).json()
    assert body["status"] == "in_progress"
    assert body["image_ref"].startswith("https://flagcdn.com/w640/")

    answer = controller.session.current_question().name
    body = client.post("/api/game/answer/text", json={"answer": answer.lower()}).json()
    assert body["score"] == {"correct": 1, "incorrect": 0}
    assert body["points"] == 2
    assert body["feedback"]["kind"] == "correct"

    body = client.post("/api/game/options").json()
    assert body["mode"] == "multiple-choice"
    assert len(body["options"]) == 4
    again = client.post("/api/game/options").json()
    assert again["options"] == body["options"]

    body = client.post("/api/game/answer/choice", json={"option": controller.session.current_question().name}).json()
    assert body["points"] == 3
    assert body["score"] == {"correct": 2, "incorrect": 0}


def test_invalid_count_is_rejected(client):
    resp = client.post("/api/game/start", json={"count": 3})
    assert resp.status_code == 422
    assert resp.json()["detail"] == "invalid_question_count"


def test_exhausted_pool_is_a_conflict(client):
    client.post("/api/game/start", json={"count": 10})
    client.post("/api/game/restart")
    resp = client.post("/api/game/start", json={"count": 5})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "pool_exhausted"
    assert client.post("/api/pool/reset").json()["pool_remaining"] == 10


def test_answer_without_game_is_a_conflict(client):
    resp = client.post("/api/game/answer/text", json={"answer": "Perú"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "invalid_session_state"


def test_restart_returns_to_awaiting_start(client):
    client.post("/api/game/start", json={"count": 5})
    client.post("/api/game/answer/text", json={"answer": "nope"})
    body = client.post("/api/game/restart").json()
    assert body["status"] == "awaiting_start"
    assert body["score"] == {"correct": 0, "incorrect": 0}


def test_reload_uses_country_source(monkeypatch, session, score_record, countries):
    from flag_quiz.services.country_pool import CountryPool

    class StaticSource:
        def fetch(self):
            return countries[:6]

    controller = SessionController(pool=CountryPool(), session=session, score_record=score_record, source=StaticSource())
    monkeypatch.setattr(main, "controller", controller)
    client = TestClient(main.app)
    assert client.get("/api/state").json()["status"] == "loading"
    body = client.post("/api/countries/reload").json()
    assert body["pool_size"] == 6


def test_reload_reports_unavailable_source(monkeypatch, session, score_record):
    from flag_quiz.errors import CountrySourceError
    from flag_quiz.services.country_pool import CountryPool

    class BrokenSource:
        def fetch(self):
            raise CountrySourceError("offline")

    controller = SessionController(pool=CountryPool(), session=session, score_record=score_record, source=BrokenSource())
    monkeypatch.setattr(main, "controller", controller)
    resp = TestClient(main.app).post("/api/countries/reload")
    assert resp.status_code == 503
    assert resp.json()["detail"] == "countries_unavailable"


def test_start_without_body_uses_default_count(client):
    from flag_quiz.config import settings

    resp = client.post("/api/game/start")
    assert resp.status_code == 200
    assert resp.json()["total_questions"] == settings.default_questions
    client.post("/api/game/restart")
    client.post("/api/pool/reset")
    resp = client.post("/api/game/start", json={})
    assert resp.json()["total_questions"] == settings.default_questions


def test_answer_persists_best_score(client, controller, score_record):
    client.post("/api/game/start", json={"count": 5})
    answer = controller.session.current_question().name
    body = client.post("/api/game/answer/text", json={"answer": answer}).json()
    assert body["best_score"] == 2
    assert body["reveal_pending"] is True
    assert score_record.load() == 2
