from types import SimpleNamespace

from pydantic import TypeAdapter

from chatbuddy.schemas import StudyResult, QuizResult, FlashcardResult
from chatbuddy.services import ai as ai_service
from chatbuddy.services import llm as llm_mod
from chatbuddy.services.llm import AIServiceError

study_result = TypeAdapter(StudyResult)


def test_generate_quiz_parses_mock_completion(client, auth_headers):
    r = client.post("/api/ai/generate-quiz", json={"topic": "Photosynthesis"}, headers=auth_headers)
    assert r.status_code == 200
    result = study_result.validate_python(r.json())
    assert isinstance(result, QuizResult)
    assert len(result.questions) == 3
    assert result.questions[0].options[1] == "Chloroplast"
    assert [q.correct_index for q in result.questions] == [1, 2, 0]


def test_generate_flashcards_parses_mock_completion(client, auth_headers):
    r = client.post("/api/ai/generate-flashcards", json={"topic": "Photosynthesis"}, headers=auth_headers)
    assert r.status_code == 200
    result = study_result.validate_python(r.json())
    assert isinstance(result, FlashcardResult)
    assert len(result.flashcards) == 4
    assert result.flashcards[1].back == "In the chloroplasts."


def test_unparseable_quiz_falls_back_silently(client, auth_headers, monkeypatch):
    async def chatty(messages, **kw):
        return "I'd love to help you study! Let's talk about it."
    monkeypatch.setattr(ai_service, "llm", chatty)

    r = client.post("/api/ai/generate-quiz", json={"topic": "Optics"}, headers=auth_headers)
    assert r.status_code == 200
    questions = r.json()["questions"]
    assert len(questions) == 3
    assert questions[0]["question"] == "What is the fundamental principle of Optics?"


def test_text_results_are_tagged(client, auth_headers):
    cases = [
        ("/api/ai/explain-topic", {"topic": "Gravity"}, "explain", "result"),
        ("/api/ai/summarize-notes", {"notes": "F = ma"}, "summary", "result"),
        ("/api/ai/ask-question", {"question": "Why is the sky blue?"}, "answer", "answer"),
    ]
    for path, body, kind, field in cases:
        r = client.post(path, json=body, headers=auth_headers)
        assert r.status_code == 200, path
        assert r.json()["kind"] == kind
        assert r.json()[field] == "This is a MOCK response."


def test_required_fields(client, auth_headers):
    cases = [
        ("/api/ai/explain-topic", "Topic is required"),
        ("/api/ai/generate-quiz", "Topic is required"),
        ("/api/ai/generate-flashcards", "Topic is required"),
        ("/api/ai/summarize-notes", "Notes are required"),
        ("/api/ai/ask-question", "Question is required"),
    ]
    for path, detail in cases:
        r = client.post(path, json={}, headers=auth_headers)
        assert r.status_code == 400, path
        assert r.json()["detail"] == detail


def test_ai_calls_are_recorded_in_stats(client, auth_headers):
    client.post("/api/ai/explain-topic", json={"topic": "Gravity"}, headers=auth_headers)
    client.post("/api/ai/generate-quiz", json={"topic": "Optics"}, headers=auth_headers)
    client.post("/api/ai/ask-question", json={"question": "Why?"}, headers=auth_headers)

    stats = client.get("/api/users/stats", headers=auth_headers).json()["stats"]
    assert stats["ai_interactions"] == 3
    assert sum(stats["daily_activity"].values()) == 3
    assert stats["last_activity_date"] in stats["daily_activity"]
    titles = [a["title"] for a in stats["recent_activities"]]
    assert titles == [
        "Answered study question",
        "Generated quiz for: Optics",
        "Explained topic: Gravity",
    ]


def test_upstream_errors_keep_status_and_message(client, auth_headers, monkeypatch):
    async def rate_limited(messages, **kw):
        raise AIServiceError("Rate limit exceeded. Please wait a moment and try again.", 429)
    monkeypatch.setattr(ai_service, "llm", rate_limited)

    r = client.post("/api/ai/explain-topic", json={"topic": "Gravity"}, headers=auth_headers)
    assert r.status_code == 429
    assert r.json()["detail"] == "Rate limit exceeded. Please wait a moment and try again."

    r = client.post("/api/ai/ask-question", json={"question": "Why?"}, headers=auth_headers)
    assert r.status_code == 429
    assert r.json()["detail"] == "Failed to answer the question. Please try again."

    # failed calls are not counted
    stats = client.get("/api/users/stats", headers=auth_headers).json()["stats"]
    assert stats["ai_interactions"] == 0


def test_connection_check(client, auth_headers):
    r = client.get("/api/ai/test-connection", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"result": "Hello, AI is working!", "status": "AI service is working"}


def test_ai_routes_need_token(client):
    r = client.post("/api/ai/generate-quiz", json={"topic": "x"})
    assert r.status_code == 401


def test_empty_model_reply_is_a_readable_error(client, auth_headers, monkeypatch, test_settings):
    monkeypatch.setattr(test_settings, "MOCK_MODE", False)
    monkeypatch.setattr(test_settings, "OPENAI_API_KEY", "sk-or-v1-test")
    empty = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(
        create=lambda **kw: SimpleNamespace(choices=[]))))
    monkeypatch.setattr(llm_mod, "_client", empty)

    r = client.post("/api/ai/explain-topic", json={"topic": "Gravity"}, headers=auth_headers)
    assert r.status_code == 502
    assert r.json()["detail"] == "API Error: empty response from model"


def test_summarize_without_notes(client, auth_headers):
    r = client.post("/api/ai/summarize-notes", json={"notes": "   "}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Notes are required"
