from fastapi.testclient import TestClient

from api_server import create_app
from config import ANALYSIS_PURPOSE, PLAN_PURPOSE, WRAPUP_PURPOSE


def test_full_interview(controller, fake_gateway):
    client = TestClient(create_app(controller))

    start_resp = client.post("/api/interview/start", json={"topic": "AI in healthcare"})
    assert start_resp.status_code == 200
    session_id = start_resp.json()["sessionId"]

    answers = [
        "I use AI scribes to draft clinical notes.",
        "It saves me about an hour a day.",
        "I still double check medication lists.",
        "Patients rarely notice the difference.",
    ]
    for answer in answers:
        turn_resp = client.post("/api/interview/message", json={"sessionId": session_id, "message": answer})
        assert turn_resp.status_code == 200
        assert turn_resp.json()["message"]

    wrap_resp = client.post(
        "/api/interview/message",
        json={"sessionId": session_id, "message": "I think that is everything.", "isWrapUp": True},
    )
    assert wrap_resp.json()["wrapUp"] is True

    finish_resp = client.post("/api/interview/complete", json={"sessionId": session_id})
    assert finish_resp.status_code == 200
    body = finish_resp.json()
    assert body["analysis"]["depthScore"] == 4
    assert body["analysis"]["keyInsights"]
    assert body["session"]["status"] == "completed"
    assert body["session"]["cost"]["tokens"] > 0
    assert body["session"]["cost"]["cost"] > 0

    transcript = body["session"]["transcript"]
    assert [message["role"] for message in transcript[:2]] == ["system", "assistant"]
    assert sum(1 for message in transcript if message["role"] == "user") == 5

    purposes = fake_gateway.purposes()
    assert purposes[0] == PLAN_PURPOSE
    assert WRAPUP_PURPOSE in purposes
    assert purposes[-1] == ANALYSIS_PURPOSE


def test_fallbacks_when_model_ignores_format(controller, fake_gateway):
    fake_gateway.replies[PLAN_PURPOSE] = "Let's just talk!"
    fake_gateway.replies[ANALYSIS_PURPOSE] = "It went well."
    client = TestClient(create_app(controller))

    start = client.post("/api/interview/start", json={"topic": "Remote work"}).json()
    assert start["plan"]["focusAreas"] == ["Understanding", "Experience", "Perspectives"]
    assert start["session"]["transcript"][1]["content"].endswith("What is your experience with Remote work?")

    for answer in ("one", "two", "three"):
        client.post("/api/interview/message", json={"sessionId": start["sessionId"], "message": answer})

    analysis = client.post("/api/interview/complete", json={"sessionId": start["sessionId"]}).json()["analysis"]
    assert analysis["depthScore"] == 3
    assert analysis["completionRate"] == 0.8
