from __future__ import annotations

import threading
import time
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

import api.routes as routes_module
from api_server import create_app
from config import FOLLOWUP_PURPOSE
from llm_gateway import LlmGatewayError


@pytest.fixture
def client(controller):
    return TestClient(create_app(controller))


@pytest.fixture
def role_client(role_controller):
    return TestClient(create_app(role_controller))


def _start(client, topic="AI in healthcare"):
    resp = client.post("/api/interview/start", json={"topic": topic})
    assert resp.status_code == 200
    return resp.json()


def test_start_returns_camel_case_payload(client):
    body = _start(client)
    assert body["sessionId"] == body["session"]["id"]
    assert body["session"]["status"] == "interviewing"
    assert body["session"]["interviewStartedAt"] is not None
    assert len(body["session"]["transcript"]) == 2
    assert "focusAreas" in body["plan"]
    assert 8 <= len(body["plan"]["questions"]) <= 12


def test_start_by_role(role_client, role_plans):
    resp = role_client.post("/api/interview/start", json={"role": "researcher"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["session"]["role"] == "researcher"
    assert body["plan"]["questions"] == role_plans["researcher"].questions


@pytest.mark.parametrize("payload", [{}, {"topic": ""}, {"topic": "   "}])
def test_start_requires_topic(client, payload):
    resp = client.post("/api/interview/start", json=payload)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Topic is required"


def test_malformed_body_is_bad_request(client):
    resp = client.post("/api/interview/start", content="not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    resp = client.post("/api/interview/message", json={"sessionId": ["x"], "message": "hi"})
    assert resp.status_code == 400


def test_message_flow_and_wrap_up_flag(client):
    session_id = _start(client)["sessionId"]

    resp = client.post("/api/interview/message", json={"sessionId": session_id, "message": "I use it daily."})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Tell me more."
    assert body["wrapUp"] is False
    assert body["session"]["transcript"][-1]["role"] == "assistant"

    resp = client.post(
        "/api/interview/message",
        json={"sessionId": session_id, "message": "That is all.", "isWrapUp": True},
    )
    assert resp.json()["wrapUp"] is True
    assert resp.json()["reason"] == "client"


def test_message_validation_and_lookup(client):
    resp = client.post("/api/interview/message", json={"sessionId": "abc"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Session ID and message are required"

    resp = client.post("/api/interview/message", json={"sessionId": "missing", "message": "hi"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Session not found"


def test_complete_and_repeat(client):
    session_id = _start(client)["sessionId"]
    client.post("/api/interview/message", json={"sessionId": session_id, "message": "Hi"})

    resp = client.post("/api/interview/complete", json={"sessionId": session_id})
    assert resp.status_code == 200
    body = resp.json()
    assert body["analysis"]["depthScore"] == 1
    assert body["analysis"]["completionRate"] <= 0.2
    assert body["session"]["status"] == "completed"

    again = client.post("/api/interview/complete", json={"sessionId": session_id})
    assert again.status_code == 400

    late = client.post("/api/interview/message", json={"sessionId": session_id, "message": "wait"})
    assert late.status_code == 400


def test_complete_requires_session_id(client):
    assert client.post("/api/interview/complete", json={}).status_code == 400
    assert client.post("/api/interview/complete", json={"sessionId": "missing"}).status_code == 404


def test_missing_plan_is_server_error(client, store):
    bare = store.create_session("AI")
    resp = client.post("/api/interview/complete", json={"sessionId": bare.id})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Interview plan not found"


def test_upstream_failure_is_server_error(client, fake_gateway):
    session_id = _start(client)["sessionId"]
    fake_gateway.replies[FOLLOWUP_PURPOSE] = LlmGatewayError("LLM returned status 502")

    resp = client.post("/api/interview/message", json={"sessionId": session_id, "message": "hello"})

    assert resp.status_code == 500
    assert "LLM request failed" in resp.json()["detail"]


def test_get_session_and_pacing(client, clock):
    session_id = _start(client)["sessionId"]

    resp = client.get(f"/api/interview/{session_id}")
    assert resp.status_code == 200
    assert resp.json()["session"]["id"] == session_id

    clock.advance(minutes=3)
    pacing = client.get(f"/api/interview/{session_id}/pacing").json()
    assert pacing["elapsedMs"] == 180_000
    assert pacing["userMessages"] == 0
    assert pacing["shouldNudge"] is True
    assert pacing["shouldWrapUp"] is False
    assert pacing["nudge"]

    assert client.get("/api/interview/missing").status_code == 404
    assert client.get("/api/interview/missing/pacing").status_code == 404


def test_lazy_controller_is_built_once(controller, monkeypatch):
    built = []

    def slow_build():
        time.sleep(0.05)
        built.append(controller)
        return controller

    monkeypatch.setattr(routes_module, "build_controller", slow_build)
    request = SimpleNamespace(app=create_app())
    resolved = []
    threads = [
        threading.Thread(target=lambda: resolved.append(routes_module.get_controller(request)))
        for _ in range(4)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(built) == 1
    assert len(resolved) == 4
    assert all(item is controller for item in resolved)
