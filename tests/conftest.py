import datetime as dt
import json
import os
import sys
from pathlib import Path

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import ANALYSIS_PURPOSE, FOLLOWUP_PURPOSE, PLAN_PURPOSE, WRAPUP_PURPOSE
from config.settings import settings
from interview.controller import InterviewController
from interview.plans import FixedPlanProvider, GeneratedPlanProvider, load_role_plans
from llm_gateway import Completion
from services.pacing import PacingPolicy
from storage.sessions import SessionStore


PLAN_JSON = {
    "objectives": [
        "Understand how the interviewee uses AI day to day",
        "Surface benefits they have noticed",
        "Surface concerns and risks",
        "Collect ideas for better support",
    ],
    "questions": [f"Question {index}?" for index in range(1, 11)],
    "focusAreas": ["Usage", "Benefits", "Concerns", "Support"],
}

ANALYSIS_JSON = {
    "summary": "The interviewee described regular, careful use of AI tools.",
    "keyInsights": ["Uses AI for drafting", "Worries about accuracy"],
    "depthScore": 4,
    "completionRate": 0.9,
    "recommendations": ["Offer guidance on verifying outputs"],
}

DEFAULT_REPLIES = {
    PLAN_PURPOSE: "Here is the plan:\n```json\n" + json.dumps(PLAN_JSON) + "\n```",
    FOLLOWUP_PURPOSE: "Tell me more.",
    WRAPUP_PURPOSE: "Thank you, this was really helpful. Any final thoughts before we finish?",
    ANALYSIS_PURPOSE: json.dumps(ANALYSIS_JSON),
}


class FakeGateway:
    """Records every prompt and answers with a canned reply per purpose."""

    def __init__(self, replies=None, model="gpt-4o", total_tokens=None):
        self.replies = dict(DEFAULT_REPLIES)
        self.replies.update(replies or {})
        self.model = model
        self.total_tokens = total_tokens
        self.calls = []

    def invoke(self, prompt, *, purpose):
        self.calls.append((purpose, prompt))
        reply = self.replies[purpose]
        if isinstance(reply, Exception):
            raise reply
        return Completion(text=reply, model=self.model, total_tokens=self.total_tokens)

    def purposes(self):
        return [purpose for purpose, _ in self.calls]


class FakeClock:
    def __init__(self, start=None):
        self.now = start or dt.datetime(2024, 5, 1, 9, 0, tzinfo=dt.timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **delta):
        self.now = self.now + dt.timedelta(**delta)


@pytest.fixture(autouse=True)
def tmp_db(tmp_path, monkeypatch):
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    return db_path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_db, clock):
    return SessionStore(tmp_db, clock=clock)


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def controller(store, fake_gateway, clock):
    return InterviewController(
        store,
        fake_gateway,
        GeneratedPlanProvider(fake_gateway),
        policy=PacingPolicy(),
        clock=clock,
    )


@pytest.fixture
def role_plans():
    return load_role_plans()


@pytest.fixture
def role_controller(store, fake_gateway, clock, role_plans):
    return InterviewController(
        store,
        fake_gateway,
        FixedPlanProvider(role_plans),
        policy=PacingPolicy(),
        clock=clock,
    )
