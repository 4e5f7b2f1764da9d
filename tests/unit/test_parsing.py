from __future__ import annotations

import json

from interview.models import GeneratedPlan, InterviewAnalysis
from interview.parsing import candidates, fenced_json, first_brace_span, parse_reply


ANALYSIS = {
    "summary": "Short but useful chat.",
    "keyInsights": ["One"],
    "depthScore": 3,
    "completionRate": 0.5,
}


def test_fenced_json_extracts_block_body():
    text = "Sure!\n```json\n{\"a\": 1}\n```\nThanks"
    assert fenced_json(text) == '{"a": 1}'
    assert fenced_json("no fence here") is None


def test_first_brace_span_ignores_braces_in_strings():
    text = 'prefix {"summary": "curly } inside", "nested": {"x": 1}} trailing {junk}'
    assert first_brace_span(text) == '{"summary": "curly } inside", "nested": {"x": 1}}'


def test_first_brace_span_unbalanced_uses_last_closing_brace():
    assert first_brace_span('{"a": {"b": 1}') == '{"a": {"b": 1}'
    assert first_brace_span("nothing") is None


def test_candidates_are_ordered_and_deduplicated():
    body = json.dumps(ANALYSIS)
    text = f"```json\n{body}\n```"
    found = list(candidates(text))
    assert found[0] == body
    assert len(found) == len(set(found))


def test_parse_reply_prefers_fenced_block():
    text = 'Ignore {"summary": ""} please.\n```json\n' + json.dumps(ANALYSIS) + "\n```"
    parsed = parse_reply(text, InterviewAnalysis)
    assert parsed is not None
    assert parsed.summary == "Short but useful chat."


def test_parse_reply_falls_through_to_brace_span():
    text = "Here you go: " + json.dumps(ANALYSIS) + " hope it helps"
    parsed = parse_reply(text, InterviewAnalysis)
    assert parsed is not None
    assert parsed.depth_score == 3


def test_parse_reply_raw_text():
    parsed = parse_reply(json.dumps(ANALYSIS), InterviewAnalysis)
    assert parsed is not None
    assert parsed.key_insights == ["One"]


def test_parse_reply_rejects_schema_violations():
    bad_depth = dict(ANALYSIS, depthScore=9)
    assert parse_reply(json.dumps(bad_depth), InterviewAnalysis) is None
    assert parse_reply("not json at all", InterviewAnalysis) is None


def test_generated_plan_bounds():
    short = {"objectives": ["a", "b", "c"], "questions": ["q"] * 5, "focusAreas": ["x", "y", "z"]}
    assert parse_reply(json.dumps(short), GeneratedPlan) is None

    long = {
        "objectives": [f"o{i}" for i in range(7)],
        "questions": [f"q{i}" for i in range(15)],
        "focusAreas": [f"f{i}" for i in range(6)],
    }
    parsed = parse_reply(json.dumps(long), GeneratedPlan)
    assert parsed is not None
    assert len(parsed.objectives) == 5
    assert len(parsed.questions) == 12
    assert len(parsed.focus_areas) == 5
