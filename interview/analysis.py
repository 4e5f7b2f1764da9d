"""Closing analysis with engagement gating.

The model is only asked for an analysis once the interviewee has given
enough answers; empty and near-empty transcripts get canned results so the
model never has to invent insights.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from pydantic import BaseModel

from config import ANALYSIS_PURPOSE
from llm_gateway import Completion, Gateway

from .models import EngagementTier, InterviewAnalysis, InterviewPlan, Message
from .parsing import parse_reply
from .prompts import analysis_prompt

logger = logging.getLogger(__name__)

MINIMAL_ENGAGEMENT_MAX = 2


class AnalysisOutcome(BaseModel):
    analysis: InterviewAnalysis
    tier: EngagementTier
    prompt: Optional[str] = None
    completion: Optional[Completion] = None
    fallback: bool = False


def count_user_messages(transcript: Sequence[Message]) -> int:
    return sum(1 for message in transcript if message.role == "user")


def engagement_tier(user_count: int) -> EngagementTier:
    if user_count <= 0:
        return "none"
    if user_count <= MINIMAL_ENGAGEMENT_MAX:
        return "minimal"
    return "sufficient"


def no_engagement_analysis(topic: str) -> InterviewAnalysis:
    return InterviewAnalysis(
        summary=(
            f"Interview was started but not completed. No responses were provided to explore the topic of {topic}."
        ),
        key_insights=["Interview incomplete - no user responses recorded"],
        depth_score=0,
        completion_rate=0,
        recommendations=["Complete the interview by responding to the interviewer's questions"],
    )


def minimal_engagement_analysis(topic: str, user_count: int) -> InterviewAnalysis:
    return InterviewAnalysis(
        summary=(
            f"Interview was briefly started but ended early with minimal engagement on the topic of {topic}."
        ),
        key_insights=[
            "Interview incomplete - only minimal responses provided",
            "Insufficient data to extract meaningful insights",
        ],
        depth_score=1,
        completion_rate=min(0.2, user_count / 10),
        recommendations=["Continue the interview to explore the topic more thoroughly"],
    )


def fallback_analysis(topic: str) -> InterviewAnalysis:
    return InterviewAnalysis(
        summary=f"Interview completed on {topic}. The conversation explored various aspects of the topic.",
        key_insights=["Interview completed successfully"],
        depth_score=3,
        completion_rate=0.8,
    )


class AnalysisGenerator:
    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway

    def analyze(self, topic: str, plan: InterviewPlan, transcript: Sequence[Message]) -> AnalysisOutcome:
        user_count = count_user_messages(transcript)
        tier = engagement_tier(user_count)
        if tier == "none":
            return AnalysisOutcome(analysis=no_engagement_analysis(topic), tier=tier)
        if tier == "minimal":
            return AnalysisOutcome(analysis=minimal_engagement_analysis(topic, user_count), tier=tier)

        prompt = analysis_prompt(topic, plan, transcript)
        completion = self._gateway.invoke(prompt, purpose=ANALYSIS_PURPOSE)
        analysis = parse_reply(completion.text, InterviewAnalysis)
        fallback = analysis is None
        if analysis is None:
            logger.debug("Analysis reply did not validate; using fallback analysis for topic=%r", topic)
            analysis = fallback_analysis(topic)
        return AnalysisOutcome(
            analysis=analysis,
            tier=tier,
            prompt=prompt,
            completion=completion,
            fallback=fallback,
        )


__all__ = [
    "AnalysisGenerator",
    "AnalysisOutcome",
    "count_user_messages",
    "engagement_tier",
    "fallback_analysis",
    "minimal_engagement_analysis",
    "no_engagement_analysis",
]
