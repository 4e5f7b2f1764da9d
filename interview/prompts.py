"""Prompt templates for plan generation, follow-ups, wrap-up and analysis."""
from __future__ import annotations

from textwrap import dedent
from typing import Sequence

from .models import InterviewPlan, Message


def bullet_list(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def format_history(history: Sequence[Message]) -> str:
    return "\n".join(f"{message.role}: {message.content}" for message in history)


def plan_prompt(topic: str) -> str:
    return dedent(
        f"""
        You are an expert interviewer. Create a comprehensive interview plan for the topic: "{topic}"

        Generate:
        1. 3-5 clear objectives for this interview
        2. 8-12 initial questions that will help explore the topic deeply
        3. 3-5 focus areas to probe during the conversation

        Return your response as a JSON object with this structure:
        {{
          "objectives": ["objective1", "objective2", ...],
          "questions": ["question1", "question2", ...],
          "focusAreas": ["area1", "area2", ...]
        }}
        """
    ).strip()


def _conversation_block(topic: str, plan: InterviewPlan, history: Sequence[Message], current_message: str) -> str:
    return (
        f'You are conducting an in-depth interview about "{topic}".\n\n'
        f"Interview Objectives:\n{bullet_list(plan.objectives)}\n\n"
        f"Focus Areas:\n{bullet_list(plan.focus_areas)}\n\n"
        f"Previous conversation:\n{format_history(history)}\n\n"
        f"Interviewee's latest response: {current_message}"
    )


FOLLOWUP_INSTRUCTIONS = dedent(
    """
    Your task:
    1. Acknowledge their response naturally
    2. Ask a probing follow-up question that digs deeper
    3. Explore the focus areas that haven't been covered yet
    4. Keep the conversation natural and conversational
    5. If they've answered thoroughly, you can move to a new question from the plan

    Respond as the interviewer with your next question or follow-up. Be conversational and engaging.
    """
).strip()


WRAPUP_INSTRUCTIONS = dedent(
    """
    The interview is nearing its end. Your task:
    1. Acknowledge their response warmly
    2. Do not open a new line of questioning
    3. Briefly reflect one or two themes they raised
    4. Invite any final thoughts or anything they feel was missed
    5. Let them know they can finish the interview whenever they are ready

    Respond as the interviewer with a short closing message.
    """
).strip()


def followup_prompt(topic: str, plan: InterviewPlan, history: Sequence[Message], current_message: str) -> str:
    return f"{_conversation_block(topic, plan, history, current_message)}\n\n{FOLLOWUP_INSTRUCTIONS}"


def wrapup_prompt(topic: str, plan: InterviewPlan, history: Sequence[Message], current_message: str) -> str:
    return f"{_conversation_block(topic, plan, history, current_message)}\n\n{WRAPUP_INSTRUCTIONS}"


def analysis_prompt(topic: str, plan: InterviewPlan, transcript: Sequence[Message]) -> str:
    transcript_text = "\n\n".join(
        f"{message.role}: {message.content}" for message in transcript if message.role != "system"
    )
    return dedent(
        """
        Analyze this interview transcript about "{topic}".

        Interview Objectives:
        {objectives}

        Transcript:
        {transcript}

        IMPORTANT: Base your analysis ONLY on what was actually discussed in the transcript. Do not make assumptions or generate insights based solely on the objectives.

        Provide a comprehensive analysis as JSON:
        {{
          "summary": "A 2-3 sentence summary of the interview based ONLY on actual responses",
          "keyInsights": ["insight1", "insight2", "insight3"],
          "depthScore": 4,
          "completionRate": 0.95,
          "recommendations": ["recommendation1", "recommendation2"]
        }}

        Depth Score: Rate 1-5 how deeply the topic was explored based on actual responses (5 = very deep)
        Completion Rate: 0-1, how much of the interview plan was completed based on actual discussion
        Key Insights: 3-5 main takeaways from actual responses only
        Recommendations: Optional suggestions for follow-up or action items
        """
    ).strip().format(topic=topic, objectives=bullet_list(plan.objectives), transcript=transcript_text)


__all__ = [
    "FOLLOWUP_INSTRUCTIONS",
    "WRAPUP_INSTRUCTIONS",
    "analysis_prompt",
    "bullet_list",
    "followup_prompt",
    "format_history",
    "plan_prompt",
    "wrapup_prompt",
]
