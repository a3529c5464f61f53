"""Prompt and payload builders for resume analysis and optimization."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

SYSTEM_PROMPT = """
You are a strict, world-class Applicant Tracking System (ATS) simulator. Your sole purpose is to analyze a candidate's RESUME against a provided JOB DESCRIPTION.

You must perform the following actions:
1.  **Parseability Check:** First, check the RESUME for any obvious parsing errors like columns, tables, or special characters. Assume plain text is 100% parseable.
2.  **Keyword Matching:** Scour the RESUME for direct keyword matches from the JOB DESCRIPTION. Focus on skills, technologies, and required experience.
3.  **Metric Analysis:** Identify and extract quantifiable metrics from the RESUME (e.g., "5 hours", "12 reports", "2 days", "20% increase"). This is extremely important.
4.  **Scoring:** Provide an "overallScore" from 0 to 100, representing the percentage of the JOB DESCRIPTION that is covered by the RESUME.
5.  **Feedback:** Provide a "summary" of your findings, a list of "strengths" (direct keyword/concept matches), and a list of "weaknesses" (missing keywords/experience).

You MUST return your analysis ONLY in the specified JSON format. Do not include any other text.
"""

OPTIMIZER_SYSTEM_PROMPT = "Professional resume optimizer."

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "overallScore": {"type": "NUMBER"},
        "parseabilityScore": {"type": "NUMBER"},
        "summary": {"type": "STRING"},
        "strengths": {"type": "ARRAY", "items": {"type": "STRING"}},
        "weaknesses": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": [
        "overallScore",
        "parseabilityScore",
        "summary",
        "strengths",
        "weaknesses",
    ],
}


def _user_turn(text: str) -> list[dict[str, Any]]:
    return [{"role": "user", "parts": [{"text": text}]}]


def build_analysis_payload(job_description: str, resume: str) -> dict[str, Any]:
    """Build the generateContent payload that scores a resume against a JD."""
    return {
        "contents": _user_turn(f"JD:\n{job_description}\n\nResume:\n{resume}"),
        "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def build_optimization_payload(
    job_description: str,
    resume: str,
    gaps: Sequence[str],
) -> dict[str, Any]:
    """Build the payload that asks for a rewritten resume covering ``gaps``."""
    prompt = (
        "Rewrite the resume to address missing keywords while maintaining accuracy. "
        f"JD: {job_description}. Gaps: {', '.join(gaps)}. Resume: {resume}."
    )
    return {
        "contents": _user_turn(prompt),
        "systemInstruction": {"parts": [{"text": OPTIMIZER_SYSTEM_PROMPT}]},
        "generationConfig": {"responseMimeType": "text/plain"},
    }
