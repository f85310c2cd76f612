"""Career analysis agent.

The core entrypoint is :class:`CareerAnalysisAgent`, which:
- Maintains no internal state and caches nothing (every call is a fresh
  model request; memoization is the service layer's job).
- Calls OpenAI chat completions in JSON mode with the whole profile
  embedded in the prompt.
- Validates the reply against :class:`AnalysisResult` and raises
  :class:`AnalysisGenerationError` on any failure, without retrying.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import AnalysisGenerationError
from ..storage.schemas import StudentProfile
from .client import DEFAULT_MODEL, get_openai_client
from .prompts import ANALYSIS_PROMPT_TEMPLATE, ANALYSIS_SYSTEM_INSTRUCTIONS, NOT_SPECIFIED
from .schemas import AnalysisResult


logger = logging.getLogger(__name__)


def _or_not_specified(value: Optional[str]) -> str:
    return value if value else NOT_SPECIFIED


def build_analysis_prompt(profile: StudentProfile) -> str:
    return ANALYSIS_PROMPT_TEMPLATE.format(
        full_name=profile.full_name,
        age=profile.age,
        education_level=profile.education_level,
        field_of_study=_or_not_specified(profile.field_of_study),
        interests=", ".join(profile.interests) or NOT_SPECIFIED,
        skills=_or_not_specified(profile.skills),
        hobbies=_or_not_specified(profile.hobbies),
        career_goals=_or_not_specified(profile.career_goals),
        work_style=_or_not_specified(profile.work_style),
        improvement_areas=_or_not_specified(profile.improvement_areas),
    )


def _strip_code_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text[3:]
        if text.lower().startswith("json"):
            text = text[4:]
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_json_object(raw: Optional[str]) -> Dict[str, Any]:
    raw = _strip_code_fences(raw or "")
    if not raw:
        raise ValueError("Empty model output (expected JSON).")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        # Fallback: try to salvage the first {...} block if extra text leaked in.
        start = raw.find("{")
        end = raw.rfind("}")
        if not 0 <= start < end:
            raise
        data = json.loads(raw[start : end + 1])

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}.")
    return data


class CareerAnalysisAgent:
    """Thin wrapper around chat completions for profile analysis."""

    def __init__(self, model: Optional[str] = None, client: Any = None) -> None:
        self.model = model or DEFAULT_MODEL
        self.client = client or get_openai_client()

    def analyze_profile(self, profile: StudentProfile) -> AnalysisResult:
        messages = [
            {"role": "system", "content": ANALYSIS_SYSTEM_INSTRUCTIONS},
            {"role": "user", "content": build_analysis_prompt(profile)},
        ]

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
            )
            raw = completion.choices[0].message.content
        except Exception as e:
            logger.error("Analysis request failed for profile %s: %s", profile.id, e)
            raise AnalysisGenerationError() from e

        try:
            return AnalysisResult.model_validate(parse_json_object(raw))
        except (ValueError, PydanticValidationError) as e:
            # Make the failure actionable
            snippet = (raw or "")[:400].replace("\n", "\\n")
            logger.error("Unusable analysis for profile %s: %s. Raw snippet: %s", profile.id, e, snippet)
            raise AnalysisGenerationError() from e
