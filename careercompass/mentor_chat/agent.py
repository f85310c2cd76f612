import logging
from typing import Any, Optional

from ..analysis.client import DEFAULT_MODEL, get_openai_client
from ..errors import ChatGenerationError
from ..storage.schemas import StudentProfile
from .prompts import (
    CHAT_CLOSING_INSTRUCTION,
    CHAT_SYSTEM_INSTRUCTIONS,
    FALLBACK_REPLY,
    STUDENT_CONTEXT_TEMPLATE,
)

logger = logging.getLogger(__name__)


def build_system_message(profile: Optional[StudentProfile] = None) -> str:
    parts = [CHAT_SYSTEM_INSTRUCTIONS]
    if profile is not None:
        parts.append(
            STUDENT_CONTEXT_TEMPLATE.format(
                full_name=profile.full_name,
                education_level=profile.education_level,
                interests=", ".join(profile.interests) or "Not specified",
                skills=profile.skills or "Not specified",
                career_goals=profile.career_goals or "Not specified",
            )
        )
    parts.append(CHAT_CLOSING_INSTRUCTION)
    return "\n\n".join(parts)


class MentorChatAgent:
    def __init__(self, model: Optional[str] = None, client: Any = None):
        self.client = client or get_openai_client()
        self.model = model or DEFAULT_MODEL

    def reply(self, message: str, profile: Optional[StudentProfile] = None) -> str:
        """
        Sends one user message, personalised with the profile if given.
        Earlier turns are not replayed to the model.
        """
        messages = [
            {"role": "system", "content": build_system_message(profile)},
            {"role": "user", "content": message},
        ]

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
            )
            content = completion.choices[0].message.content
        except Exception as e:
            logger.error("Chat request failed (profile=%s): %s", profile.id if profile else None, e)
            raise ChatGenerationError() from e

        return content if content and content.strip() else FALLBACK_REPLY
