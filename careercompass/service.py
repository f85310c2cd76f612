"""Request orchestration for the CareerCompass API.

:class:`CareerCompassService` sequences store reads/writes and agent
calls for every endpoint. It never talks HTTP: it returns records or
raises :mod:`careercompass.errors` exceptions, which the server maps to
status codes.

Analysis generation is memoized per profile: an existing analysis is
returned as is, and the check-generate-store sequence runs under a
per-profile lock so concurrent requests for one profile make a single
model call.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .analysis.agent import CareerAnalysisAgent
from .errors import NotFoundError, ValidationError
from .mentor_chat.agent import MentorChatAgent
from .storage.memory import Storage
from .storage.schemas import (
    CareerAnalysis,
    ChatMessage,
    Conversation,
    ConversationCreate,
    ProfileCreate,
    ProfileUpdate,
    StudentProfile,
    utcnow,
)


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def describe_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """Turn the first pydantic error into a short user-facing message."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    msg = str(first.get("msg", "Invalid value"))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{loc}: {msg}" if loc else msg


def validate_input(model: Type[ModelT], data: Any) -> ModelT:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e.errors())) from e


class KeyedLocks:
    """One lock per key, created on demand."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def __call__(self, key: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())


class CareerCompassService:
    def __init__(
        self,
        storage: Storage,
        analysis_agent: Optional[CareerAnalysisAgent] = None,
        chat_agent: Optional[MentorChatAgent] = None,
    ) -> None:
        self.storage = storage
        self._analysis_agent = analysis_agent
        self._chat_agent = chat_agent
        self._analysis_locks = KeyedLocks()

    # Agents are built lazily so the app can start without an API key.
    @property
    def analysis_agent(self) -> CareerAnalysisAgent:
        if self._analysis_agent is None:
            self._analysis_agent = CareerAnalysisAgent()
        return self._analysis_agent

    @property
    def chat_agent(self) -> MentorChatAgent:
        if self._chat_agent is None:
            self._chat_agent = MentorChatAgent()
        return self._chat_agent

    # --- profiles ---

    def create_profile(self, data: Any) -> StudentProfile:
        form = validate_input(ProfileCreate, data)
        profile = self.storage.create_student_profile(form.model_dump())
        logger.info("Created profile %s", profile.id)
        return profile

    def get_profile(self, profile_id: str) -> StudentProfile:
        profile = self.storage.get_student_profile(profile_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    def update_profile(self, profile_id: str, data: Any) -> StudentProfile:
        patch = validate_input(ProfileUpdate, data).to_patch()
        profile = self.storage.update_student_profile(profile_id, patch)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    # --- career analysis ---

    def ensure_analysis(self, profile_id: Optional[str]) -> CareerAnalysis:
        """Return the stored analysis for a profile, generating it once if missing."""
        if not profile_id or not str(profile_id).strip():
            raise ValidationError("Profile ID is required")

        profile = self.get_profile(profile_id)

        with self._analysis_locks(profile_id):
            existing = self.storage.get_career_analysis_by_profile_id(profile_id)
            if existing is not None:
                logger.debug("Reusing analysis %s for profile %s", existing.id, profile_id)
                return existing

            logger.info("Generating career analysis for profile %s", profile_id)
            result = self.analysis_agent.analyze_profile(profile)
            analysis = self.storage.create_career_analysis({"profile_id": profile_id, **result.model_dump()})
            logger.info("Stored analysis %s for profile %s", analysis.id, profile_id)
            return analysis

    def get_analysis(self, profile_id: str) -> CareerAnalysis:
        analysis = self.storage.get_career_analysis_by_profile_id(profile_id)
        if analysis is None:
            raise NotFoundError("Career analysis not found")
        return analysis

    # --- conversations ---

    def create_conversation(self, data: Any = None) -> Conversation:
        form = validate_input(ConversationCreate, data or {})
        if form.profile_id and self.storage.get_student_profile(form.profile_id) is None:
            # Orphan references are allowed; the profile may be created later.
            logger.warning("Conversation created for unknown profile %s", form.profile_id)
        conversation = self.storage.create_conversation(form.model_dump())
        logger.info("Created conversation %s (profile=%s)", conversation.id, conversation.profile_id)
        return conversation

    def get_conversation(self, conversation_id: str) -> Conversation:
        conversation = self.storage.get_conversation(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        return conversation

    def get_conversation_by_profile(self, profile_id: str) -> Conversation:
        conversation = self.storage.get_conversation_by_profile_id(profile_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        return conversation

    # --- chat ---

    def chat(
        self,
        message: Optional[str],
        profile_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
    ) -> str:
        """Answer one chat message and, given a conversation, record the turn."""
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required")

        received_at = utcnow()

        profile = self.storage.get_student_profile(profile_id) if profile_id else None
        if profile_id and profile is None:
            logger.warning("Chat for unknown profile %s; answering without context", profile_id)

        reply = self.chat_agent.reply(message, profile)

        if conversation_id:
            turn: Iterable[ChatMessage] = (
                ChatMessage(role="user", content=message, timestamp=received_at),
                ChatMessage(role="assistant", content=reply),
            )
            if self.storage.append_messages(conversation_id, turn) is None:
                logger.warning("Conversation %s not found; chat turn not recorded", conversation_id)

        return reply
