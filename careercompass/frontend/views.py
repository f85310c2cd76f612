"""Client-side view state for the CareerCompass journey.

Four mutually exclusive views (hero, profile, chat, recommendations)
with a fixed set of transitions, plus the per-view state objects:

- :class:`ProfileWizard` walks the three-step profile form.
- :class:`RecommendationsView` loads the analysis for a profile and
  triggers generation at most once when none exists.
- :class:`ChatSession` keeps the local transcript and creates the
  server-side conversation before the first message.

Nothing here renders anything; a UI (or :mod:`careercompass.graph`)
reads these objects and calls their actions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..mentor_chat.prompts import GREETING
from ..storage.schemas import (
    check_age,
    check_education_level,
    check_full_name,
    check_interests,
    utcnow,
)
from .api import APIError, CareerCompassAPI


class ViewState(str, Enum):
    HERO = "hero"
    PROFILE = "profile"
    CHAT = "chat"
    RECOMMENDATIONS = "recommendations"


class InvalidTransition(Exception):
    pass


# (current view, action) -> next view
TRANSITIONS: Dict[tuple, ViewState] = {
    (ViewState.HERO, "start_journey"): ViewState.PROFILE,
    (ViewState.HERO, "open_chat"): ViewState.CHAT,
    (ViewState.PROFILE, "complete_profile"): ViewState.RECOMMENDATIONS,
    (ViewState.RECOMMENDATIONS, "open_chat"): ViewState.CHAT,
    (ViewState.CHAT, "close_chat"): ViewState.HERO,
}


class ViewStateMachine:
    """Which view is showing, and the profile id carried between views."""

    def __init__(self) -> None:
        self.view = ViewState.HERO
        self.profile_id: Optional[str] = None

    def can(self, action: str) -> bool:
        return (self.view, action) in TRANSITIONS

    def _go(self, action: str) -> ViewState:
        try:
            self.view = TRANSITIONS[(self.view, action)]
        except KeyError:
            raise InvalidTransition(f"Cannot {action} from the {self.view.value} view") from None
        return self.view

    def start_journey(self) -> ViewState:
        return self._go("start_journey")

    def open_chat(self) -> ViewState:
        return self._go("open_chat")

    def complete_profile(self, profile_id: str) -> ViewState:
        if not profile_id:
            raise InvalidTransition("A profile id is required to show recommendations")
        self._go("complete_profile")
        self.profile_id = profile_id
        return self.view

    def close_chat(self) -> ViewState:
        return self._go("close_chat")


# --- Profile form ---

STEP_TITLES = ["Basic Info", "Interests & Skills", "Aspirations"]

STEP_FIELDS: List[List[str]] = [
    ["fullName", "age", "educationLevel", "fieldOfStudy"],
    ["interests", "skills", "hobbies"],
    ["careerGoals", "workStyle", "improvementAreas"],
]

_FIELD_CHECKS: Dict[str, Callable[[Any], Any]] = {
    "fullName": check_full_name,
    "age": check_age,
    "educationLevel": check_education_level,
    "interests": check_interests,
}


class FormError(Exception):
    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def empty_form() -> Dict[str, Any]:
    return {
        "fullName": "",
        "age": "",
        "educationLevel": "",
        "fieldOfStudy": "",
        "interests": [],
        "skills": "",
        "hobbies": "",
        "careerGoals": "",
        "workStyle": "",
        "improvementAreas": "",
    }


class ProfileWizard:
    total_steps = len(STEP_FIELDS)

    def __init__(self) -> None:
        self.step = 1
        self.data = empty_form()
        self.submitting = False

    @property
    def progress(self) -> float:
        return self.step / self.total_steps * 100

    @property
    def title(self) -> str:
        return STEP_TITLES[self.step - 1]

    def set(self, field: str, value: Any) -> None:
        if field not in self.data:
            raise KeyError(field)
        self.data[field] = value

    def toggle_interest(self, interest: str) -> None:
        interests = self.data["interests"]
        if interest in interests:
            interests.remove(interest)
        else:
            interests.append(interest)

    def validate_step(self, step: Optional[int] = None) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for field in STEP_FIELDS[(step or self.step) - 1]:
            check = _FIELD_CHECKS.get(field)
            if check is None:
                continue
            try:
                check(self.data[field])
            except ValueError as e:
                errors[field] = str(e)
        return errors

    def validate(self) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for step in range(1, self.total_steps + 1):
            errors.update(self.validate_step(step))
        return errors

    def next_step(self) -> Dict[str, str]:
        """Advance when the current step is valid; return its errors otherwise."""
        errors = self.validate_step()
        if not errors and self.step < self.total_steps:
            self.step += 1
        return errors

    def previous_step(self) -> None:
        if self.step > 1:
            self.step -= 1

    def submit(self, api: CareerCompassAPI) -> Dict[str, Any]:
        errors = self.validate()
        if errors:
            raise FormError(errors)
        self.submitting = True
        try:
            return api.create_profile(dict(self.data))
        finally:
            self.submitting = False


# --- Recommendations ---


class RecommendationsView:
    """Analysis state for one profile.

    After :meth:`mount`, generation is requested only when there is no
    analysis, no request in flight and no earlier error, so repeated
    :meth:`ensure_analysis` calls (re-renders) send at most one request.
    :meth:`retry` clears the error and tries again.
    """

    def __init__(self, api: CareerCompassAPI, profile_id: str) -> None:
        self.api = api
        self.profile_id = profile_id
        self.analysis: Optional[Dict[str, Any]] = None
        self.loading = False
        self.in_flight = False
        self.error: Optional[str] = None

    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        if self.in_flight:
            return "generating"
        if self.error:
            return "error"
        if self.analysis is not None:
            return "ready"
        return "idle"

    def mount(self) -> Optional[Dict[str, Any]]:
        self.loading = True
        try:
            self.analysis = self.api.get_analysis(self.profile_id)
        except APIError as e:
            if not e.is_not_found:
                self.error = e.message
        finally:
            self.loading = False
        return self.ensure_analysis()

    def ensure_analysis(self) -> Optional[Dict[str, Any]]:
        if self.analysis is not None or self.loading or self.in_flight or self.error or not self.profile_id:
            return self.analysis

        self.in_flight = True
        try:
            self.analysis = self.api.generate_analysis(self.profile_id)
        except APIError as e:
            self.error = e.message
        finally:
            self.in_flight = False
        return self.analysis

    def retry(self) -> Optional[Dict[str, Any]]:
        self.error = None
        return self.ensure_analysis()


# --- Mentor chat ---


def _message(role: str, content: str) -> Dict[str, Any]:
    return {"role": role, "content": content, "timestamp": utcnow().isoformat()}


class ChatSession:
    def __init__(self, api: CareerCompassAPI, profile_id: Optional[str] = None) -> None:
        self.api = api
        self.profile_id = profile_id
        self.conversation_id: Optional[str] = None
        self.messages: List[Dict[str, Any]] = [_message("assistant", GREETING)]
        self.sending = False
        self.error: Optional[str] = None

    def load(self) -> None:
        """Pick up the stored conversation for this profile, if any."""
        if not self.profile_id:
            return
        try:
            conversation = self.api.get_conversation_by_profile(self.profile_id)
        except APIError as e:
            if e.is_not_found:
                return
            raise
        self.conversation_id = conversation["id"]
        # Reloading replaces the transcript rather than appending to it.
        self.messages = [self.messages[0], *(conversation.get("messages") or [])]

    def send(self, text: str) -> Optional[str]:
        text = (text or "").strip()
        if not text or self.sending:
            return None

        self.messages.append(_message("user", text))
        self.sending = True
        self.error = None
        try:
            if self.conversation_id is None:
                conversation = self.api.create_conversation(self.profile_id)
                self.conversation_id = conversation["id"]
            reply = self.api.chat(text, self.profile_id, self.conversation_id)
        except APIError as e:
            self.error = e.message
            return None
        finally:
            self.sending = False

        self.messages.append(_message("assistant", reply))
        return reply
