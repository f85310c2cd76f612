"""
Unit tests for the request orchestration layer.
"""

import threading
import time

import pytest

from careercompass.analysis.schemas import AnalysisResult
from careercompass.errors import ChatGenerationError, NotFoundError, ValidationError
from careercompass.service import CareerCompassService
from careercompass.storage.memory import MemStorage

from .conftest import ANALYSIS_PAYLOAD


class SlowAnalysisAgent:
    """Counts calls and holds each one long enough for requests to overlap."""

    def __init__(self, delay=0.05):
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def analyze_profile(self, profile):
        with self._lock:
            self.calls += 1
        time.sleep(self.delay)
        return AnalysisResult.model_validate(ANALYSIS_PAYLOAD)


class TestProfiles:
    def test_create_and_get(self, service, profile_data):
        created = service.create_profile(profile_data)

        fetched = service.get_profile(created.id)

        assert fetched == created
        assert fetched.full_name == "Ana"
        assert fetched.field_of_study is None

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"fullName": ""}, "at least 2 characters"),
            ({"fullName": "A"}, "at least 2 characters"),
            ({"interests": []}, "at least one interest"),
            ({"interests": ["  "]}, "at least one interest"),
            ({"age": ""}, "select your age"),
            ({"educationLevel": " "}, "education level"),
        ],
    )
    def test_invalid_profiles_are_rejected(self, service, profile_data, overrides, message):
        with pytest.raises(ValidationError) as excinfo:
            service.create_profile({**profile_data, **overrides})
        assert message in excinfo.value.message

    def test_missing_required_field(self, service, profile_data):
        del profile_data["educationLevel"]
        with pytest.raises(ValidationError) as excinfo:
            service.create_profile(profile_data)
        assert "educationLevel" in excinfo.value.message

    def test_blank_optional_fields_become_none(self, service, profile_data):
        profile = service.create_profile({**profile_data, "skills": "  ", "hobbies": "Chess"})
        assert profile.skills is None
        assert profile.hobbies == "Chess"

    def test_get_unknown_profile(self, service):
        with pytest.raises(NotFoundError):
            service.get_profile("missing")

    def test_partial_update(self, service, profile_data):
        profile = service.create_profile({**profile_data, "skills": "Python"})

        updated = service.update_profile(profile.id, {"careerGoals": "Data scientist"})

        assert updated.career_goals == "Data scientist"
        assert updated.skills == "Python"
        assert updated.interests == ["Technology"]

    def test_update_cannot_clear_required_fields(self, service, profile_data):
        profile = service.create_profile(profile_data)

        with pytest.raises(ValidationError):
            service.update_profile(profile.id, {"interests": []})
        with pytest.raises(ValidationError):
            service.update_profile(profile.id, {"fullName": None})

    def test_update_unknown_profile(self, service):
        with pytest.raises(NotFoundError):
            service.update_profile("missing", {"skills": "x"})


class TestEnsureAnalysis:
    def test_generates_once_then_reuses(self, service, profile_data, analysis_openai):
        profile = service.create_profile(profile_data)

        first = service.ensure_analysis(profile.id)
        second = service.ensure_analysis(profile.id)

        assert first.id == second.id
        assert first == second
        assert len(analysis_openai.calls) == 1
        assert service.get_analysis(profile.id) == first

    def test_ana_scenario_shape(self, service, profile_data):
        profile = service.create_profile(profile_data)

        analysis = service.ensure_analysis(profile.id)

        assert analysis.profile_id == profile.id
        assert analysis.strengths
        assert 3 <= len(analysis.career_opportunities) <= 4
        assert 3 <= len(analysis.skills_to_learn) <= 4
        assert len(analysis.learning_roadmap) == 3

    @pytest.mark.parametrize("profile_id", [None, "", "   "])
    def test_requires_profile_id(self, service, profile_id, analysis_openai):
        with pytest.raises(ValidationError):
            service.ensure_analysis(profile_id)
        assert analysis_openai.calls == []

    def test_unknown_profile(self, service, analysis_openai):
        with pytest.raises(NotFoundError):
            service.ensure_analysis("missing")
        assert analysis_openai.calls == []

    def test_get_analysis_before_generation(self, service, profile_data):
        profile = service.create_profile(profile_data)
        with pytest.raises(NotFoundError):
            service.get_analysis(profile.id)

    def test_concurrent_requests_generate_once(self, profile_data):
        agent = SlowAnalysisAgent()
        service = CareerCompassService(MemStorage(), analysis_agent=agent)
        profile = service.create_profile(profile_data)

        results = []
        threads = [
            threading.Thread(target=lambda: results.append(service.ensure_analysis(profile.id)))
            for _ in range(5)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert agent.calls == 1
        assert len({r.id for r in results}) == 1
        assert len(service.storage.career_analyses) == 1


class TestConversations:
    def test_create_and_lookup_by_profile(self, service, profile_data):
        profile = service.create_profile(profile_data)

        conversation = service.create_conversation({"profileId": profile.id, "messages": []})

        assert service.get_conversation_by_profile(profile.id).id == conversation.id
        assert conversation.messages == []

    def test_orphan_profile_reference_is_accepted(self, service):
        conversation = service.create_conversation({"profileId": "not-yet-created"})
        assert conversation.profile_id == "not-yet-created"

    def test_invalid_message_role(self, service):
        with pytest.raises(ValidationError):
            service.create_conversation({"messages": [{"role": "system", "content": "x"}]})

    def test_lookup_unknown_profile(self, service):
        with pytest.raises(NotFoundError):
            service.get_conversation_by_profile("missing")


class TestChat:
    def test_two_turns_grow_history_in_order(self, service, profile_data):
        profile = service.create_profile(profile_data)
        conversation = service.create_conversation({"profileId": profile.id})

        service.chat("Hi", profile.id, conversation.id)
        service.chat("What about data science?", profile.id, conversation.id)

        messages = service.get_conversation(conversation.id).messages
        assert [(m.role, m.content) for m in messages] == [
            ("user", "Hi"),
            ("assistant", "Mentor says: Hi"),
            ("user", "What about data science?"),
            ("assistant", "Mentor says: What about data science?"),
        ]

    def test_concurrent_turns_on_one_conversation_keep_every_pair(self, service):
        conversation = service.create_conversation({})
        messages = [f"Question {i}" for i in range(8)]

        threads = [
            threading.Thread(target=service.chat, args=(message, None, conversation.id))
            for message in messages
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stored = service.get_conversation(conversation.id).messages
        assert len(stored) == 2 * len(messages)
        pairs = [(stored[i], stored[i + 1]) for i in range(0, len(stored), 2)]
        for user, assistant in pairs:
            assert user.role == "user"
            assert assistant.role == "assistant"
            assert assistant.content == f"Mentor says: {user.content}"
        assert sorted(user.content for user, _ in pairs) == sorted(messages)

    def test_without_conversation_nothing_is_stored(self, service):
        reply = service.chat("Hi")

        assert reply == "Mentor says: Hi"
        assert len(service.storage.conversations) == 0

    def test_profile_context_is_sent(self, service, profile_data, chat_openai):
        profile = service.create_profile(profile_data)

        service.chat("Hi", profile_id=profile.id)

        assert "Student Context:" in chat_openai.calls[0]["messages"][0]["content"]

    def test_unknown_profile_and_conversation_still_answer(self, service, chat_openai):
        assert service.chat("Hi", "missing-profile", "missing-conversation") == "Mentor says: Hi"
        assert "Student Context:" not in chat_openai.calls[0]["messages"][0]["content"]

    @pytest.mark.parametrize("message", [None, "", "   "])
    def test_blank_message_rejected_before_model_call(self, service, chat_openai, message):
        with pytest.raises(ValidationError):
            service.chat(message)
        assert chat_openai.calls == []

    def test_generation_failure_leaves_history_untouched(self, storage):
        from careercompass.mentor_chat.agent import MentorChatAgent

        from .conftest import FakeOpenAI

        service = CareerCompassService(storage, chat_agent=MentorChatAgent(client=FakeOpenAI(RuntimeError("x"))))
        conversation = service.create_conversation({})

        with pytest.raises(ChatGenerationError):
            service.chat("Hi", conversation_id=conversation.id)
        assert service.get_conversation(conversation.id).messages == []
