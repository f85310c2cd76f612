"""
Unit tests for the in-memory entity store.
"""

import pytest

from careercompass.errors import ValidationError
from careercompass.storage.memory import EntityTable, MemStorage
from careercompass.storage.schemas import ChatMessage, StudentProfile


def _profile(**overrides):
    data = {
        "full_name": "Ana",
        "age": "19-21",
        "education_level": "Undergraduate",
        "interests": ["Technology"],
    }
    data.update(overrides)
    return data


class TestEntityTable:
    def test_create_assigns_unique_ids_and_created_at(self):
        table = EntityTable(StudentProfile)
        first = table.create(_profile())
        second = table.create(_profile(full_name="Ben"))

        assert first.id != second.id
        assert first.created_at is not None
        assert len(table) == 2

    def test_create_ignores_caller_supplied_id(self):
        table = EntityTable(StudentProfile)
        record = table.create({**_profile(), "id": "chosen"})
        assert record.id != "chosen"

    def test_get_missing_returns_none(self):
        assert EntityTable(StudentProfile).get("nope") is None

    def test_update_is_shallow_merge(self):
        table = EntityTable(StudentProfile)
        record = table.create(_profile(skills="Python"))

        updated = table.update(record.id, {"hobbies": "Chess"})

        assert updated.hobbies == "Chess"
        assert updated.skills == "Python"
        assert updated.full_name == "Ana"
        assert updated.created_at == record.created_at

    def test_update_cannot_change_id_or_created_at(self):
        table = EntityTable(StudentProfile)
        record = table.create(_profile())

        updated = table.update(record.id, {"id": "other", "created_at": None})

        assert updated.id == record.id
        assert updated.created_at == record.created_at

    def test_update_missing_returns_none(self):
        assert EntityTable(StudentProfile).update("nope", {"skills": "x"}) is None

    def test_returned_records_are_copies(self):
        table = EntityTable(StudentProfile)
        record = table.create(_profile())

        record.interests.append("Business")

        assert table.get(record.id).interests == ["Technology"]

    def test_find_by_returns_first_match_in_insertion_order(self):
        table = EntityTable(StudentProfile)
        first = table.create(_profile(age="16-18"))
        table.create(_profile(age="16-18", full_name="Ben"))

        assert table.find_by(lambda r: r.age == "16-18").id == first.id
        assert table.find_by(lambda r: r.age == "25+") is None

    def test_get_by_index_requires_index(self):
        with pytest.raises(TypeError):
            EntityTable(StudentProfile).get_by_index("x")


class TestMemStorage:
    def test_usernames_are_unique(self):
        storage = MemStorage()
        user = storage.create_user("ana", "secret")

        assert storage.get_user(user.id) == user
        assert storage.get_user_by_username("ana") == user
        with pytest.raises(ValidationError):
            storage.create_user("ana", "other")

    def test_first_analysis_for_profile_wins(self, analysis_payload):
        storage = MemStorage()
        fields = {
            "strengths": analysis_payload["strengths"],
            "career_opportunities": analysis_payload["careerOpportunities"],
            "skills_to_learn": analysis_payload["skillsToLearn"],
            "learning_roadmap": analysis_payload["learningRoadmap"],
        }
        first = storage.create_career_analysis({"profile_id": "p1", **fields})
        storage.create_career_analysis({"profile_id": "p1", **fields})

        assert storage.get_career_analysis_by_profile_id("p1").id == first.id
        assert storage.get_career_analysis_by_profile_id("p2") is None

    def test_conversation_lookup_by_profile(self):
        storage = MemStorage()
        conversation = storage.create_conversation({"profile_id": "p1", "messages": []})
        storage.create_conversation({"profile_id": None, "messages": []})

        assert storage.get_conversation_by_profile_id("p1").id == conversation.id
        assert storage.get_conversation_by_profile_id("p2") is None

    def test_append_messages_preserves_order(self):
        storage = MemStorage()
        conversation = storage.create_conversation({"messages": []})

        storage.append_messages(conversation.id, [ChatMessage(role="user", content="Hi")])
        updated = storage.append_messages(
            conversation.id,
            [ChatMessage(role="user", content="Again"), ChatMessage(role="assistant", content="Hello")],
        )

        assert [m.content for m in updated.messages] == ["Hi", "Again", "Hello"]
        assert storage.append_messages("missing", []) is None
