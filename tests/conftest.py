"""
Shared fixtures: a fake OpenAI client, a fresh store/service per test,
and a FastAPI TestClient wired to that service.
"""

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from careercompass.analysis.agent import CareerAnalysisAgent
from careercompass.mentor_chat.agent import MentorChatAgent
from careercompass.server import create_app
from careercompass.service import CareerCompassService
from careercompass.storage.memory import MemStorage


ANALYSIS_PAYLOAD = {
    "strengths": [
        "Curiosity about technology",
        "Analytical thinking",
        "Self-directed learning",
        "Clear communication",
    ],
    "careerOpportunities": [
        {"title": "Software Developer", "match": 92, "description": "Build applications", "demand": "High demand"},
        {"title": "Data Analyst", "match": 85, "description": "Turn data into insight", "demand": "Growing field"},
        {"title": "IT Support Specialist", "match": 74, "description": "Keep systems running", "demand": "Stable market"},
    ],
    "skillsToLearn": [
        {"skill": "Python", "priority": "High", "relevance": 95},
        {"skill": "SQL", "priority": "Medium", "relevance": 80},
        {"skill": "Git", "priority": "Low", "relevance": 60},
    ],
    "learningRoadmap": [
        {"phase": "1", "duration": "Month 1-2", "title": "Foundations", "description": "Learn Python basics", "resources": ["Python docs"]},
        {"phase": "2", "duration": "Month 3-4", "title": "Projects", "description": "Build two small apps", "resources": ["GitHub"]},
        {"phase": "3", "duration": "Month 5-6", "title": "Portfolio", "description": "Publish and apply", "resources": ["LinkedIn"]},
    ],
}


class FakeCompletions:
    """Stands in for ``client.chat.completions``.

    Each reply is a string, an exception to raise, or a callable taking
    the request kwargs. The last reply repeats once the list runs out.
    """

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(kwargs)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeOpenAI:
    def __init__(self, *replies):
        self.completions = FakeCompletions(replies or [""])
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


def echo_reply(kwargs):
    return f"Mentor says: {kwargs['messages'][-1]['content']}"


@pytest.fixture
def analysis_payload():
    return json.loads(json.dumps(ANALYSIS_PAYLOAD))


@pytest.fixture
def profile_data():
    return {
        "fullName": "Ana",
        "age": "19-21",
        "educationLevel": "Undergraduate",
        "interests": ["Technology"],
    }


@pytest.fixture
def analysis_openai():
    return FakeOpenAI(json.dumps(ANALYSIS_PAYLOAD))


@pytest.fixture
def chat_openai():
    return FakeOpenAI(echo_reply)


@pytest.fixture
def storage():
    return MemStorage()


@pytest.fixture
def service(storage, analysis_openai, chat_openai):
    return CareerCompassService(
        storage,
        analysis_agent=CareerAnalysisAgent(model="test-model", client=analysis_openai),
        chat_agent=MentorChatAgent(model="test-model", client=chat_openai),
    )


@pytest.fixture
def client(service):
    with TestClient(create_app(service), raise_server_exceptions=False) as test_client:
        yield test_client
