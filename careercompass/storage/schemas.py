"""Record schemas for the entity store.

Records are pydantic models with snake_case attributes and camelCase
aliases, so the same objects serialise straight into the JSON API
(``fullName``, ``profileId``, ``createdAt``...).
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


AGE_OPTIONS: list[str] = ["16-18", "19-21", "22-24", "25+"]

EDUCATION_LEVEL_OPTIONS: list[str] = ["High School", "Undergraduate", "Graduate", "Professional"]

INTEREST_OPTIONS: list[str] = [
    "Technology",
    "Business",
    "Healthcare",
    "Creative Arts",
    "Engineering",
    "Education",
    "Science",
    "Finance",
    "Marketing",
    "Design",
    "Research",
    "Social Work",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _clamp_percentage(value: Any) -> Any:
    # Models sometimes answer "85%" or 92.5 instead of a plain int.
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    # inf/nan are left for the int validator to reject.
    if not math.isfinite(number):
        return value
    return max(0, min(100, round(number)))


# --- Users (kept for completeness; the career flow never touches them) ---

class User(CamelModel):
    id: str
    username: str
    password: str


# --- Student profiles ---

def check_full_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Name must be at least 2 characters")
    return value


def check_age(value: str) -> str:
    if not value.strip():
        raise ValueError("Please select your age")
    return value.strip()


def check_education_level(value: str) -> str:
    if not value.strip():
        raise ValueError("Please select your education level")
    return value.strip()


def check_interests(value: List[str]) -> List[str]:
    cleaned = [v.strip() for v in value if isinstance(v, str) and v.strip()]
    if not cleaned:
        raise ValueError("Please select at least one interest")
    return cleaned


_REQUIRED_CHECKS = {
    "full_name": check_full_name,
    "age": check_age,
    "education_level": check_education_level,
    "interests": check_interests,
}

_OPTIONAL_TEXT_FIELDS = (
    "field_of_study",
    "skills",
    "hobbies",
    "career_goals",
    "work_style",
    "improvement_areas",
)


class ProfileFields(CamelModel):
    """Everything a student fills in on the multi-step form."""

    full_name: str = Field(..., description="At least 2 characters")
    age: str = Field(..., description="One of AGE_OPTIONS")
    education_level: str = Field(..., description="One of EDUCATION_LEVEL_OPTIONS")
    field_of_study: Optional[str] = None
    interests: List[str] = Field(..., description="At least one entry")
    skills: Optional[str] = None
    hobbies: Optional[str] = None
    career_goals: Optional[str] = None
    work_style: Optional[str] = None
    improvement_areas: Optional[str] = None

    @field_validator("full_name", "age", "education_level", "interests")
    @classmethod
    def _check_required(cls, value: Any, info: ValidationInfo) -> Any:
        return _REQUIRED_CHECKS[info.field_name](value)

    @field_validator(*_OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)


class ProfileCreate(ProfileFields):
    pass


class ProfileUpdate(CamelModel):
    """Partial update; only the fields actually sent are applied."""

    full_name: Optional[str] = None
    age: Optional[str] = None
    education_level: Optional[str] = None
    field_of_study: Optional[str] = None
    interests: Optional[List[str]] = None
    skills: Optional[str] = None
    hobbies: Optional[str] = None
    career_goals: Optional[str] = None
    work_style: Optional[str] = None
    improvement_areas: Optional[str] = None

    # Defaults are not validated, so a None here was sent explicitly.
    @field_validator("full_name", "age", "education_level", "interests")
    @classmethod
    def _check_required(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise ValueError(f"{to_camel(info.field_name)} cannot be cleared")
        return _REQUIRED_CHECKS[info.field_name](value)

    @field_validator(*_OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_patch(self) -> dict:
        return self.model_dump(exclude_unset=True)


class StudentProfile(ProfileFields):
    id: str
    created_at: datetime = Field(default_factory=utcnow)


# --- Conversations ---

class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utcnow)


class ConversationCreate(CamelModel):
    profile_id: Optional[str] = None
    messages: List[ChatMessage] = Field(default_factory=list)

    @field_validator("profile_id", mode="before")
    @classmethod
    def _optional_profile_id(cls, value: Any) -> Any:
        return _blank_to_none(value)


class Conversation(ConversationCreate):
    id: str
    created_at: datetime = Field(default_factory=utcnow)


# --- Career analyses ---

class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class CareerOpportunity(CamelModel):
    title: str
    match: int = Field(..., description="Score from 0-100 on how well this fits the student")
    description: str
    demand: str = Field(..., description='e.g. "High demand", "Growing field", "Stable market"')

    @field_validator("match", mode="before")
    @classmethod
    def _clamp_match(cls, value: Any) -> Any:
        return _clamp_percentage(value)


class SkillToLearn(CamelModel):
    skill: str
    priority: Priority
    relevance: int = Field(..., description="Relevance percentage 0-100")

    @field_validator("priority", mode="before")
    @classmethod
    def _normalise_priority(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("relevance", mode="before")
    @classmethod
    def _clamp_relevance(cls, value: Any) -> Any:
        return _clamp_percentage(value)


class RoadmapPhase(CamelModel):
    phase: str
    duration: str
    title: str
    description: str
    resources: List[str] = Field(default_factory=list)

    @field_validator("phase", mode="before")
    @classmethod
    def _phase_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(int(value))
        return value


class AnalysisFields(CamelModel):
    strengths: List[str] = Field(default_factory=list)
    career_opportunities: List[CareerOpportunity] = Field(default_factory=list)
    skills_to_learn: List[SkillToLearn] = Field(default_factory=list)
    learning_roadmap: List[RoadmapPhase] = Field(default_factory=list)


class CareerAnalysis(AnalysisFields):
    id: str
    profile_id: str
    created_at: datetime = Field(default_factory=utcnow)
