from typing import List

from pydantic import Field

from ..storage.schemas import AnalysisFields, CareerOpportunity, RoadmapPhase, SkillToLearn


class AnalysisResult(AnalysisFields):
    """What the model must return; every section needs at least one entry."""

    strengths: List[str] = Field(..., min_length=1, description="4-6 key strengths")
    career_opportunities: List[CareerOpportunity] = Field(..., min_length=1, description="3-4 roles")
    skills_to_learn: List[SkillToLearn] = Field(..., min_length=1, description="3-4 skills")
    learning_roadmap: List[RoadmapPhase] = Field(..., min_length=1, description="3 phases")
