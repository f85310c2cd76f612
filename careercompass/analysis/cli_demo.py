"""Minimal CLI demo for the career analysis agent.

Reads a profile JSON file (camelCase keys, as posted to ``/api/profiles``)
and prints the generated analysis. Not production-facing.
"""

import json
import sys
import uuid
from pathlib import Path

from ..errors import GenerationError
from ..storage.schemas import ProfileCreate, StudentProfile
from .agent import CareerAnalysisAgent


def print_analysis(result) -> None:
    print("\n=== STRENGTHS ===")
    for strength in result.strengths:
        print(f"- {strength}")

    print("\n=== CAREER OPPORTUNITIES ===")
    for i, opp in enumerate(result.career_opportunities, 1):
        print(f"{i}. {opp.title} ({opp.match}% match, {opp.demand})")
        print(f"   {opp.description}")

    print("\n=== SKILLS TO LEARN ===")
    for skill in result.skills_to_learn:
        print(f"- {skill.skill} [{skill.priority.value}] relevance {skill.relevance}%")

    print("\n=== LEARNING ROADMAP ===")
    for phase in result.learning_roadmap:
        print(f"Phase {phase.phase} ({phase.duration}): {phase.title}")
        print(f"   {phase.description}")
        if phase.resources:
            print("   Resources: " + ", ".join(phase.resources))


def run_analysis_demo(profile_path: str) -> None:
    path = Path(profile_path)
    if not path.exists():
        print(f"❌ Profile file not found: {path}")
        return

    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    form = ProfileCreate.model_validate(data)
    profile = StudentProfile(id=str(uuid.uuid4()), **form.model_dump())

    print(f"--- Generating career analysis for {profile.full_name} ---")
    try:
        result = CareerAnalysisAgent().analyze_profile(profile)
    except GenerationError as e:
        print(f"❌ {e.message}")
        return

    print_analysis(result)


if __name__ == "__main__":
    run_analysis_demo(sys.argv[1] if len(sys.argv) > 1 else "data/profile.json")
