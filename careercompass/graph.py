import logging
import sys
from typing import Any, Callable, Dict, List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from .config import configure_logging
from .frontend.api import APIError, CareerCompassAPI
from .frontend.views import (
    STEP_FIELDS,
    ChatSession,
    FormError,
    ProfileWizard,
    RecommendationsView,
    ViewStateMachine,
)
from .storage.schemas import AGE_OPTIONS, EDUCATION_LEVEL_OPTIONS, INTEREST_OPTIONS

logger = logging.getLogger("careercompass_journey")

Ask = Callable[[str], str]
Say = Callable[[str], None]

QUIT_WORDS = {"q", "quit", "exit"}

FIELD_PROMPTS: Dict[str, str] = {
    "fullName": "Full name",
    "age": "Age range (" + ", ".join(AGE_OPTIONS) + ")",
    "educationLevel": "Education level (" + ", ".join(EDUCATION_LEVEL_OPTIONS) + ")",
    "fieldOfStudy": "Field of study (optional)",
    "interests": "Interests, comma separated (e.g. " + ", ".join(INTEREST_OPTIONS[:4]) + ")",
    "skills": "Skills (optional)",
    "hobbies": "Hobbies (optional)",
    "careerGoals": "Career goals (optional)",
    "workStyle": "Preferred work style (optional)",
    "improvementAreas": "Areas you want to improve (optional)",
}


# --- 1. Define Graph State ---
class JourneyState(TypedDict):
    view: str
    profile_id: Optional[str]
    analysis: Optional[Dict[str, Any]]
    chat_history: List[Dict[str, Any]]
    is_complete: bool
    error: Optional[str]


# --- 2. Helper Functions ---
def format_analysis(analysis: Dict[str, Any]) -> str:
    lines = ["", "✅ Your strengths:"]
    lines += [f"  - {s}" for s in analysis.get("strengths") or []]

    lines += ["", "🚀 Career opportunities:"]
    for i, opp in enumerate(analysis.get("careerOpportunities") or [], 1):
        lines.append(f"  {i}. {opp.get('title')} ({opp.get('match')}% match, {opp.get('demand')})")
        if opp.get("description"):
            lines.append(f"     {opp['description']}")

    lines += ["", "📘 Skills to learn:"]
    for skill in analysis.get("skillsToLearn") or []:
        lines.append(f"  - {skill.get('skill')} [{skill.get('priority')}] relevance {skill.get('relevance')}%")

    lines += ["", "🗺️ Learning roadmap:"]
    for phase in analysis.get("learningRoadmap") or []:
        lines.append(f"  Phase {phase.get('phase')} ({phase.get('duration')}): {phase.get('title')}")
        if phase.get("description"):
            lines.append(f"     {phase['description']}")
        if phase.get("resources"):
            lines.append("     Resources: " + ", ".join(phase["resources"]))
    return "\n".join(lines)


def _fill_step(wizard: ProfileWizard, ask: Ask, say: Say) -> None:
    """Prompt for every field of the current step until it validates."""
    while True:
        for field in STEP_FIELDS[wizard.step - 1]:
            answer = ask(f"{FIELD_PROMPTS[field]}: ").strip()
            if field == "interests":
                wizard.set(field, [part.strip() for part in answer.split(",") if part.strip()])
            else:
                wizard.set(field, answer)
        errors = wizard.validate_step()
        if not errors:
            return
        for field, message in errors.items():
            say(f"⚠️ {FIELD_PROMPTS[field]}: {message}")


# --- 3. Build the Graph ---
def build_journey_graph(api: CareerCompassAPI, ask: Ask = input, say: Say = print):
    machine = ViewStateMachine()

    def hero_node(state: JourneyState) -> JourneyState:
        say("\n🧭 CareerCompass: discover your strengths and plan your career.")
        choice = ask("[1] Start your journey  [2] Chat with the AI mentor  [q] Quit: ").strip().lower()
        if choice in QUIT_WORDS:
            return {**state, "is_complete": True}
        if choice == "1":
            machine.start_journey()
        elif choice == "2":
            machine.open_chat()
        else:
            say("Please choose 1, 2 or q.")
        return {**state, "view": machine.view.value}

    def profile_node(state: JourneyState) -> JourneyState:
        logger.info("Entering profile form")
        wizard = ProfileWizard()
        while True:
            say(f"\n--- Step {wizard.step}/{wizard.total_steps}: {wizard.title} ({wizard.progress:.0f}%) ---")
            _fill_step(wizard, ask, say)
            if wizard.step == wizard.total_steps:
                break
            wizard.next_step()

        try:
            profile = wizard.submit(api)
        except (FormError, APIError) as e:
            logger.warning("Profile submission failed: %s", e)
            return {**state, "error": f"Failed to create profile: {getattr(e, 'message', e)}"}

        say("\nProfile created! Generating career analysis...")
        machine.complete_profile(profile["id"])
        return {**state, "view": machine.view.value, "profile_id": profile["id"]}

    def recommendations_node(state: JourneyState) -> JourneyState:
        logger.info("Entering recommendations for profile %s", machine.profile_id)
        view = RecommendationsView(api, machine.profile_id)
        view.mount()
        while view.error:
            say(f"❌ {view.error}")
            if ask("Retry? [y/n]: ").strip().lower() not in {"y", "yes"}:
                return {**state, "error": view.error}
            view.retry()

        say(format_analysis(view.analysis or {}))
        choice = ask("\n[1] Discuss with AI Mentor  [q] Quit: ").strip().lower()
        if choice == "1":
            machine.open_chat()
            return {**state, "view": machine.view.value, "analysis": view.analysis}
        return {**state, "analysis": view.analysis, "is_complete": True}

    def chat_node(state: JourneyState) -> JourneyState:
        logger.info("Entering mentor chat (profile=%s)", machine.profile_id)
        session = ChatSession(api, machine.profile_id)
        try:
            session.load()
        except APIError as e:
            logger.warning("Could not load conversation: %s", e)
        for message in session.messages:
            say(f"\n{'You' if message['role'] == 'user' else 'CareerCompass'}: {message['content']}")
        say("Type 'exit' to go back.")

        while True:
            text = ask("\nYou: ").strip()
            if text.lower() in QUIT_WORDS:
                break
            reply = session.send(text)
            if reply is not None:
                say(f"\nCareerCompass: {reply}")
            elif session.error:
                say(f"❌ {session.error}")

        machine.close_chat()
        return {**state, "view": machine.view.value, "chat_history": session.messages}

    def route_view(state: JourneyState) -> str:
        """Follows the view state machine; ends on quit or error."""
        if state.get("is_complete") or state.get("error"):
            return END
        return state["view"]

    builder = StateGraph(JourneyState)

    builder.add_node("hero", hero_node)
    builder.add_node("profile", profile_node)
    builder.add_node("recommendations", recommendations_node)
    builder.add_node("chat", chat_node)

    builder.set_entry_point("hero")

    destinations = {
        "hero": "hero",
        "profile": "profile",
        "recommendations": "recommendations",
        "chat": "chat",
        END: END,
    }
    for node in ("hero", "profile", "recommendations", "chat"):
        builder.add_conditional_edges(node, route_view, destinations)

    return builder.compile()


def initial_state() -> JourneyState:
    return {
        "view": "hero",
        "profile_id": None,
        "analysis": None,
        "chat_history": [],
        "is_complete": False,
        "error": None,
    }


# --- 4. Execution Helper ---
def run_journey(api: Optional[CareerCompassAPI] = None, ask: Ask = input, say: Say = print) -> JourneyState:
    api = api or CareerCompassAPI()
    graph = build_journey_graph(api, ask=ask, say=say)
    final_state = graph.invoke(initial_state(), config={"recursion_limit": 200})
    if final_state.get("error"):
        say(f"❌ Error: {final_state['error']}")
    return final_state


if __name__ == "__main__":
    configure_logging()
    base_url = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        with CareerCompassAPI(base_url) as client:
            run_journey(client)
    except KeyboardInterrupt:
        print("\nGoodbye!")
