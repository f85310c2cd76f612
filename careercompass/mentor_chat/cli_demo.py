import json
import sys
import uuid
from pathlib import Path

from ..errors import GenerationError
from ..storage.schemas import ProfileCreate, StudentProfile
from .agent import MentorChatAgent
from .prompts import GREETING


def run_chat_session(profile_path: str = None):
    # 1. Optional profile for personalised answers
    profile = None
    if profile_path and Path(profile_path).exists():
        with open(profile_path, "r", encoding="utf-8") as f:
            form = ProfileCreate.model_validate(json.load(f))
        profile = StudentProfile(id=str(uuid.uuid4()), **form.model_dump())
        print(f"--- Mentor chat for: {profile.full_name} ---")
    else:
        print("--- Mentor chat (no profile loaded) ---")

    agent = MentorChatAgent()
    print(f"\nCareerCompass: {GREETING}\n")
    print("Type 'exit' or 'quit' to stop.\n")

    # 2. Chat Loop
    while True:
        try:
            user_input = input("You: ").strip()
            if user_input.lower() in ["exit", "quit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            print("CareerCompass: Thinking...")
            response = agent.reply(user_input, profile)
            print(f"\nCareerCompass:\n{response}\n")

        except KeyboardInterrupt:
            print("\nGoodbye!")
            break
        except GenerationError as e:
            print(f"❌ Error: {e.message}")


if __name__ == "__main__":
    run_chat_session(sys.argv[1] if len(sys.argv) > 1 else None)
