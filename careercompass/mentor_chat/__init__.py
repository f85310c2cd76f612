from .agent import MentorChatAgent

__all__ = ["MentorChatAgent"]
