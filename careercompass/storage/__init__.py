from .memory import EntityTable, MemStorage, Storage
from .schemas import (
    CareerAnalysis,
    ChatMessage,
    Conversation,
    ConversationCreate,
    ProfileCreate,
    ProfileUpdate,
    StudentProfile,
    User,
)

__all__ = [
    "CareerAnalysis",
    "ChatMessage",
    "Conversation",
    "ConversationCreate",
    "EntityTable",
    "MemStorage",
    "ProfileCreate",
    "ProfileUpdate",
    "Storage",
    "StudentProfile",
    "User",
]
