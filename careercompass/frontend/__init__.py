from .api import APIError, CareerCompassAPI
from .views import (
    ChatSession,
    FormError,
    InvalidTransition,
    ProfileWizard,
    RecommendationsView,
    ViewState,
    ViewStateMachine,
)

__all__ = [
    "APIError",
    "CareerCompassAPI",
    "ChatSession",
    "FormError",
    "InvalidTransition",
    "ProfileWizard",
    "RecommendationsView",
    "ViewState",
    "ViewStateMachine",
]
