"""Error taxonomy shared by the store, the agents and the HTTP layer.

Each error carries the HTTP status it maps to and a user-facing
``message``; the server turns them into ``{"message": ...}`` bodies.
"""

from __future__ import annotations


class CareerCompassError(Exception):
    status_code: int = 500
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CareerCompassError):
    """Malformed or missing input; the caller can fix it."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(CareerCompassError):
    status_code = 404
    default_message = "Not found"


class GenerationError(CareerCompassError):
    """The model call failed or returned content we could not use."""

    status_code = 500
    default_message = "Failed to generate a response. Please try again."


class AnalysisGenerationError(GenerationError):
    default_message = "Failed to analyze student profile. Please try again."


class ChatGenerationError(GenerationError):
    default_message = "Failed to get response from AI mentor. Please try again."


class InternalError(CareerCompassError):
    status_code = 500
    default_message = "Internal server error"
