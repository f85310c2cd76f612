"""FastAPI application exposing the CareerCompass JSON API.

All routes live under ``/api``. Errors are returned as
``{"message": "..."}`` with the status code carried by the
:mod:`careercompass.errors` exception that produced them.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import uvicorn
from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .config import configure_logging, get_settings
from .errors import CareerCompassError, InternalError
from .service import CareerCompassService, describe_errors
from .storage.memory import MemStorage
from .storage.schemas import CamelModel, CareerAnalysis, Conversation, StudentProfile


logger = logging.getLogger(__name__)


class AnalysisRequest(CamelModel):
    profile_id: Optional[str] = None


class ChatRequest(CamelModel):
    message: Optional[str] = None
    profile_id: Optional[str] = None
    conversation_id: Optional[str] = None


class ChatResponse(BaseModel):
    response: str


def get_service(request: Request) -> CareerCompassService:
    return request.app.state.service


router = APIRouter(prefix="/api")


# --- Student profiles ---


@router.post("/profiles", response_model=StudentProfile)
def create_profile(
    payload: Dict[str, Any] = Body(...),
    service: CareerCompassService = Depends(get_service),
):
    return service.create_profile(payload)


@router.get("/profiles/{profile_id}", response_model=StudentProfile)
def get_profile(profile_id: str, service: CareerCompassService = Depends(get_service)):
    return service.get_profile(profile_id)


@router.patch("/profiles/{profile_id}", response_model=StudentProfile)
def update_profile(
    profile_id: str,
    payload: Dict[str, Any] = Body(...),
    service: CareerCompassService = Depends(get_service),
):
    return service.update_profile(profile_id, payload)


# --- Career analysis ---


@router.post("/career-analysis", response_model=CareerAnalysis)
def create_career_analysis(
    payload: AnalysisRequest = Body(default_factory=AnalysisRequest),
    service: CareerCompassService = Depends(get_service),
):
    return service.ensure_analysis(payload.profile_id)


@router.get("/career-analysis/{profile_id}", response_model=CareerAnalysis)
def get_career_analysis(profile_id: str, service: CareerCompassService = Depends(get_service)):
    return service.get_analysis(profile_id)


# --- Chat / conversations ---


@router.post("/conversations", response_model=Conversation)
def create_conversation(
    payload: Dict[str, Any] = Body(default_factory=dict),
    service: CareerCompassService = Depends(get_service),
):
    return service.create_conversation(payload)


@router.get("/conversations/profile/{profile_id}", response_model=Conversation)
def get_conversation_by_profile(profile_id: str, service: CareerCompassService = Depends(get_service)):
    return service.get_conversation_by_profile(profile_id)


@router.post("/chat", response_model=ChatResponse)
def chat(
    payload: ChatRequest = Body(default_factory=ChatRequest),
    service: CareerCompassService = Depends(get_service),
):
    reply = service.chat(payload.message, payload.profile_id, payload.conversation_id)
    return ChatResponse(response=reply)


# --- Error mapping ---


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def handle_app_error(request: Request, exc: CareerCompassError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message, exc_info=exc.__cause__)
    return _error_response(exc.status_code, exc.message)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_errors(exc.errors())
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, message)
    return _error_response(400, message)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, InternalError.default_message)


def create_app(service: Optional[CareerCompassService] = None) -> FastAPI:
    """Build the app around ``service`` (a fresh in-memory one by default)."""
    app = FastAPI(
        title="CareerCompass API",
        description="AI career guidance: student profiles, career analysis and mentor chat",
        version=__version__,
    )
    app.state.service = service or CareerCompassService(MemStorage())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CareerCompassError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    app.include_router(router)
    return app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting CareerCompass API on %s:%s (model=%s)", settings.host, settings.port, settings.model)
    uvicorn.run(create_app(), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
