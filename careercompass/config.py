"""Runtime configuration for the CareerCompass service.

Environment variables (e.g. ``OPENAI_API_KEY``) are loaded from a
``.env`` file if present, using ``python-dotenv``, so API keys can live
in `.env` without being exported manually each time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


# Load environment variables from a .env file if it exists.
load_dotenv()


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    """Values read once from the process environment."""

    openai_api_key: Optional[str] = None
    model: str = "gpt-5"
    timeout_s: float = 60.0
    host: str = "127.0.0.1"
    port: int = 8000
    api_url: str = "http://127.0.0.1:8000"
    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_KEY") or None,
        model=os.getenv("CAREERCOMPASS_MODEL", "gpt-5"),
        # Request timeout (seconds) for model calls to avoid hanging forever.
        timeout_s=float(os.getenv("CAREERCOMPASS_TIMEOUT_S", "60")),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        api_url=os.getenv("CAREERCOMPASS_API_URL", "http://127.0.0.1:8000"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=level or get_settings().log_level, format=LOG_FORMAT)
