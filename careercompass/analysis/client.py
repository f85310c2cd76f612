"""OpenAI client factory and model configuration.

This keeps the dependency on the OpenAI SDK in one place, which makes
it easier to swap or mock in tests. Both the analysis agent and the
mentor chat agent build their clients here.
"""

from __future__ import annotations

from typing import Optional

import httpx
from openai import OpenAI

from ..config import get_settings


DEFAULT_MODEL = get_settings().model

# Default request timeout (seconds) to avoid hanging forever.
DEFAULT_TIMEOUT_S = get_settings().timeout_s


def get_openai_client(api_key: Optional[str] = None) -> OpenAI:
    """Return an OpenAI client configured from environment or explicit key.

    ``OPENAI_API_KEY`` is preferred; the older ``OPENAI_KEY`` name is
    accepted as a fallback.
    """

    http_client = httpx.Client(timeout=httpx.Timeout(DEFAULT_TIMEOUT_S))

    api_key = api_key or get_settings().openai_api_key
    if api_key is not None:
        return OpenAI(api_key=api_key, http_client=http_client)

    # Let the SDK report the missing key on first use rather than at import.
    return OpenAI(api_key="", http_client=http_client)
