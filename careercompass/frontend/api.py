"""httpx client for the CareerCompass JSON API.

Returns plain dicts exactly as the server sends them (camelCase keys).
Non-2xx responses raise :class:`APIError` carrying the server's
``message``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..config import get_settings


class APIError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class CareerCompassAPI:
    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.Client] = None) -> None:
        # Analysis requests wait on the model, so allow a generous timeout.
        self._client = client or httpx.Client(
            base_url=base_url or get_settings().api_url,
            timeout=httpx.Timeout(get_settings().timeout_s + 10),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CareerCompassAPI":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, json: Any = None) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise APIError(0, f"Could not reach the CareerCompass API: {e}") from e

        if response.is_success:
            return response.json()

        try:
            message = response.json().get("message") or response.reason_phrase
        except ValueError:
            message = response.text or response.reason_phrase
        raise APIError(response.status_code, message)

    # --- profiles ---

    def create_profile(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/profiles", json=profile)

    def get_profile(self, profile_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/profiles/{profile_id}")

    # --- career analysis ---

    def generate_analysis(self, profile_id: str) -> Dict[str, Any]:
        return self._request("POST", "/api/career-analysis", json={"profileId": profile_id})

    def get_analysis(self, profile_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/career-analysis/{profile_id}")

    # --- chat ---

    def create_conversation(
        self, profile_id: Optional[str] = None, messages: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        return self._request("POST", "/api/conversations", json={"profileId": profile_id, "messages": messages or []})

    def get_conversation_by_profile(self, profile_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/conversations/profile/{profile_id}")

    def chat(
        self, message: str, profile_id: Optional[str] = None, conversation_id: Optional[str] = None
    ) -> str:
        data = self._request(
            "POST",
            "/api/chat",
            json={"message": message, "profileId": profile_id, "conversationId": conversation_id},
        )
        return data["response"]
