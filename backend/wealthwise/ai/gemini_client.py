"""Minimal Gemini `generateContent` wrapper for advisor replies."""

from __future__ import annotations

from typing import Any

import httpx

FALLBACK_REPLY = "I apologize, but I'm unable to provide a response at this time. Please try again."

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 1000,
}


class GeminiError(Exception):
    """Base exception for Gemini client errors."""


class GeminiRequestError(GeminiError):
    """Raised when Gemini API request fails."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class GeminiResponseError(GeminiError):
    """Raised when Gemini response body is not JSON."""


class GeminiClient:
    """Thin client: one POST per reply, no retries."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def generate_reply(
        self,
        system_prompt: str,
        history: list[dict[str, Any]],
        message: str,
    ) -> str:
        """Send system prompt + prior turns + the new message and return the reply text."""
        body = {
            "system_instruction": {
                "parts": [{"text": system_prompt}],
            },
            "contents": self._build_contents(history, message),
            "generationConfig": GENERATION_CONFIG,
        }

        url = (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            f"{self.model}:generateContent"
        )
        params = {"key": self.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.post(url, params=params, json=body)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise GeminiRequestError(503, "Gemini request failed") from exc

        if response.status_code >= 400:
            raise GeminiRequestError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise GeminiResponseError("Invalid JSON from Gemini") from exc

        return self._extract_text(payload)

    def _build_contents(self, history: list[dict[str, Any]], message: str) -> list[dict[str, Any]]:
        contents: list[dict[str, Any]] = []

        for item in history:
            content = str(item.get("content") or "")
            if not content.strip():
                continue

            contents.append({
                "role": "user" if item.get("isUser") else "model",
                "parts": [{"text": content}],
            })

        contents.append({
            "role": "user",
            "parts": [{"text": message}],
        })
        return contents

    def _extract_text(self, payload: Any) -> str:
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return FALLBACK_REPLY

        if not isinstance(text, str) or not text.strip():
            return FALLBACK_REPLY
        return text
