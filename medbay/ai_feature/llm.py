"""
Client for Google's Generative Language REST API.

Endpoint: POST {base_url}/models/{model}:generateContent

Only plain text completion is used: one user turn in, the text of the
first candidate out.
"""

import logging
from typing import Optional

import httpx

from medbay.core.config import settings
from medbay.core.exceptions import UpstreamModelError

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Usage:
        llm = GeminiClient(api_key="...", model="gemini-1.5-pro")
        text = await llm.complete("Summarise this: ...")
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _get_headers(self) -> dict:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    @staticmethod
    def extract_text(payload: dict) -> str:
        """Join the text parts of the first candidate."""
        try:
            parts = payload["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            raise UpstreamModelError("LLM response did not contain any candidates")
        return "".join(part.get("text", "") for part in parts)

    async def complete(self, prompt: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(url, headers=self._get_headers(), json=body)
                response.raise_for_status()
        except httpx.HTTPStatusError as error:
            logger.error(f"LLM request failed: {error.response.status_code} {error.response.text}")
            raise UpstreamModelError(
                f"LLM request failed with status {error.response.status_code}"
            ) from error
        except httpx.HTTPError as error:
            logger.error(f"LLM request failed: {error}")
            raise UpstreamModelError(f"LLM request failed: {error}") from error

        try:
            payload = response.json()
        except ValueError as error:
            raise UpstreamModelError("LLM response was not valid JSON") from error
        return self.extract_text(payload)


# A fresh client per request, nothing is shared across requests
def get_llm() -> GeminiClient:
    return GeminiClient(
        api_key=settings.GOOGLE_AI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_API_URL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
    )
