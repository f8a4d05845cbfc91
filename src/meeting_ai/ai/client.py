"""Async HTTP client for the Gemini generateContent endpoint.

GenerationClient performs exactly one POST per call, with no retries, and
classifies failures as UpstreamUnavailable (transport error or non-2xx) or
MalformedUpstreamEnvelope (reachable, but no single-candidate text part).
The API key travels in the x-goog-api-key header so it never appears in
URLs or error details.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from src.meeting_ai.ai.schemas import GenerationRequest
from src.meeting_ai.config import Settings
from src.meeting_ai.core.exceptions import (
    MalformedUpstreamEnvelope,
    ServiceNotConfigured,
    UpstreamUnavailable,
)
from src.meeting_ai.core.monitoring import track_generation_call

logger = structlog.get_logger(__name__)


class GenerationClient:
    """Async client for the Gemini text generation API.

    Args:
        api_key: Gemini API key. Empty means the client is not configured.
        model: Gemini model name (e.g. "gemini-2.0-flash").
        base_url: API base, up to and including the version segment.
        timeout: Transport timeout in seconds.
        top_p: Nucleus sampling parameter sent with every request.
        top_k: Top-k sampling parameter sent with every request.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        top_p: float = 0.8,
        top_k: int = 10,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._top_p = top_p
        self._top_k = top_k

    @classmethod
    def from_settings(cls, settings: Settings) -> GenerationClient:
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_API_BASE,
            timeout=float(settings.LLM_TIMEOUT),
            top_p=settings.GENERATION_TOP_P,
            top_k=settings.GENERATION_TOP_K,
        )

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def build_payload(self, request: GenerationRequest) -> dict:
        """Build the generateContent request body."""
        return {
            "contents": [{"parts": [{"text": request.instruction_text}]}],
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_output_tokens,
                "topP": self._top_p,
                "topK": self._top_k,
            },
        }

    async def generate(self, request: GenerationRequest, task: str = "unknown") -> str:
        """Send one generation request and return the raw candidate text.

        Args:
            request: Instruction text and generation parameters.
            task: Task label used for metrics and logs.

        Returns:
            Text of the first part of the first candidate.

        Raises:
            ServiceNotConfigured: No API key configured; no call is made.
            UpstreamUnavailable: Transport failure or non-2xx status.
            MalformedUpstreamEnvelope: Response lacks the expected envelope.
        """
        if not self.is_configured:
            raise ServiceNotConfigured("Gemini API key not found in environment variables")

        logger.info(
            "gemini.request",
            model=self._model,
            task=task,
            prompt_length=len(request.instruction_text),
            max_output_tokens=request.max_output_tokens,
        )

        async with track_generation_call(self._model, task) as usage:
            try:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(
                        self.endpoint,
                        json=self.build_payload(request),
                        headers={
                            "Content-Type": "application/json",
                            "x-goog-api-key": self._api_key,
                        },
                    )
            except httpx.HTTPError as exc:
                logger.error("gemini.transport_error", task=task, error=str(exc))
                raise UpstreamUnavailable("generation", None, str(exc)) from exc

            logger.info("gemini.response", task=task, status_code=response.status_code)

            if not response.is_success:
                logger.error(
                    "gemini.error_status",
                    task=task,
                    status_code=response.status_code,
                    body_preview=response.text[:500],
                )
                raise UpstreamUnavailable("generation", response.status_code, response.text)

            try:
                data = response.json()
            except ValueError as exc:
                raise MalformedUpstreamEnvelope("response body is not JSON", response.text) from exc

            text = _extract_candidate_text(data)

            metadata = data.get("usageMetadata") or {}
            usage["prompt_tokens"] = metadata.get("promptTokenCount", 0)
            usage["completion_tokens"] = metadata.get("candidatesTokenCount", 0)

        logger.info("gemini.result", task=task, result_length=len(text))
        return text


def _extract_candidate_text(data: Any) -> str:
    """Pull candidates[0].content.parts[0].text out of a response body."""
    if not isinstance(data, dict):
        raise MalformedUpstreamEnvelope("response is not a JSON object", data)

    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise MalformedUpstreamEnvelope("missing candidates", data)

    candidate = candidates[0]
    content = candidate.get("content") if isinstance(candidate, dict) else None
    if not isinstance(content, dict):
        raise MalformedUpstreamEnvelope("missing candidate content", data)

    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        raise MalformedUpstreamEnvelope("missing content parts", data)

    text = parts[0].get("text")
    if not isinstance(text, str):
        raise MalformedUpstreamEnvelope("missing text part", data)
    return text
