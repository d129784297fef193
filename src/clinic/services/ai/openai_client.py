from __future__ import annotations

import logging
from typing import Optional

import openai
from openai import OpenAI

from src.clinic.config import settings
from src.clinic.errors import AIGenerationError, AIServiceUnavailable, RateLimited

logger = logging.getLogger("ai")

_MISSING_KEY = "OpenAI API key is not configured. Please set OPENAI_API_KEY environment variable."

_openai_client: Optional[OpenAI] = None


def get_openai_client() -> Optional[OpenAI]:
    """Return a cached OpenAI client, or None when no API key is configured."""

    global _openai_client
    if _openai_client is not None:
        return _openai_client

    api_key = (settings.openai_api_key or "").strip()
    if not api_key:
        logger.warning("OpenAI API key not configured; AI treatment analysis is disabled")
        return None

    _openai_client = OpenAI(api_key=api_key)
    return _openai_client


def is_openai_available() -> bool:
    return get_openai_client() is not None


class TreatmentAnalysisBackend:
    """Chat-completion backend producing short clinical-support analyses."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None) -> None:
        self._client = client
        self._model = model or settings.llm_model

    def _resolve_client(self) -> OpenAI:
        client = self._client or get_openai_client()
        if client is None:
            raise AIServiceUnavailable(_MISSING_KEY)
        return client

    def analyze(self, system_prompt: str, user_content: str) -> str:
        client = self._resolve_client()
        try:
            completion = client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
                temperature=0.7,
                max_tokens=1000,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise AIServiceUnavailable(
                "Invalid OpenAI API key. Please check your OPENAI_API_KEY environment variable."
            ) from exc
        except openai.RateLimitError as exc:
            raise RateLimited("OpenAI API rate limit exceeded. Please try again later.") from exc
        except openai.OpenAIError as exc:
            raise AIGenerationError(f"Failed to generate AI analysis: {exc}") from exc

        analysis = completion.choices[0].message.content if completion.choices else None
        if not analysis:
            raise AIGenerationError("Failed to generate AI analysis")
        return analysis
