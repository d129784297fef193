from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from fastapi import status

from src.clinic.config import settings
from src.clinic.errors import AIGenerationError

logger = logging.getLogger("ai")

_OLLAMA_ERROR = "Ollama Service Error"


@dataclass
class OllamaConfig:
    base_url: str
    model: str
    timeout_seconds: float
    # Health checks must answer quickly even when generation is slow.
    health_timeout_seconds: float = 5.0

    @classmethod
    def from_settings(cls) -> "OllamaConfig":
        return cls(
            base_url=settings.ollama_base_url.rstrip("/"),
            model=settings.ollama_model,
            timeout_seconds=settings.ollama_timeout_seconds,
        )


class OllamaClient:
    """Minimal client for a local Ollama server's ``/api/generate`` endpoint."""

    def __init__(self, config: OllamaConfig, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout_seconds, transport=transport)

    @property
    def model(self) -> str:
        return self._config.model

    def is_available(self) -> bool:
        try:
            response = self._client.get("/api/tags", timeout=self._config.health_timeout_seconds)
        except httpx.HTTPError:
            logger.warning("Ollama availability check failed", exc_info=True)
            return False
        return response.is_success

    def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        top_p: float = 0.9,
        top_k: int = 40,
    ) -> str:
        payload: Dict[str, Any] = {
            "model": self._config.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature, "top_p": top_p, "top_k": top_k},
        }

        try:
            response = self._client.post("/api/generate", json=payload)
        except httpx.TimeoutException as exc:
            raise AIGenerationError(
                "Request to Ollama timed out",
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                error_code=_OLLAMA_ERROR,
            ) from exc
        except httpx.HTTPError as exc:
            raise AIGenerationError(
                f"Failed to communicate with Ollama: {exc}",
                status_code=status.HTTP_502_BAD_GATEWAY,
                error_code=_OLLAMA_ERROR,
            ) from exc

        if not response.is_success:
            raise AIGenerationError(
                f"Ollama API error: {response.status_code} {response.reason_phrase}. {response.text}",
                status_code=status.HTTP_502_BAD_GATEWAY,
                error_code=_OLLAMA_ERROR,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise AIGenerationError(
                "Ollama returned a non-JSON response",
                status_code=status.HTTP_502_BAD_GATEWAY,
                error_code=_OLLAMA_ERROR,
            ) from exc

        text = data.get("response")
        if not data.get("done") or not text:
            raise AIGenerationError(
                "Incomplete response from Ollama",
                status_code=status.HTTP_502_BAD_GATEWAY,
                error_code=_OLLAMA_ERROR,
            )
        return text.strip()


_ollama_client: Optional[OllamaClient] = None


def get_ollama_client() -> OllamaClient:
    global _ollama_client
    if _ollama_client is None:
        _ollama_client = OllamaClient(OllamaConfig.from_settings())
    return _ollama_client
