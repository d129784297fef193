from fastapi import APIRouter

from src.clinic.services.ai.ollama import get_ollama_client
from src.clinic.services.ai.openai_client import is_openai_available

router = APIRouter(prefix="", tags=["system"])


@router.get("/health")
async def health_check_v1() -> dict:
    """API v1 health endpoint."""
    return {"status": "ok", "version": "v1"}


@router.get("/system/ai/health")
def ai_health_v1() -> dict:
    """Reachability of the two inference backends.

    - ``analysis`` is ``"ok"`` when an OpenAI key is configured, else ``"disabled"``.
    - ``summary`` is ``"ok"`` when the Ollama server answers ``/api/tags``,
      else ``"unreachable"``.
    """

    client = get_ollama_client()
    return {
        "analysis": "ok" if is_openai_available() else "disabled",
        "summary": "ok" if client.is_available() else "unreachable",
        "summary_model": client.model,
    }
