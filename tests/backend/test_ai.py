import json
from datetime import date, datetime
from uuid import uuid4

import httpx
import pytest
from fastapi import status

from src.clinic.api.v1 import routes_ai
from src.clinic.domain.models.appointment import Appointment
from src.clinic.domain.models.patient import Patient
from src.clinic.domain.models.treatment import Treatment
from src.clinic.errors import AIGenerationError, AIServiceUnavailable
from src.clinic.infra.db import inmemory as repos
from src.clinic.services.ai import prompts
from src.clinic.services.ai.ollama import OllamaClient, OllamaConfig
from src.clinic.services.ai.service import AIService


class FakeAnalysisBackend:
    def __init__(self, answer="Consider reassessing dosage."):
        self.answer = answer
        self.calls = []

    def analyze(self, system_prompt, user_content):
        self.calls.append((system_prompt, user_content))
        return self.answer


def _ollama(handler):
    config = OllamaConfig(base_url="http://ollama.test", model="gemma3:1b", timeout_seconds=1)
    return OllamaClient(config, transport=httpx.MockTransport(handler))


def _seed():
    repos.patient_repository.save(
        Patient(
            id=1,
            name="Giulia",
            surname="Neri",
            email="g@example.com",
            phone_number="000",
            fiscal_code="NRIGLI90",
            date_of_birth="1990-06-20",
            anamnesis="Asthma since childhood",
        )
    )
    repos.treatment_repository.save(Treatment(id=10, patient_id=1, date="2024-05-01", content="Inhaler review"))
    repos.treatment_repository.save(
        Treatment(id=11, patient_id=1, date="2024-06-01", content="Spirometry", attachments=[{"type": "text", "data": "ok"}])
    )


def test_analyze_treatment_stores_result():
    _seed()
    backend = FakeAnalysisBackend()
    service = AIService(analysis_backend=backend, availability_check=lambda: True)

    treatment, analysis = service.analyze_treatment(10)

    assert analysis == "Consider reassessing dosage."
    assert treatment.ai_analysis == analysis
    assert repos.treatment_repository.get(10).ai_analysis == analysis
    system_prompt, user_content = backend.calls[0]
    assert system_prompt == prompts.TREATMENT_ANALYSIS_PROMPT
    assert user_content.startswith("PATIENT HISTORY:\nAsthma since childhood")
    assert user_content.endswith("TREATMENT:\nInhaler review")


def test_analyze_without_key_is_unavailable():
    _seed()
    service = AIService(analysis_backend=FakeAnalysisBackend(), availability_check=lambda: False)

    with pytest.raises(AIServiceUnavailable):
        service.analyze_treatment(10)


def test_analysis_input_without_history():
    assert prompts.treatment_analysis_input("Physio session", "   ") == "Physio session"


def test_age_on_birthday_boundary():
    assert prompts.age_on("1990-06-20", date(2024, 6, 19)) == 33
    assert prompts.age_on("1990-06-20", date(2024, 6, 20)) == 34
    assert prompts.age_on("unknown", date(2024, 6, 20)) is None


def test_summary_prompt_lists_history_newest_first():
    _seed()
    repos.appointment_repository.save(Appointment(id=uuid4(), patient_id=1, date=datetime(2024, 7, 1, 9, 0)))
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"response": "  Patient aged 34 years.  ", "done": True})

    client = _ollama(handler)
    service = AIService(analysis_backend=FakeAnalysisBackend(), ollama_client_factory=lambda: client)

    summary = service.summarize_patient(1, today=date(2024, 7, 2))

    assert summary == "Patient aged 34 years."
    assert seen["model"] == "gemma3:1b"
    assert seen["stream"] is False
    assert seen["options"]["temperature"] == 0.5
    prompt = seen["prompt"]
    assert "- Age: 34 years old" in prompt
    assert "TREATMENT HISTORY (2 treatments):" in prompt
    assert prompt.index("Date: 2024-06-01 (1 attachment)") < prompt.index("Date: 2024-05-01")
    assert "Appointment #1 - Date: 2024-07-01" in prompt


def test_summary_prompt_without_history():
    patient = Patient(id=2, name="A", surname="B", email="e", phone_number="p", fiscal_code="f")

    prompt = prompts.patient_summary_prompt(patient, [], [], date(2024, 1, 1))

    assert "- Medical History: Not provided" in prompt
    assert "TREATMENT HISTORY: No treatments recorded." in prompt
    assert "APPOINTMENT HISTORY: No appointments recorded." in prompt


def test_ollama_incomplete_response():
    client = _ollama(lambda request: httpx.Response(200, json={"response": "", "done": False}))

    with pytest.raises(AIGenerationError) as excinfo:
        client.generate("hello")
    assert excinfo.value.status_code == status.HTTP_502_BAD_GATEWAY


def test_ollama_timeout_maps_to_gateway_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(AIGenerationError) as excinfo:
        _ollama(handler).generate("hello")
    assert excinfo.value.status_code == status.HTTP_504_GATEWAY_TIMEOUT


def test_ollama_availability():
    assert _ollama(lambda request: httpx.Response(200, json={"models": []})).is_available()
    assert not _ollama(lambda request: httpx.Response(500)).is_available()


async def test_status_endpoint(client, monkeypatch):
    monkeypatch.setattr(
        routes_ai, "ai_service", AIService(analysis_backend=FakeAnalysisBackend(), availability_check=lambda: False)
    )

    response = await client.get("/api/v1/ai/status")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["available"] is False


async def test_analyze_endpoint_unavailable(client, monkeypatch):
    _seed()
    monkeypatch.setattr(
        routes_ai, "ai_service", AIService(analysis_backend=FakeAnalysisBackend(), availability_check=lambda: False)
    )

    response = await client.post("/api/v1/ai/treatments/10/analyze")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["error"]["code"] == "Service Unavailable"


async def test_analyze_endpoint(client, monkeypatch):
    _seed()
    monkeypatch.setattr(
        routes_ai, "ai_service", AIService(analysis_backend=FakeAnalysisBackend("Stable."), availability_check=lambda: True)
    )

    response = await client.post("/api/v1/ai/treatments/10/analyze")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["analysis"] == "Stable."
    assert response.json()["treatment"]["ai_analysis"] == "Stable."
