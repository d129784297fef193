from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Tuple

from src.clinic.domain.models.treatment import Treatment
from src.clinic.errors import AIServiceUnavailable
from src.clinic.infra.db import inmemory as repos
from src.clinic.services.ai import prompts
from src.clinic.services.ai.ollama import OllamaClient, get_ollama_client
from src.clinic.services.ai.openai_client import TreatmentAnalysisBackend, is_openai_available
from src.clinic.services.patients.service import patient_service
from src.clinic.services.treatments.service import treatment_service


class AIService:
    """Treatment analyses (hosted LLM) and patient summaries (local Ollama)."""

    def __init__(
        self,
        analysis_backend: Optional[TreatmentAnalysisBackend] = None,
        ollama_client_factory: Callable[[], OllamaClient] = get_ollama_client,
        availability_check: Callable[[], bool] = is_openai_available,
    ) -> None:
        self._analysis_backend = analysis_backend or TreatmentAnalysisBackend()
        self._ollama_client_factory = ollama_client_factory
        self._availability_check = availability_check

    def is_available(self) -> bool:
        return self._availability_check()

    def analyze_treatment(self, treatment_id: int) -> Tuple[Treatment, str]:
        """Generate an analysis for a treatment and store it on the record."""

        if not self.is_available():
            raise AIServiceUnavailable(
                "OpenAI API key is not configured. Please set OPENAI_API_KEY environment variable."
            )

        treatment = treatment_service.get_treatment(treatment_id)

        anamnesis = ""
        patient = repos.patient_repository.get(treatment.patient_id)
        if patient is not None and patient.anamnesis:
            anamnesis = patient.anamnesis

        analysis = self._analysis_backend.analyze(
            prompts.TREATMENT_ANALYSIS_PROMPT,
            prompts.treatment_analysis_input(treatment.content, anamnesis),
        )
        updated = treatment_service.update_treatment(treatment_id, {"ai_analysis": analysis})
        return updated, analysis

    def summarize_patient(self, patient_id: int, today: Optional[date] = None) -> str:
        patient = patient_service.get_patient(patient_id)
        treatments = repos.treatment_repository.find(patient_id=patient_id)
        appointments = repos.appointment_repository.find(patient_id=patient_id)

        prompt = prompts.patient_summary_prompt(patient, treatments, appointments, today or date.today())
        # Lower temperature keeps summaries factual and repeatable.
        return self._ollama_client_factory().generate(prompt, temperature=0.5, top_p=0.9)


ai_service = AIService()
