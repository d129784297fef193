from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from src.clinic.domain.models.treatment import Treatment
from src.clinic.services.ai.service import ai_service
from src.clinic.services.audit.service import audit_service


router = APIRouter(prefix="/ai", tags=["ai"])


class TreatmentAnalysisResponse(BaseModel):
    treatment: Treatment
    analysis: str


class PatientSummaryResponse(BaseModel):
    patient_id: int
    summary: str


class AIStatusResponse(BaseModel):
    available: bool
    message: str


@router.post("/treatments/{treatment_id}/analyze", response_model=TreatmentAnalysisResponse)
async def analyze_treatment(treatment_id: int) -> TreatmentAnalysisResponse:
    treatment, analysis = ai_service.analyze_treatment(treatment_id)
    audit_service.log_event(action="analyze_treatment", resource_type="treatment", resource_id=str(treatment_id))
    return TreatmentAnalysisResponse(treatment=treatment, analysis=analysis)


@router.post("/patients/{patient_id}/summary", response_model=PatientSummaryResponse)
async def summarize_patient(patient_id: int) -> PatientSummaryResponse:
    summary = ai_service.summarize_patient(patient_id)
    audit_service.log_event(action="summarize_patient", resource_type="patient", resource_id=str(patient_id))
    return PatientSummaryResponse(patient_id=patient_id, summary=summary)


@router.get("/status", response_model=AIStatusResponse)
async def ai_status() -> AIStatusResponse:
    available = ai_service.is_available()
    message = (
        "AI service is available"
        if available
        else "AI service is not available. OPENAI_API_KEY environment variable is not set."
    )
    return AIStatusResponse(available=available, message=message)
