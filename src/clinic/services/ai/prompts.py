from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from src.clinic.core.dates import normalize_date
from src.clinic.domain.models.appointment import Appointment
from src.clinic.domain.models.patient import Patient
from src.clinic.domain.models.treatment import Treatment

TREATMENT_ANALYSIS_PROMPT = (
    "Act as a clinical support agent for physicians. Use only established medical knowledge and "
    "recognised evidence. Do not replace the physician or give definitive diagnoses or therapies; "
    "act as decision support. Given a treatment that has already been performed, analyse causes of "
    "suboptimal response or persistent symptoms, consider pathophysiological mechanisms, adverse "
    "effects, comorbidities and risk factors, propose clinical hypotheses, targeted follow-up and "
    "possible optimisations weighing benefits and risks, and ask for missing clinical data when "
    "needed. Keep the language technical, concise and focused on patient safety. Use plain text "
    "only, without markdown and without line breaks unless essential. When available, take the "
    "patient's medical history into account. Limit the answer to 150 words. Answer in the language "
    "of the treatment notes."
)

PATIENT_SUMMARY_PROMPT = """
### Instructions

Act as a medical records writer. Your only task is to summarise the data provided without adding
interpretation, therapeutic advice or diagnostic suggestions.

**Formatting and style:**
- Start directly with the data (e.g. "Patient aged [age]...").
- Do NOT add titles, headings or section labels.
- Do NOT use greetings or preambles.
- Use only objective medical register (e.g. "reports", "presents", "unremarkable history").

**Content (pure summary):**
- Summarise the history and treatments in 1-2 flowing paragraphs.
- If a piece of information is absent, do not mention it; report only what is known.
- Never add recommendations, suggest tests, propose rehabilitation programmes or differential
  diagnoses. Stick to the facts in the input.
- Remove redundancy: do not repeat a symptom already mentioned.

### Input
"""


def treatment_analysis_input(content: str, anamnesis: Optional[str] = None) -> str:
    """User message for a treatment analysis, prefixed with the history when known."""

    if anamnesis and anamnesis.strip():
        return f"PATIENT HISTORY:\n{anamnesis}\n\n---\n\nTREATMENT:\n{content}"
    return content


def age_on(date_of_birth: str, today: date) -> Optional[int]:
    born = normalize_date(date_of_birth)
    if born is None:
        return None
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def _date_label(value) -> str:
    parsed = normalize_date(value)
    return parsed.date().isoformat() if parsed else str(value)


def _recency_key(value) -> datetime:
    return normalize_date(value) or datetime.min


def patient_summary_prompt(
    patient: Patient,
    treatments: Sequence[Treatment],
    appointments: Sequence[Appointment],
    today: date,
) -> str:
    age = age_on(patient.date_of_birth, today) if patient.date_of_birth else None

    lines = ["PATIENT INFORMATION:"]
    if age is not None:
        lines.append(f"- Age: {age} years old")
    if patient.anamnesis:
        lines.append(f"- Medical History: {patient.anamnesis}")
    else:
        lines.append("- Medical History: Not provided")
    lines.append("")

    if treatments:
        lines.append(f"TREATMENT HISTORY ({len(treatments)} treatments):")
        ordered = sorted(treatments, key=lambda t: _recency_key(t.date), reverse=True)
        for index, treatment in enumerate(ordered, start=1):
            count = len(treatment.attachments)
            suffix = f" ({count} attachment{'s' if count > 1 else ''})" if count else ""
            lines.append(f"Treatment #{index} - Date: {_date_label(treatment.date)}{suffix}")
            lines.append(f"Content: {treatment.content}")
    else:
        lines.append("TREATMENT HISTORY: No treatments recorded.")
    lines.append("")

    if appointments:
        lines.append(f"APPOINTMENT HISTORY ({len(appointments)} appointments):")
        ordered_appointments = sorted(appointments, key=lambda a: a.date, reverse=True)
        for index, appointment in enumerate(ordered_appointments, start=1):
            lines.append(f"Appointment #{index} - Date: {_date_label(appointment.date)}")
    else:
        lines.append("APPOINTMENT HISTORY: No appointments recorded.")

    return PATIENT_SUMMARY_PROMPT + "\n".join(lines)
