import pytest
from httpx import ASGITransport, AsyncClient

from src.clinic.infra.db import inmemory as repos
from src.clinic.infra.storage import attachments as storage
from src.clinic.main import app


@pytest.fixture(autouse=True)
def fresh_repositories(monkeypatch):
    """Give every test empty in-memory repositories."""

    monkeypatch.setattr(repos, "patient_repository", repos.InMemoryPatientRepository())
    monkeypatch.setattr(repos, "treatment_repository", repos.InMemoryTreatmentRepository())
    monkeypatch.setattr(repos, "appointment_repository", repos.InMemoryAppointmentRepository())


@pytest.fixture(autouse=True)
def attachments_dir(monkeypatch, tmp_path):
    base = tmp_path / "attachments"
    monkeypatch.setattr(storage, "attachment_storage_backend", storage.LocalAttachmentStorageBackend(base))
    return base


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
