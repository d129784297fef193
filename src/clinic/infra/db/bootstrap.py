from __future__ import annotations

import logging
from typing import Optional

from src.clinic.config import settings
from src.clinic.infra.db import inmemory as repos
from src.clinic.infra.db.models import Base
from src.clinic.infra.db.session import create_sqlalchemy_engine, create_sqlalchemy_session_factory
from src.clinic.infra.db.sql_records import (
    SqlAppointmentRepository,
    SqlPatientRepository,
    SqlTreatmentRepository,
)

logger = logging.getLogger("db")


def init_sql_repositories(database_url: Optional[str] = None, *, force: bool = False) -> bool:
    """Optionally switch in-memory repositories to SQL-backed implementations.

    If USE_SQL_REPOS is not enabled (and ``force`` is not set) or no database
    URL is configured, this is a no-op and the in-memory repositories remain
    active. Returns True when the SQL repositories were installed.
    """

    if not (settings.use_sql_repos or force):
        return False

    db_url = database_url or settings.database_url
    if not db_url:
        logger.warning("USE_SQL_REPOS is enabled but DATABASE_URL is not set; keeping in-memory repositories")
        return False

    engine = create_sqlalchemy_engine(db_url)

    # Create tables if they do not exist. Real deployments should manage the
    # schema with migrations.
    Base.metadata.create_all(engine)

    session_factory = create_sqlalchemy_session_factory(engine)

    repos.patient_repository = SqlPatientRepository(session_factory)
    repos.treatment_repository = SqlTreatmentRepository(session_factory)
    repos.appointment_repository = SqlAppointmentRepository(session_factory)
    logger.info("SQL repositories initialized")
    return True
