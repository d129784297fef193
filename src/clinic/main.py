import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.clinic.api.v1.routes_ai import router as ai_router_v1
from src.clinic.api.v1.routes_appointments import router as appointments_router_v1
from src.clinic.api.v1.routes_patients import router as patients_router_v1
from src.clinic.api.v1.routes_stats import router as stats_router_v1
from src.clinic.api.v1.routes_system import router as system_router_v1
from src.clinic.api.v1.routes_treatments import router as treatments_router_v1
from src.clinic.config import settings
from src.clinic.errors import ClinicError
from src.clinic.infra.db.bootstrap import init_sql_repositories

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("clinic")

app = FastAPI(title="Clinic Records API")


@app.on_event("startup")
async def on_startup() -> None:
    """Application startup hook.

    When USE_SQL_REPOS is enabled and a DATABASE_URL is configured, this
    swaps the in-memory patient, treatment and appointment repositories for
    SQL-backed ones. Otherwise (tests, local dev without a database) the
    in-memory repositories remain active.
    """

    init_sql_repositories()


@app.exception_handler(ClinicError)
async def clinic_error_handler(request: Request, exc: ClinicError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.error_code, "message": exc.message}},
    )


allow_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Origin"],
)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    """Basic liveness probe for the API root."""
    return {"status": "ok", "timestamp": datetime.now().isoformat()}


# Versioned API routers
app.include_router(system_router_v1, prefix="/api/v1")
app.include_router(patients_router_v1, prefix="/api/v1")
app.include_router(treatments_router_v1, prefix="/api/v1")
app.include_router(appointments_router_v1, prefix="/api/v1")
app.include_router(stats_router_v1, prefix="/api/v1")
app.include_router(ai_router_v1, prefix="/api/v1")
