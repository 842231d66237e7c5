# scan_engine/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from scan_engine.api.middleware import (
    AuditTriggerMiddleware,
    CorrelationIdMiddleware,
    OperatorContextMiddleware,
)
from scan_engine.api.routers import audit, health, machines, scan, settings as settings_router
from scan_engine.application.exceptions import (
    ApplicationError,
    NoActiveSessionError,
    StoreWriteFailedError,
)
from scan_engine.config.logging import configure_logging
from scan_engine.config.settings import get_settings
from scan_engine.domain.exceptions import (
    DomainError,
    DomainValidationError,
    HealthBlockedError,
    MachineNotFoundError,
)
from scan_engine.governance.exceptions import GovernanceError
from scan_engine.infrastructure.database.session import init_models

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> OperatorContext -> AuditTrigger.
app.add_middleware(AuditTriggerMiddleware)
app.add_middleware(OperatorContextMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(MachineNotFoundError)
async def machine_not_found_handler(request, exc: MachineNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(HealthBlockedError)
async def health_blocked_handler(request, exc: HealthBlockedError):
    return JSONResponse(
        status_code=409,
        content={"detail": exc.message, "health": exc.health, "reason": exc.reason},
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(NoActiveSessionError)
async def no_active_session_handler(request, exc: NoActiveSessionError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(StoreWriteFailedError)
async def store_write_failed_handler(request, exc: StoreWriteFailedError):
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(GovernanceError)
async def governance_error_handler(request, exc: GovernanceError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /metrics, /scan, /machines, /settings
app.include_router(health.router)
app.include_router(scan.router, prefix="/scan")
app.include_router(machines.router, prefix="/machines")
app.include_router(settings_router.router, prefix="/settings")
app.include_router(audit.router, prefix="/audit")
