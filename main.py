# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Shift Reconciler Service
========================
Reconciles attendance responses against shift slot capacity and confirmed
assignments for one target date at a time, and lets an admin assign, cancel
and replace slot rosters through the Assignment Service.

    Unassigned ─► Confirmed ─► Cancelled   (terminal)

Every read is a full re-fetch from the scheduling backend; this service keeps
no authoritative state of its own.

Port: 8010
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shift_reconciler.controllers import (
    assignment_controller,
    reconciliation_controller,
    system_controller,
)
from shift_reconciler.core.config import settings
from shift_reconciler.core.logging import get_logger
from shift_reconciler.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger("shift-reconciler")


# ── Lifespan ──
@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info(
        "Starting %s v%s, upstream=%s",
        settings.SERVICE_NAME, settings.SERVICE_VERSION, settings.UPSTREAM_API_URL,
    )
    yield
    logger.info("Shutting down %s", settings.SERVICE_NAME)


# ── FastAPI App ──
app = FastAPI(
    title="Shift Reconciler Service",
    description="Reconciles attendance with shift slot capacity and assignments.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc)},
    )


app.include_router(system_controller.router)
app.include_router(reconciliation_controller.router)
app.include_router(assignment_controller.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
