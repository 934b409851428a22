import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from appmanager.core.models import ErrorEnvelope
from appmanager.loggingConf import configure_logging
from emulator.api.admin import router as admin_router
from emulator.api.deployment_targets import router as deployment_targets_router
from emulator.api.namespaces import router as namespaces_router
from emulator.api.session_clusters import router as session_clusters_router
from emulator.api.ui import router as ui_router
from emulator.core.state import APP_VERSION, reconciler, store
from emulator.core.store import ConflictError, NotFoundError

configure_logging()
logger = logging.getLogger("emulator")


app = FastAPI(
    title="Flink AppManager Emulator",
    version=APP_VERSION,
    description="In-memory stand-in for the AppManager namespace, deployment target and session cluster APIs.",
)


def _envelope(status_code: int, message: str, reason: str) -> JSONResponse:
    body = ErrorEnvelope(
        kind="Error",
        api_version="v1",
        message=message,
        reason=reason,
        status_code=status_code,
        context={},
    )
    return JSONResponse(body.to_wire(), status_code=status_code)


@app.exception_handler(NotFoundError)
def not_found(request: Request, exc: NotFoundError):
    return _envelope(404, str(exc), "NotFound")


@app.exception_handler(ConflictError)
def conflict(request: Request, exc: ConflictError):
    return _envelope(409, str(exc), "Conflict")


@app.exception_handler(ValueError)
def bad_request(request: Request, exc: ValueError):
    return _envelope(400, str(exc), "BadRequest")


@app.exception_handler(RequestValidationError)
def invalid_body(request: Request, exc: RequestValidationError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return _envelope(400, "invalid request body", "BadRequest")


@app.on_event("startup")
def on_startup():
    logger.info("Starting emulator %s", APP_VERSION)
    reconciler.start()


@app.on_event("shutdown")
def on_shutdown():
    reconciler.stop()


@app.get("/health")
def health():
    return {"ok": True, "service": "appmanager-emulator", "namespaces": len(store.list_namespaces())}


@app.get("/version")
def version():
    return {"version": APP_VERSION}


app.include_router(namespaces_router, prefix="/api/v1")
app.include_router(deployment_targets_router, prefix="/api/v1")
app.include_router(session_clusters_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api")
app.include_router(ui_router)
