"""FastAPI application entrypoint."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from clinic_desk.routers import get_api_router
from clinic_desk.services.registry import ClinicStateError
from clinic_desk.utils.config import get_settings


settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())

LOGGER = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.include_router(get_api_router())


@app.exception_handler(ClinicStateError)
def handle_state_error(request: Request, exc: ClinicStateError) -> JSONResponse:
    LOGGER.warning("%s %s refused: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(ValueError)
def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    LOGGER.info("%s %s rejected input: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.get("/health")
def health_check() -> dict[str, str]:
    """Return service health status."""

    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, str]:
    """Return application version metadata."""

    return {"version": settings.app_version}
