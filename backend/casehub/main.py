import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from casehub.api.auth import router as auth_router
from casehub.api.cases import router as cases_router
from casehub.api.health import router as health_router
from casehub.api.users import router as users_router
from casehub.core.config import get_settings, validate_runtime_config
from casehub.services.observability import emit_structured_log, trace_scope

settings = get_settings()
if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

validate_runtime_config(settings)
app = FastAPI(title=settings.app_name)
if settings.cors_allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _log_request(request: Request, status_code: int, started: float) -> None:
    emit_structured_log(
        component="api",
        event="http_request",
        case_id=request.path_params.get("case_id"),
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    with trace_scope(request.headers.get("x-trace-id")) as trace_id:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            _log_request(request, 500, started)
            raise
        _log_request(request, response.status_code, started)
        response.headers["X-Trace-Id"] = trace_id
        return response


app.include_router(health_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(cases_router)
