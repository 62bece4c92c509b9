"""FastAPI application entrypoint.

Builds the app, wires the per-entity routers and renders every
`CampusError` as `{"detail": message}` with the error's status code.
Controllers stay thin: they declare policies, delegate to services and
return the response models.

Routers mounted:
- /profiles
- /students
- /lecturer
- /courses
- /departments
- /auth
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import settings
from .database import create_db_and_tables
from .errors import AuthenticationError, CampusError, ValidationError
from .routes import auth, courses, departments, lecturers, profiles, students

logger = logging.getLogger("campus.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    yield


app = FastAPI(title="Campus API", lifespan=lifespan)

# Allow simple browser testing from local frontends
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _request_record(request: Request, req_id: str, started: float) -> dict:
    return {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed %s", json.dumps(_request_record(request, req_id, started), ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    record = _request_record(request, req_id, started)
    record["status_code"] = response.status_code
    logger.info("request_done %s", json.dumps(record, ensure_ascii=True))
    return response


@app.exception_handler(CampusError)
async def campus_error_handler(request: Request, exc: CampusError):
    body = {"detail": exc.message}
    headers = None
    if isinstance(exc, ValidationError) and exc.fields:
        body["errors"] = [{"field": k, "message": v} for k, v in exc.fields.items()]
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("request_error %s", json.dumps({
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "error": exc.message,
        }, ensure_ascii=True))
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # drop the leading "body"/"query"/"path" location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "invalid value")})
    return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error request_id=%s", getattr(request.state, "request_id", None))
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
app.include_router(students.router, prefix="/students", tags=["students"])
app.include_router(lecturers.router, prefix="/lecturer", tags=["lecturers"])
app.include_router(courses.router, prefix="/courses", tags=["courses"])
app.include_router(departments.router, prefix="/departments", tags=["departments"])
app.include_router(auth.router, prefix="/auth", tags=["auth"])


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
