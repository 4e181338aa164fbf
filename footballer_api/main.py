"""
Footballer API
==============

FastAPI application: routers, middleware, and the handler that turns
unparseable request bodies into 400s.

Run with:
    footballer-api serve
    uvicorn footballer_api.main:app --port 4000
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse

from footballer_api.config import settings, configure_logging
from footballer_api.database import engine, check_database_connection
from footballer_api.middleware import setup_middleware
from footballer_api.routers import health_router, footballers_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(f"Footballer API {settings.api_version} starting ({settings.environment})")
    await check_database_connection()
    logger.info("Database reachable")
    yield
    logger.info("Footballer API shutting down")
    await engine.dispose()


app = FastAPI(
    title="Footballer API",
    description="""
Footballer records over JSON.

- `GET /v1/footballers` searches names (full text), filters by club and
  positions, sorts on an allow-listed column and pages the result
- `PATCH` uses the record `version` for optimistic concurrency; a lost
  race is answered with 409

Write endpoints need the `X-API-Key` header.
""",
    version=settings.api_version,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    openapi_tags=[
        {"name": "Footballers", "description": "Search, list, create, update and delete footballers"},
        {"name": "Health", "description": "Liveness, readiness and status probes"},
    ],
)

setup_middleware(app)


@app.middleware("http")
async def response_time_header(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Response-Time"] = f"{(time.perf_counter() - started) * 1000:.2f}ms"
    return response


@app.exception_handler(RequestValidationError)
async def bad_request_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    """
    A body FastAPI cannot parse into the request schema is a 400. Field
    rules are checked afterwards by footballer validation and answer 422.
    """
    message = "body contains badly-formed JSON"

    errors = exc.errors()
    if errors and errors[0].get("type") != "json_invalid":
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        if location:
            message = f"body contains incorrect value for field {location!r}: {first.get('msg')}"

    return ORJSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


app.include_router(health_router)
app.include_router(footballers_router, prefix="/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    return {
        "name": "Footballer API",
        "version": settings.api_version,
        "environment": settings.environment,
        "docs": "/docs",
        "health": "/health",
        "api": {
            "footballers": "/v1/footballers",
            "footballer": "/v1/footballers/{footballer_id}",
        },
        "timestamp": datetime.utcnow().isoformat(),
    }
