"""FastAPI application entrypoint. No business logic; only wiring, middleware and error handling."""

import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import router as v1_router
from app.core.config import get_settings, settings
from app.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Moviedex API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures; clients get a generic 500 and never a stack trace."""
    logger.exception(
        "Unhandled error", extra={"path": request.url.path, "method": request.method}
    )
    body: dict[str, object] = {"detail": "Internal Server Error"}
    if get_settings().APP_ENV != "prod":
        body["error"] = {"name": type(exc).__name__, "message": str(exc)}
    return JSONResponse(status_code=500, content=body)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Moviedex API is running"}
