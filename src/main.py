import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.v1.api import api_router
from core.config import get_settings
from core.error_handler import (
    CorrelationIdMiddleware,
    ExceptionNormalizationMiddleware,
    global_exception_handler,
    setup_logging,
)
from core.exceptions import AssistantError, DomainError
from core.observability import configure_observability
from dependencies.services import get_dataset


configure_observability()
setup_logging()

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Warm the dataset so the first request does not pay for loading it. A bad
    # file is logged here and reported as 503 by the data endpoints.
    try:
        get_dataset()
    except DomainError as exc:
        logger.error("Dataset not loaded at startup: %s", exc)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Conversational financial analysis over product metrics",
    version="0.1.0",
    docs_url=None,  # We'll mount docs under /api/v1/docs
    redoc_url=None,
    lifespan=lifespan,
)

app.add_middleware(ExceptionNormalizationMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

app.add_exception_handler(StarletteHTTPException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(AssistantError, global_exception_handler)
app.add_exception_handler(DomainError, global_exception_handler)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


# Mount OpenAPI docs under /api/v1/docs and /api/v1/redoc
@app.get("/api/v1/docs", include_in_schema=False)
def custom_swagger_ui_html():
    return get_swagger_ui_html(openapi_url="/openapi.json", title="AI CFO API Docs")


@app.get("/api/v1/redoc", include_in_schema=False)
def redoc_html():
    return get_redoc_html(openapi_url="/openapi.json", title="AI CFO API Redoc")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
