"""Main application entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api.error_handlers import validation_exception_handler
from src.api.routes import router
from src.utils.config import config
from src.utils.logger import StructuredLogger
from src.utils.trace_context import TRACE_HEADER, trace_scope

logger = StructuredLogger("App")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    try:
        config.validate()
    except ValueError as e:
        logger.critical("Configuration error", exception=e)
        raise
    yield
    # Shutdown


# Create FastAPI app
app = FastAPI(
    title="Widget Dashboard",
    description="Proxy, field explorer and OHLC normalizer for dashboard widgets",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    """Run each request under a trace ID and echo it back."""
    with trace_scope(request.headers.get(TRACE_HEADER)) as trace_id:
        response = await call_next(request)
    response.headers[TRACE_HEADER] = trace_id
    return response


# Include API routes
app.include_router(router, prefix="/api", tags=["widgets"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Serve static files from frontend dist directory
frontend_dist = Path(__file__).parent / "frontend" / "dist"
if frontend_dist.exists():
    app.mount("/", StaticFiles(directory=str(frontend_dist), html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
