"""Storefront Reviews FastAPI application.

Processes review operations synchronously via HTTP. Every request runs
inside the Reviews domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the configuration overlay in reviews/domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from reviews.domain import reviews
from reviews.utils.logging import add_context, clear_context, configure_logging, get_logger

configure_logging()
reviews.init()

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Reviews API",
    description="Product reviews and rating aggregation",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Reviews domain context and bind request details to log lines."""
    add_context(method=request.method, path=request.url.path, user_id=request.headers.get("x-user-id"))
    try:
        with reviews.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from reviews.api import admin_router, review_router  # noqa: E402
from reviews.api.errors import register_error_handlers  # noqa: E402

app.include_router(review_router)
app.include_router(admin_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    logger.debug("Health check")
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"reviews": {"name": reviews.name}},
        }
    )
