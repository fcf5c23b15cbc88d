"""Logistics engine FastAPI application.

Processes commands synchronously over HTTP. Every request under the engine's
prefixes runs inside the logistics domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay from src/logistics/domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from logistics.domain import logistics
from protean.integrations.fastapi import register_exception_handlers

logistics.init()

_DOMAIN_PREFIXES = ("/deliveries", "/riders")

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Logistics Engine API",
    description="Delivery pricing, rider dispatch, status tracking and rider ledgers",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the logistics domain context for engine routes."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with logistics.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from logistics.api.routes import delivery_router, rider_router  # noqa: E402

app.include_router(delivery_router)
app.include_router(rider_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": logistics.name})
