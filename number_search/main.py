"""
Number Search - FastAPI Application

Backend for the lead console: people search over Forager and Aviato,
phone/email enrichment, bulk name lookup, lead confirmation and CSV export.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import LOG_LEVEL, ConfigurationError
from .routers import aviato, contacts, forager, leads, lookup
from .routers.deps import close_clients

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_clients()


app = FastAPI(
    title="Number Search API",
    description="Find phone numbers for people via Forager and Aviato",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    # Raised when a client is first built without credentials
    logger.error("[API] %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "Number Search API",
        "version": __version__,
    }


@app.get("/health")
async def health_check():
    """Health check with database connection test."""
    from .services.db.supabase_client import test_connection

    db_ok = test_connection()

    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
    }


# Include routers
app.include_router(forager.router, prefix="/api/forager", tags=["Forager"])
app.include_router(aviato.router, prefix="/api/aviato", tags=["Aviato"])
app.include_router(lookup.router, prefix="/api/lookup", tags=["Lookup"])
app.include_router(leads.router, prefix="/api/leads", tags=["Leads"])
app.include_router(contacts.router, prefix="/api/contacts", tags=["Contacts"])
