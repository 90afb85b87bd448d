import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from app.api.v1.router import api_router
from app.core.config import settings, validate_settings
from app.core.seed import seed_admin
from app.services.rate_limit_service import limiter, rate_limit_exceeded_handler
from app.services.sheets import SheetsClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    validate_settings(settings)
    app.state.sheets = SheetsClient.from_settings(settings)
    await seed_admin()
    yield


app = FastAPI(
    title="Lead Capture API",
    description="Student lead capture with a Google Sheets mirror",
    version=VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.client_urls,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health(request: Request):
    sheets = getattr(request.app.state, "sheets", None)
    return {
        "status": "ok",
        "service": "leadcapture-api",
        "version": VERSION,
        "sheets": bool(sheets and sheets.is_available()),
    }
