import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from claimcheck.api.routes import router
from claimcheck.config import get_settings
from claimcheck.services.glossary import get_glossary

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""

    # Load the glossary once at startup so a broken GLOSSARY_PATH fails the
    # deploy instead of the first request
    get_glossary()

    yield


app = FastAPI(
    title="Claim Check",
    description="Verifies factual claims against Wikidata with an LLM-assisted pipeline",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
