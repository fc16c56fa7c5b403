"""FastAPI application for mapping extraction."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.mapping.extractor import ExtractionOptions
from src.routes import mapping

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the extraction configuration the service starts with."""
    options = ExtractionOptions.from_env()
    logger.info(f"June Mapping Extractor listening on port {os.getenv('PORT', '8080')}")
    logger.info(
        f"Entry point '{options.entry_point}', shader glob '{options.shader_glob}', "
        f"shader root {options.shader_root or '(from source path)'}"
    )
    yield
    logger.info("June Mapping Extractor stopped")


app = FastAPI(
    title="June Mapping Extractor",
    description="Static extraction of shader UI mappings from editor draw routines",
    version="0.1.0",
    lifespan=lifespan,
)

cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(mapping.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
