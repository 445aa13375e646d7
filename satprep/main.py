import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from starlette.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Load env from the project root .env before settings are read
project_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(project_dir, ".env"))

from satprep import __version__
from satprep.core.config import settings, validate_config
from satprep.core.logging import configure_logging
from satprep.core.middleware.request_id import RequestIdMiddleware
from satprep.core.validation import validate_env
from satprep.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from satprep.api import daily_challenges, health

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("satprep")
    logger.info("Starting SAT prep backend...")
    app.state.startup_time = time.time()
    try:
        yield
    finally:
        logging.getLogger("satprep").info("Stopping SAT prep backend...")


app = FastAPI(title="SAT Prep - Backend", version=__version__, lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(daily_challenges.router, tags=["daily-challenges"])
app.include_router(health.root_router, tags=["health"])


@app.get("/v1/version")
def version_endpoint():
    return {"version": __version__, "env": settings.ENV}
