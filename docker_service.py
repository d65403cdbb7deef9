#!/usr/bin/env python3
# ============================================================================
# CLAUDE CONTEXT - DOCKER SERVICE
# ============================================================================
# STATUS: Core Component - Docker container serving the fetch endpoint
# PURPOSE: FastAPI shell around the same triggers as function_app.py
# ============================================================================
"""
Docker Service - HTTP API.

Runs the fetch pipeline behind FastAPI for container platforms (Cloud Run
style: the platform sets PORT and a scheduler calls /fetch).

HTTP Endpoints:
    /fetch   - Run one pipeline; 200 "OK" or 500 "/fetch failed: ..."
    /livez   - Liveness probe (is the process running?)
    /readyz  - Readiness probe (is the environment valid?)

Usage:
    # Start the server
    python docker_service.py
    uvicorn docker_service:app --host 0.0.0.0 --port 8080

    # Test endpoints
    curl http://localhost:8080/livez
    curl http://localhost:8080/fetch
"""

import os
import sys
import logging
from typing import Callable, Optional

from util_logger import JSONFormatter, quiet_library_loggers


def configure_docker_logging():
    """Route uvicorn through the JSON formatter and quiet the SDKs."""
    if hasattr(sys.stdout, "reconfigure"):
        # Container log collectors read stdout line by line
        sys.stdout.reconfigure(line_buffering=True)

    json_handler = logging.StreamHandler(sys.stdout)
    json_handler.setLevel(logging.INFO)
    json_handler.setFormatter(JSONFormatter())

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(name)
        server_logger.handlers = [json_handler]
        server_logger.propagate = False

    quiet_library_loggers()


configure_docker_logging()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from config import debug_config
from config.defaults import AppDefaults
from config.env_validation import validate_environment, log_validation_results
from services.pipeline import PrismPipeline
from triggers.fetch import FetchTrigger, PipelineProvider
from triggers.http_base import TriggerResponse
from triggers.livez import livez_trigger
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "docker_service")


def _to_fastapi(response: TriggerResponse) -> Response:
    return Response(
        content=response.body,
        status_code=response.status_code,
        media_type=response.mimetype,
        headers=response.headers,
    )


def create_app(pipeline_provider: Optional[Callable[[], PrismPipeline]] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        pipeline_provider: Returns the pipeline to run; defaults to the
            lazily-built production pipeline

    Returns:
        FastAPI app
    """
    fetch_trigger = FetchTrigger(pipeline_provider or PipelineProvider())

    api = FastAPI(
        title="PRISM Fetch",
        description="Fetches the PRISM archive and publishes CSV/JSON extracts to blob storage",
        version="1.0.0",
    )

    # ========================================================================
    # PIPELINE ENDPOINT
    # ========================================================================

    # Sync handler: FastAPI runs it in the threadpool, so a long run never
    # blocks the event loop or /livez
    @api.api_route("/fetch", methods=["GET", "POST"])
    def fetch(request: Request) -> Response:
        """Run one ingestion pipeline."""
        return _to_fastapi(fetch_trigger.handle(request.method, str(request.url)))

    # ========================================================================
    # HEALTH CHECK ENDPOINTS
    # ========================================================================

    @api.get("/livez")
    def liveness_probe(request: Request) -> Response:
        """
        Liveness probe.

        Returns 200 if the process is running. Never checks dependencies.
        """
        return _to_fastapi(livez_trigger.handle(request.method, str(request.url)))

    @api.get("/readyz")
    def readiness_probe():
        """
        Readiness probe.

        Returns 200 if the environment passes validation, 503 otherwise.
        """
        errors = validate_environment(include_warnings=False)
        if errors:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "not_ready",
                    "errors": [e.to_dict() for e in errors],
                },
            )
        return {"status": "ready"}

    return api


app = create_app()


# ============================================================================
# STARTUP
# ============================================================================

def log_startup(port: int) -> bool:
    """
    Log the endpoints, the effective configuration and the environment checks.

    Returns:
        False if the environment has errors (the service still starts)
    """
    logger.info("=" * 60)
    logger.info("PRISM Fetch - Docker Service")
    logger.info(f"Port: {port}")
    logger.info("=" * 60)
    logger.info("  GET|POST /fetch  - Run the pipeline")
    logger.info("  GET      /livez  - Liveness probe")
    logger.info("  GET      /readyz - Readiness probe")
    logger.info("=" * 60)
    logger.info("Configuration loaded", extra={'custom_dimensions': {'config': debug_config()}})

    if not log_validation_results(LoggerFactory.create_logger(ComponentType.VALIDATOR, "env_validation")):
        logger.warning("⚠️ Environment has errors, /fetch will fail until they are fixed")
        return False
    return True


if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", str(AppDefaults.PORT)))
    log_startup(port)
    uvicorn.run(app, host="0.0.0.0", port=port)
