# ============================================================================
# CLAUDE CONTEXT - FETCH HTTP TRIGGER
# ============================================================================
# STATUS: HTTP Trigger - runs one pipeline per request
# PURPOSE: Map /fetch to PrismPipeline.run and render OK / failure text
# EXPORTS: FetchTrigger, PipelineProvider, run_fetch
# INTERFACES: BaseHttpTrigger (http_base.py)
# DEPENDENCIES: config, services.pipeline, exceptions
# PATTERNS: Lazy pipeline construction, thread-safe provider
# ENTRY_POINTS: FetchTrigger(PipelineProvider()).handle_request(req)
# ============================================================================
"""
Fetch HTTP Trigger.

One request, one pipeline run. The response contract is plain text:

    200  OK                                  processed or skipped
    500  /fetch failed: <cause chain>        any fatal error

The pipeline is built on the first request, not at import, so app
settings and managed identity are available by then (see the
infrastructure package docstring). A broken environment surfaces as a
ConfigurationError in the 500 body and is retried on the next request.

Exports:
    FetchTrigger: Trigger class
    PipelineProvider: Lazily builds and caches the production pipeline
    run_fetch: Run one pipeline through the trigger contract
"""

import threading
from typing import Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from config import get_config
from config.env_validation import validate_environment
from core.models import PipelineRunResult
from exceptions import ConfigurationError, describe_error_chain
from services.pipeline import PrismPipeline
from .http_base import BaseHttpTrigger, TriggerResponse


FAILURE_PREFIX = "/fetch failed: "


class PipelineProvider:
    """
    Builds the production pipeline once per process.

    Environment validation runs before the first build; errors become a
    ConfigurationError and nothing is cached, so fixing the app settings
    does not need a restart.
    """

    def __init__(self, factory: Callable[..., PrismPipeline] = PrismPipeline.from_config):
        self._factory = factory
        self._pipeline: Optional[PrismPipeline] = None
        self._lock = threading.Lock()

    def __call__(self) -> PrismPipeline:
        if self._pipeline is None:
            with self._lock:
                if self._pipeline is None:
                    self._pipeline = self._build()
        return self._pipeline

    def _build(self) -> PrismPipeline:
        errors = validate_environment(include_warnings=False)
        if errors:
            details = "; ".join(f"{e.var_name}: {e.message}" for e in errors)
            raise ConfigurationError(f"invalid environment: {details}")
        try:
            config = get_config()
        except PydanticValidationError as e:
            raise ConfigurationError(f"invalid configuration: {e}") from e
        return self._factory(config)


class FetchTrigger(BaseHttpTrigger):
    """Runs the pipeline and renders the plain-text result."""

    def __init__(self, pipeline_provider: Callable[[], PrismPipeline]):
        super().__init__("fetch")
        self._pipeline_provider = pipeline_provider

    def get_allowed_methods(self) -> List[str]:
        return ["GET", "POST"]

    def process_request(self, request_id: str) -> PipelineRunResult:
        pipeline = self._pipeline_provider()
        result = pipeline.run()
        self.logger.info(
            f"[{self.trigger_name}] Request {request_id}: run {result.run_id} {result.status.value} "
            f"version {result.version_tag}",
            extra={'custom_dimensions': {'request_id': request_id, **result.summary()}}
        )
        return result

    def _create_success_response(self, data: PipelineRunResult, request_id: str) -> TriggerResponse:
        self.logger.info("OK")
        return TriggerResponse.text(200, "OK", request_id)

    def handle_exception(self, error: Exception, request_id: str) -> TriggerResponse:
        message = FAILURE_PREFIX + describe_error_chain(error)
        self.logger.error(
            f"💥 [{self.trigger_name}] Request {request_id}: {message}",
            exc_info=True,
            extra={'custom_dimensions': {'request_id': request_id, 'error_type': type(error).__name__}}
        )
        return TriggerResponse.text(500, message, request_id)


def run_fetch(pipeline: PrismPipeline) -> TriggerResponse:
    """Run one pipeline and render it as the /fetch endpoint would."""
    return FetchTrigger(lambda: pipeline).handle("GET", "/fetch")
