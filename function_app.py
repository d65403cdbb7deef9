"""
Azure Functions entry point for the PRISM fetch service.

Each call to /api/fetch runs one ingestion pipeline: fetch the published
PRISM archive, skip it if its Last-Modified version is already published,
otherwise convert prism.mdb to CSV and JSON and publish every artifact to
blob storage. An external scheduler (Logic App, cron, timer) calls the
endpoint periodically.

Architecture:
    HTTP GET/POST /api/fetch -> FetchTrigger -> PrismPipeline.run()
                                                   |
                         ArchiveSource -> StagingArea -> converters -> BlobRepository

Exports:
    app: Azure Function App instance

Dependencies:
    azure.functions: Azure Functions SDK
    triggers/*: HTTP trigger implementations
    services.pipeline: PrismPipeline orchestrator

Endpoints:
    GET|POST /api/fetch - Run one pipeline; 200 "OK" or 500 "/fetch failed: ..."
    GET      /api/livez - Liveness probe, no dependencies

Environment Variables:
    STORAGE_ACCOUNT_NAME or STORAGE_CONNECTION_STRING: Publication target
    PRISM_ZIP_URL, PRISM_CONTAINER: Source and container (defaults provided)
    See config/env_validation.py for the full list
"""

import azure.functions as func

from util_logger import LoggerFactory, ComponentType, quiet_library_loggers

quiet_library_loggers()

from triggers.fetch import FetchTrigger, PipelineProvider
from triggers.livez import livez_trigger

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "function_app")

# Pipeline is built lazily on the first /fetch, after app settings are loaded
fetch_trigger = FetchTrigger(PipelineProvider())

# Initialize function app with HTTP auth level
app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

logger.info("✅ Function app initialized: fetch, livez")


@app.route(route="fetch", methods=["GET", "POST"])
def fetch(req: func.HttpRequest) -> func.HttpResponse:
    """Run one ingestion pipeline."""
    return fetch_trigger.handle_request(req)


@app.route(route="livez", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def livez(req: func.HttpRequest) -> func.HttpResponse:
    """Liveness probe - is the app alive? No dependencies checked."""
    return livez_trigger.handle_request(req)
