"""
Triggers Package.

HTTP trigger implementations shared by the Azure Functions app and the
FastAPI Docker service.

HTTP Endpoints:
    /fetch (/api/fetch on Functions): Run the ingestion pipeline once
    /livez (/api/livez on Functions): Liveness probe

Exports:
    Base classes; trigger instances are imported from their modules
"""

# Only import base classes to avoid initialization at import time
# Trigger instances should be imported directly from their modules
from .http_base import BaseHttpTrigger, SystemMonitoringTrigger, TriggerResponse

__all__ = [
    'BaseHttpTrigger',
    'SystemMonitoringTrigger',
    'TriggerResponse',
]
