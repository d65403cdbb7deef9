"""
Base class for the service's HTTP triggers.

A trigger implements process_request and get_allowed_methods; the base
class adds method filtering, request ids, logging and error rendering.
handle() does not depend on a web framework and returns a TriggerResponse,
so the Azure Functions app and the FastAPI service answer from the same
trigger objects.

Exports:
    TriggerResponse: Status, body and headers of a response
    BaseHttpTrigger: Base class for HTTP triggers
    SystemMonitoringTrigger: Base class for probes
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List
import uuid
import json
import sys
from datetime import datetime, timezone

import azure.functions as func
from util_logger import LoggerFactory, ComponentType


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TriggerResponse:
    status_code: int
    body: str
    mimetype: str = "application/json"
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def text(cls, status_code: int, body: str, request_id: str) -> 'TriggerResponse':
        return cls(status_code, body, "text/plain", {"X-Request-ID": request_id})

    @classmethod
    def json(cls, status_code: int, payload: Dict[str, Any], request_id: str) -> 'TriggerResponse':
        payload = {**payload, "request_id": request_id, "timestamp": _utc_now()}
        return cls(status_code, json.dumps(payload, default=str), headers={"X-Request-ID": request_id})

    def to_azure(self) -> func.HttpResponse:
        return func.HttpResponse(
            self.body,
            status_code=self.status_code,
            mimetype=self.mimetype,
            headers=self.headers,
        )


class BaseHttpTrigger(ABC):
    """
    Request handling shared by all triggers.

    Subclasses may override _create_success_response to change how the
    result of process_request is rendered, and handle_exception to change
    how failures are rendered.
    """

    def __init__(self, trigger_name: str):
        self.trigger_name = trigger_name
        self.logger = LoggerFactory.create_logger(ComponentType.TRIGGER, f"HttpTrigger.{trigger_name}")

    @abstractmethod
    def process_request(self, request_id: str) -> Any:
        """Do the trigger's work; raised exceptions go to handle_exception."""

    @abstractmethod
    def get_allowed_methods(self) -> List[str]:
        """Upper-case HTTP methods this trigger answers."""

    def handle(self, method: str, url: str = "") -> TriggerResponse:
        """
        Serve one request.

        Args:
            method: HTTP method
            url: Request URL, only logged

        Returns:
            405 for other methods, else the rendered result or failure
        """
        request_id = uuid.uuid4().hex[:8]
        allowed = self.get_allowed_methods()
        self.logger.info(f"🌐 [{self.trigger_name}] Request {request_id} started: {method} {url}")

        if method.upper() not in allowed:
            self.logger.warning(f"[{self.trigger_name}] Request {request_id}: {method} not allowed")
            return TriggerResponse.json(405, {
                "error": "Method not allowed",
                "message": f"Method {method} not allowed. Allowed: {', '.join(allowed)}",
            }, request_id)

        try:
            result = self.process_request(request_id)
        except Exception as e:
            return self.handle_exception(e, request_id)

        self.logger.info(f"✅ [{self.trigger_name}] Request {request_id} completed successfully")
        return self._create_success_response(result, request_id)

    def handle_request(self, req: func.HttpRequest) -> func.HttpResponse:
        """Azure Functions entry point."""
        return self.handle(req.method, req.url).to_azure()

    def handle_exception(self, error: Exception, request_id: str) -> TriggerResponse:
        self.logger.error(f"💥 [{self.trigger_name}] Internal error: {error}", exc_info=True)
        return TriggerResponse.json(500, {
            "error": "Internal server error",
            "message": str(error),
            "debug": {
                "trigger_name": self.trigger_name,
                "python_version": sys.version.split()[0],
            },
        }, request_id)

    def _create_success_response(self, data: Any, request_id: str) -> TriggerResponse:
        return TriggerResponse.json(200, data, request_id)


class SystemMonitoringTrigger(BaseHttpTrigger):
    """Base for probes: no dependencies beyond the process itself."""

    def get_system_timestamp(self) -> str:
        return _utc_now()
