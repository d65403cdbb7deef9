# ============================================================================
# CLAUDE CONTEXT - LIVENESS PROBE
# ============================================================================
# STATUS: HTTP Trigger - GET /livez
# PURPOSE: Answer container and load balancer liveness probes
# EXPORTS: LivenessCheckTrigger, livez_trigger
# INTERFACES: SystemMonitoringTrigger (http_base.py)
# DEPENDENCIES: http_base only
# ENTRY_POINTS: livez_trigger.handle_request(req), livez_trigger.handle("GET")
# ============================================================================
"""
Liveness probe for the PRISM fetch service.

Answers as long as the worker process can serve a request. It must not touch
the origin, blob storage or the environment checks: a storage outage makes
/fetch fail but must never get the process restarted.
"""

from typing import Dict, Any, List
from .http_base import SystemMonitoringTrigger


class LivenessCheckTrigger(SystemMonitoringTrigger):

    SERVICE_NAME = "prism-fetch"

    def __init__(self):
        super().__init__("livez")

    def get_allowed_methods(self) -> List[str]:
        return ["GET"]

    def process_request(self, request_id: str) -> Dict[str, Any]:
        return {
            "status": "alive",
            "service": self.SERVICE_NAME,
            "checked_at": self.get_system_timestamp(),
        }


livez_trigger = LivenessCheckTrigger()
