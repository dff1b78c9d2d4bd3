"""Local service liveness monitor."""

from .models import ConfigurationError, Report, ServiceSpec, ServiceState, StatusRecord
from .monitor import ServiceMonitor, check_services, send_webhook_alert
from .probe import probe_port
from .resolver import PgrepResolver, ProcessResolver, PsutilResolver, make_resolver

__all__ = [
    "ConfigurationError",
    "Report",
    "ServiceSpec",
    "ServiceState",
    "StatusRecord",
    "ServiceMonitor",
    "check_services",
    "send_webhook_alert",
    "probe_port",
    "ProcessResolver",
    "PsutilResolver",
    "PgrepResolver",
    "make_resolver",
]
