"""Core monitoring logic used by the API and CLI helpers."""

import asyncio
import json
import logging
import urllib.request
from typing import Awaitable, Callable, Optional, Sequence

from .models import ConfigurationError, Report, ServiceSpec, ServiceState, StatusRecord
from .probe import DEFAULT_TIMEOUT, probe_port
from .resolver import ProcessResolver, make_resolver

logger = logging.getLogger(__name__)

ProbeFn = Callable[[str, int, float], Awaitable[ServiceState]]


def validate_services(services: Sequence[ServiceSpec]) -> None:
    """Fail fast on a service list that cannot be monitored."""
    if isinstance(services, (str, bytes)) or not isinstance(services, Sequence):
        raise ConfigurationError("services must be an ordered sequence")
    if not services:
        raise ConfigurationError("no services configured")
    for index, service in enumerate(services):
        if not isinstance(service, ServiceSpec):
            raise ConfigurationError(
                f"entry {index} is {type(service).__name__}, not ServiceSpec"
            )


class ServiceMonitor:
    """Probe every service's port and look up its process concurrently."""

    def __init__(
        self,
        host: str = "localhost",
        timeout: float = DEFAULT_TIMEOUT,
        resolver: Optional[ProcessResolver] = None,
        probe: ProbeFn = probe_port,
    ) -> None:
        self.host = host
        self.timeout = timeout
        self.resolver = resolver or make_resolver(timeout=timeout)
        self.probe = probe

    async def _probe(self, service: ServiceSpec) -> ServiceState:
        try:
            return await self.probe(self.host, service.port, self.timeout)
        except Exception:
            # Safety net for custom probes; the built-in one never raises
            logger.exception("Probe for %s failed", service.name)
            return ServiceState.STOPPED

    async def _resolve(self, service: ServiceSpec) -> Optional[int]:
        try:
            return await self.resolver.resolve(service.process_token)
        except Exception:
            logger.exception("Process lookup for %s failed", service.name)
            return None

    async def check(self, service: ServiceSpec) -> StatusRecord:
        """Build the status record for one service."""
        state, pid = await asyncio.gather(
            self._probe(service), self._resolve(service)
        )
        if state is ServiceState.STOPPED:
            logger.warning(
                "%s is not reachable on port %s", service.name, service.port
            )
        return StatusRecord(service=service, state=state, pid=pid)

    async def run(self, services: Sequence[ServiceSpec]) -> Report:
        """Check all services and return records in declaration order."""
        validate_services(services)
        # gather keeps argument order regardless of completion order
        records = await asyncio.gather(*(self.check(s) for s in services))
        report = Report(records=tuple(records))
        logger.info(
            "%d/%d services running", report.running_count, report.total
        )
        return report


def send_webhook_alert(
    webhook_url: str,
    report: Report,
    ui_url: Optional[str] = None,
) -> None:
    """Send one Teams message with the status of every monitored service."""

    body_blocks = []
    # One card section per service with its port, pid and status
    for record in report.records:
        service = record.service
        status_text = "UP" if record.running else "DOWN"
        pid_text = record.pid if record.pid is not None else "unknown"
        body_blocks.extend(
            [
                {
                    "type": "TextBlock",
                    "size": "Medium",
                    "weight": "Bolder",
                    "text": service.name,
                },
                {
                    "type": "TextBlock",
                    "text": f"{service.protocol} on port {service.port}, PID {pid_text}",
                },
                {"type": "TextBlock", "text": f"Status: {status_text}"},
            ]
        )

    body_blocks.append(
        {
            "type": "TextBlock",
            "text": f"{report.running_count}/{report.total} services running",
        }
    )

    if ui_url:
        body_blocks.append(
            {
                "type": "TextBlock",
                "text": f"[View details]({ui_url})",
            }
        )

    card = {
        "contentType": "application/vnd.microsoft.card.adaptive",
        "content": {
            "$schema": "http://adaptivecards.io/schemas/adaptive-card.json",
            "type": "AdaptiveCard",
            "version": "1.3",
            "body": body_blocks,
        },
    }

    # The Power Automate flow expects attachments under triggerBody().body
    payload = {"body": {"attachments": [card]}}

    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        webhook_url, data=data, headers={"Content-Type": "application/json"}
    )
    with urllib.request.urlopen(req, timeout=10) as response:
        response.read()


def check_services(
    services: Sequence[ServiceSpec],
    host: str = "localhost",
    timeout: float = DEFAULT_TIMEOUT,
    resolver: Optional[ProcessResolver] = None,
    webhook_url: Optional[str] = None,
    ui_url: Optional[str] = None,
) -> Report:
    """Run one monitoring pass and send a summary alert if anything is down."""

    monitor = ServiceMonitor(host=host, timeout=timeout, resolver=resolver)
    report = asyncio.run(monitor.run(services))

    if webhook_url and not report.all_healthy:
        try:
            send_webhook_alert(webhook_url, report, ui_url)
        except (OSError, ValueError) as exc:
            # The report is still valid when the alert cannot be delivered
            logger.error("Failed to deliver webhook alert: %s", exc)

    return report
