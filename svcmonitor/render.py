"""Text and JSON views of a Report."""

import json
from typing import List

from .models import Report


def format_record_line(record) -> str:
    service = record.service
    prefix = f"{service.name} ({service.protocol}) - Port {service.port}"
    if record.running:
        pid = record.pid if record.pid is not None else "Unknown"
        return f"✅ {prefix} - PID: {pid}"
    return f"❌ {prefix} - Stopped"


def quick_commands(report: Report) -> List[str]:
    ports = ",".join(str(r.service.port) for r in report.records)
    pattern = "|".join(r.service.process_token.rsplit("/", 1)[-1] for r in report.records)
    return [
        f"   Check ports: lsof -i :{ports}",
        f'   Kill all: pkill -f "{pattern}"',
    ]


def format_report(report: Report) -> str:
    """Render the report the way the terminal summary shows it."""
    lines = [format_record_line(record) for record in report.records]
    lines.append("")
    lines.append(
        f"📊 Summary: {report.running_count}/{report.total} services running"
    )
    lines.append("")
    lines.append("🚀 Quick Commands:")
    lines.extend(quick_commands(report))
    return "\n".join(lines)


def report_json(report: Report) -> str:
    return json.dumps(report.to_dict(), indent=2)
