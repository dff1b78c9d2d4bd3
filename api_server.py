"""Very small Flask API that exposes the monitoring functionality."""

import os
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from svcmonitor.config import Settings
from svcmonitor.models import ConfigurationError
from svcmonitor.monitor import check_services
from svcmonitor.resolver import make_resolver

app = Flask(__name__)
load_dotenv()


def _run_check(webhook_url: Optional[str] = None) -> Any:
    try:
        settings = Settings.from_env()
        report = check_services(
            settings.services(),
            host=settings.host,
            timeout=settings.timeout,
            resolver=make_resolver(settings.resolver, settings.timeout),
            webhook_url=webhook_url,
        )
    except ConfigurationError as exc:
        app.logger.error("Invalid configuration: %s", exc)
        return jsonify({"error": str(exc)}), 500

    status_code = 200 if report.all_healthy else 503
    return jsonify(report.to_dict()), status_code


@app.route("/status", methods=["GET"])
def status() -> Any:
    """Return the current status of every service."""
    return _run_check()


@app.route("/check", methods=["POST"])
def check() -> Any:
    """Run the checks and alert the given webhook if anything is down."""

    data = request.get_json(force=True, silent=True) or {}
    webhook_url = data.get("webhook_url") or os.environ.get("WEBHOOK_URL")
    return _run_check(webhook_url)


def main() -> None:
    """Entry point for running the API with ``python api_server.py``."""

    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))


if __name__ == "__main__":
    main()
