"""Command line check of the local services; exits non-zero if any is down."""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from svcmonitor.config import Settings, load_services
from svcmonitor.models import ConfigurationError
from svcmonitor.monitor import check_services
from svcmonitor.render import format_report, report_json
from svcmonitor.resolver import RESOLVERS, make_resolver

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", help="JSON file with the services to check")
    parser.add_argument("--host", help="host the services listen on")
    parser.add_argument("--timeout", type=float, help="probe timeout in seconds")
    parser.add_argument("--resolver", choices=sorted(RESOLVERS))
    parser.add_argument("--webhook-url", help="Teams webhook notified on failure")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``python service_monitor.py``."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()

    try:
        settings = Settings.from_env()
        services = load_services(args.config) if args.config else settings.services()
        timeout = args.timeout if args.timeout is not None else settings.timeout
        if timeout <= 0:
            raise ConfigurationError("--timeout must be positive")
        resolver = make_resolver(args.resolver or settings.resolver, timeout)
        if not args.json:
            print("🔍 Checking service status...\n")
        report = check_services(
            services,
            host=args.host or settings.host,
            timeout=timeout,
            resolver=resolver,
            webhook_url=args.webhook_url or settings.webhook_url,
        )
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    print(report_json(report) if args.json else format_report(report))
    return 0 if report.all_healthy else 1


if __name__ == "__main__":
    sys.exit(main())
