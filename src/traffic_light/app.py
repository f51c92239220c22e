"""Command-line entry point: run checks and compute traffic-light statuses."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from traffic_light.checks import DynamicThresholdChecker
from traffic_light.clients import CatalogClient, TechInsightsClient
from traffic_light.config import Settings
from traffic_light.errors import TrafficLightError
from traffic_light.models import EntityRef
from traffic_light.schema import load_checks
from traffic_light.status import DOMAINS, determine_status, get_domain

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="traffic-light",
        description="Threshold checks and traffic-light status for catalog components.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Compute one status decision for a cohort")
    status.add_argument("domain", choices=sorted(DOMAINS))
    status.add_argument("refs", nargs="+", help="Component refs (kind:namespace/name)")

    sub.add_parser("checks", help="List the registered checks")

    run_cmd = sub.add_parser("run", help="Run checks for one component")
    run_cmd.add_argument("ref")
    run_cmd.add_argument(
        "--check", dest="check_ids", action="append", metavar="ID",
        help="Only run this check (repeatable)",
    )
    return parser


def _qualify(ref: str, settings: Settings) -> str:
    return str(EntityRef.parse(ref, default_namespace=settings.default_namespace))


async def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings()

    if args.command == "checks":
        checks = load_checks(settings.checks_path)
        print(json.dumps([c.model_dump(mode="json") for c in checks], indent=2))
        return 0

    async with CatalogClient(
        settings.catalog_base_url, settings.api_token, settings.http_timeout_seconds
    ) as catalog, TechInsightsClient(
        settings.tech_insights_base_url, settings.api_token, settings.http_timeout_seconds
    ) as tech_insights:
        checker = DynamicThresholdChecker(
            catalog,
            tech_insights,
            load_checks(settings.checks_path),
            group_kind=settings.group_kind,
        )

        if args.command == "run":
            try:
                results = await checker.run_checks(
                    _qualify(args.ref, settings), args.check_ids
                )
            except TrafficLightError as e:
                logger.error("%s", e)
                return 1
            print(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
            return 0

        refs = [_qualify(ref, settings) for ref in args.refs]
        decision = await determine_status(
            get_domain(args.domain),
            refs,
            catalog,
            tech_insights,
            checker,
            group_kind=settings.group_kind,
        )
        print(json.dumps(decision.model_dump(mode="json"), indent=2))
        return 0


def run() -> None:
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    sys.exit(asyncio.run(main(settings=settings)))


if __name__ == "__main__":
    run()
