from __future__ import annotations

import argparse
import asyncio
import json
import sys

from site_sentinel.config import AppConfig
from site_sentinel.errors import InspectionError
from site_sentinel.inspector.driver import PlaywrightDriver
from site_sentinel.inspector.inspector import Inspector
from site_sentinel.logging_setup import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="site-sentinel-check",
        description="Load a URL in a headless browser and print what went wrong as JSON.",
    )
    parser.add_argument("url", help="Page to inspect")
    parser.add_argument("--project-id", default="adhoc", help="Project id recorded on each finding")
    parser.add_argument("--timeout-ms", type=int, default=None, help="Navigation timeout in milliseconds")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    return parser


async def run_check(args: argparse.Namespace, config: AppConfig) -> int:
    inspector = Inspector(
        PlaywrightDriver(headless=not args.headed),
        user_agent=config.user_agent,
        navigation_timeout_ms=args.timeout_ms or config.navigation_timeout_ms,
    )
    try:
        findings = await inspector.inspect(args.project_id, args.url)
    except InspectionError as exc:
        print(json.dumps({"message": "Failed to check site", "error": str(exc)}), file=sys.stderr)
        return 2

    payload = [f.model_dump(mode="json", by_alias=True) for f in findings]
    print(json.dumps(payload, indent=2))
    return 1 if findings else 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    return asyncio.run(run_check(args, config))


if __name__ == "__main__":
    raise SystemExit(main())
