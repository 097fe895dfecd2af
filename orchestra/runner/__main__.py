"""
orchestra.runner.__main__ - CLI entry point for batch execution

Usage:
    python -m orchestra.runner requests.json --log-level INFO

Prints one JSON line per request (``{"id": ..., "is_success": ..., ...}``)
and exits non-zero if any request failed.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from orchestra.exceptions import OrchestraError
from orchestra.runner.main import load_requests, run_requests
from orchestra.settings import get_settings


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the batch and print results."""
    parser = argparse.ArgumentParser(
        prog="orchestra-runner",
        description="Execute a batch of tool invocations and print their outcomes",
    )
    parser.add_argument(
        "requests_file",
        type=Path,
        help="JSON file containing a list of execution requests",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: ORCHESTRA_LOG_LEVEL or INFO)",
    )

    args = parser.parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, args.log_level or settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        requests = load_requests(args.requests_file, settings.default_max_attempts)
        results = asyncio.run(run_requests(requests, settings))
    except OrchestraError as e:
        logging.getLogger("orchestra.runner").error(str(e))
        return 2
    except KeyboardInterrupt:
        return 130

    for request, result in zip(requests, results, strict=True):
        print(json.dumps({"id": request.id, **result.model_dump(mode="json")}))

    return 0 if all(r.is_success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
