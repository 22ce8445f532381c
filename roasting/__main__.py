"""
Diagnostic entry point: python -m roasting <url>

Acquires one URL and prints the resulting PageContent (or the full attempt
report) as JSON on stdout. Logs go to stderr.
"""

import asyncio
import json
import sys

from roasting.crawler.errors import InvalidInputError
from roasting.crawler.fetcher import AcquisitionOrchestrator
from roasting.utils.config import get_settings
from roasting.utils.logging import configure_logging, get_logger


async def run(url: str, report: bool = False) -> int:
    """Acquire ``url`` and print the result.

    Returns:
        Process exit code.
    """
    logger = get_logger(__name__)
    orchestrator = AcquisitionOrchestrator.from_settings()

    try:
        result = await orchestrator.acquire_with_report(url)
    except InvalidInputError as e:
        print(f"Error: invalid URL: {e}", file=sys.stderr)
        return 2
    finally:
        await orchestrator.close()

    logger.info("Acquisition finished", resolved_by=result.resolved_by)
    payload = result.to_dict() if report else result.content.to_prompt_dict()
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def main() -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="python -m roasting",
        description="Fetch a startup website and print the content a roast would be based on",
    )
    parser.add_argument("url", help="Startup URL to acquire")
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print every backend attempt, not just the final content",
    )
    parser.add_argument(
        "--console-logs",
        action="store_true",
        help="Human-readable logs instead of JSON",
    )

    args = parser.parse_args()

    settings = get_settings()
    configure_logging(
        log_level=settings.general.log_level,
        json_format=not args.console_logs,
    )

    sys.exit(asyncio.run(run(args.url, report=args.report)))


if __name__ == "__main__":
    main()
