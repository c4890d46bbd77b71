"""Command-line entry point for pagesnap."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .capture import run_capture
from .config import RELAY_TIMEOUT_SECONDS, CaptureConfig, SnapshotOptions

logger = logging.getLogger("pagesnap.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render pages via Playwright and save them as self-contained HTML snapshots.",
    )
    parser.add_argument("urls", nargs="+", help="One or more URLs to capture")
    parser.add_argument(
        "--output",
        default="output",
        type=Path,
        help="Directory where snapshots should be written",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Write snapshots to STDOUT instead of files",
    )
    parser.add_argument(
        "--keep-scripts",
        action="store_true",
        help="Keep the page's script elements in the snapshot",
    )
    parser.add_argument(
        "--keep-styles",
        action="store_true",
        help="Keep the original style sheets instead of extracting the rules in use",
    )
    parser.add_argument(
        "--direct-fetch",
        action="store_true",
        help="Fetch blocked cross-origin style sheets from the page instead of the relay",
    )
    parser.add_argument(
        "--csp",
        action="store_true",
        help="Add a Content-Security-Policy meta tag that blocks scripts and external origins",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=1.0,
        help="Seconds to wait after network idle before capturing",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--relay-timeout",
        type=float,
        default=RELAY_TIMEOUT_SECONDS,
        help="Seconds to wait for a relayed style sheet fetch",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> SnapshotOptions:
    return SnapshotOptions(
        remove_scripts=not args.keep_scripts,
        remove_original_styles=not args.keep_styles,
        use_relay_fetch=not args.direct_fetch,
        add_csp=args.csp,
    )


def config_from_args(args: argparse.Namespace) -> CaptureConfig:
    return CaptureConfig(
        output_root=Path(args.output).resolve(),
        wait_after_load=args.wait,
        navigation_timeout=args.timeout,
        relay_timeout=args.relay_timeout,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    options = options_from_args(args)
    config = config_from_args(args)
    stream = sys.stdout if args.stdout else None

    overall_start = time.perf_counter()
    metrics = asyncio.run(run_capture(args.urls, options, config, stream=stream))
    total_elapsed = time.perf_counter() - overall_start

    for metric in metrics:
        for warning in metric.warnings:
            logger.warning("%s: %s", metric.url, warning)
        logger.debug("Captured %s in %.2fs", metric.url, metric.total_seconds)

    logger.info(
        "Finished in %.2fs (%d/%d captured)", total_elapsed, len(metrics), len(args.urls)
    )
    return 0 if metrics else 1


if __name__ == "__main__":
    sys.exit(main())
