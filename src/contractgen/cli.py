"""
Command line entry point.

Usage:
    contractgen generate --spec meals.yaml --targets java,ts,python --out build/generated
        [--config targets.yaml] [--timeout 60] [--sequential] [--report report.csv]
        [--no-progress] [-v]

Prints one line per target plus an overall line and exits with the report's
exit code (0 all succeeded, 1 all failed, 2 partial).
"""

import argparse
import logging
import sys
from typing import List, Optional

from contractgen.config import GeneratorConfig
from contractgen.constants import EXIT_FAILURE, TARGETS
from contractgen.errors import ConfigError
from contractgen.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contractgen",
        description="Generate typed client/server packages from one API contract",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    gen = commands.add_parser("generate", help="Generate packages for one or more targets")
    gen.add_argument(
        "--spec",
        required=True,
        help="Path to the contract document (YAML or JSON)",
    )
    gen.add_argument(
        "--targets",
        default=",".join(TARGETS),
        help=f"Comma-separated targets (default: {','.join(TARGETS)})",
    )
    gen.add_argument(
        "--out",
        default="generated",
        help="Output directory; each target writes <out>/<target>",
    )
    gen.add_argument(
        "--config",
        default=None,
        help="Per-target options file (YAML or JSON)",
    )
    gen.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-target timeout in seconds (default: $CONTRACTGEN_TIMEOUT_SECONDS or 60)",
    )
    gen.add_argument(
        "--sequential",
        action="store_true",
        help="Run targets one after another instead of in parallel",
    )
    gen.add_argument(
        "--report",
        default=None,
        help="Write the per-target report table (.json or .csv)",
    )
    gen.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    gen.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = GeneratorConfig.from_env(
            args.spec,
            out_dir=args.out,
            targets=args.targets,
            config_path=args.config,
            timeout_seconds=args.timeout,
            parallel=not args.sequential,
            show_progress=not args.no_progress and sys.stderr.isatty(),
        )
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    report = Orchestrator(config).run()
    for line in report.lines():
        print(line)

    if args.report:
        path = report.write(args.report)
        logger.info(f"Report written to {path}")

    return report.exit_code()


if __name__ == "__main__":
    sys.exit(main())
