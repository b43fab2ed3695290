import asyncio
import logging
import sys
from typing import Optional, Sequence

from proxy_smoke.config.logging_config import setup_logging
from proxy_smoke.core.arg_parser import parse_args
from proxy_smoke.core.controller_factory import ControllerFactory
from proxy_smoke.core.options_builder import build_harness_options
from proxy_smoke.core.smoke_orchestrator import SmokeOrchestrator

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the proxy smoke test and return the process exit code.
    """
    args = parse_args(sys.argv[1:] if argv is None else argv)
    log_level = args.get("log-level")
    setup_logging(level=log_level if isinstance(log_level, str) else None)

    options = build_harness_options(args)
    logger.info(f"Remote endpoint resolved to {options.remote.url}")

    try:
        controller = ControllerFactory.create_controller(options)
    except Exception as e:
        logger.error(f"❌ Test failed: could not create proxy controller: {e!r}")
        return 1

    outcome = asyncio.run(SmokeOrchestrator(options, controller).run())
    return outcome.exit_code


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
