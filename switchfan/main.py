#!/usr/bin/env python3
"""
Main entry point for the switch fan controller.
Starts the /metrics web server and runs the control loop until killed.
"""

import argparse
import asyncio
import functools
import logging
import sys
from typing import Optional, Sequence

from switchfan.config.settings import load_settings
from switchfan.core.controller import FanController
from switchfan.monitoring.metrics import PrometheusMetrics
from switchfan.utils.exceptions import SwitchFanException
from switchfan.utils.logger import setup_logging
from switchfan.web.server import DEFAULT_METRICS_PORT, MetricsWebServer

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parses command-line arguments for the controller."""
    parser = argparse.ArgumentParser(
        description='Switch fan controller - cools a switch with a fan on a TP-Link HS1xx plug.',
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  switchfan                      # Serve /metrics on port 9116 and control the fan
  switchfan --env-file prod.env  # Read settings from another .env file
  switchfan --once               # Run a single control cycle and exit
"""
    )
    parser.add_argument('--env-file', default='.env', help='Optional .env file with settings (default: .env)')
    parser.add_argument('--host', default='0.0.0.0', help='Address for the metrics server (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=DEFAULT_METRICS_PORT,
                        help=f'Port for the metrics server (default: {DEFAULT_METRICS_PORT})')
    parser.add_argument('--log-level', default=None,
                        help='DEBUG, INFO, WARNING, ERROR or CRITICAL (default: LOG_LEVEL setting, INFO)')
    parser.add_argument('--once', action='store_true', help='Run one control cycle without the metrics server')
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main execution function."""
    args = parse_arguments(argv)
    setup_logging(args.log_level or 'INFO')

    settings_loader = functools.partial(load_settings, env_file=args.env_file)
    metrics = PrometheusMetrics()
    controller = FanController(metrics, settings_loader=settings_loader)
    server = None

    try:
        # Fail before binding the port if the configuration is unusable
        settings = settings_loader()
        if not args.log_level:
            setup_logging(settings.LOG_LEVEL)

        if args.once:
            decision = asyncio.run(controller.run_cycle())
            logger.info(f"Cycle complete: {decision.describe()}")
            return 0

        server = MetricsWebServer(metrics.registry, host=args.host, port=args.port)
        server.start_background()
        asyncio.run(controller.run_forever())
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except SwitchFanException as e:
        logger.critical(f"Fatal error: {e}")
        return 1
    except OSError as e:
        logger.critical(f"Cannot serve metrics on {args.host}:{args.port}: {e}")
        return 1
    finally:
        if server is not None:
            server.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
