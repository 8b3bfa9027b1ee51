"""
Command line interface for tgraph.

Commands:
    view     Live terminal graph of a metric log file
    web      Browser dashboard with a resolution slider
    monitor  Sample a process's memory and CPU into a log file
    demo     Generate a large synthetic log and open it in the viewer
"""

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

import uvicorn

from tgraph.core.config import settings
from tgraph.core.exceptions import RenderSurfaceError, SourceError
from tgraph.models.display import STYLE_CYCLE, WebStyle
from tgraph.models.metric import MetricSelector
from tgraph.services.demo import write_demo_file
from tgraph.services.sampler import ProcessSampler, run_sampler, simulate_memory_activity
from tgraph.services.session import ViewerConfig
from tgraph.terminal_viewer import view
from tgraph.web_service import create_app

logger = logging.getLogger(__name__)

METRIC_CHOICES = [metric.value for metric in MetricSelector]


def positive_int(value: str) -> int:
    """argparse type for counts and intervals that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by the view and web commands."""
    parser.add_argument("--file", "-f", dest="log_file",
                        help=f"Log file to monitor (default: {settings.log_file})")
    parser.add_argument("--metric", "-m",
                        help=f"One of {', '.join(METRIC_CHOICES)} (default: {settings.metric})")
    parser.add_argument("--accumulate", "-a", action="store_true", default=None,
                        help="Keep every sample and compress to fit instead of a rolling window")
    parser.add_argument("--points", "-p", type=positive_int, dest="max_data_points",
                        help=f"Rolling window size (default: {settings.max_data_points})")
    parser.add_argument("--refresh", "-r", type=positive_int, dest="refresh_rate_ms",
                        help=f"Refresh rate in milliseconds (default: {settings.refresh_rate_ms})")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the top-level argument parser.

    Returns:
        Parser with one subcommand per entry point.
    """
    parser = argparse.ArgumentParser(
        prog="tgraph",
        description="Live terminal and browser graphs of memory and CPU metrics",
    )
    subparsers = parser.add_subparsers(title="commands", dest="command", required=True)

    view_parser = subparsers.add_parser("view", help="View a live graph in the terminal")
    _add_source_arguments(view_parser)
    view_parser.add_argument("--style", "-s", choices=[s.value for s in STYLE_CYCLE],
                             help=f"Glyph style (default: {settings.style})")
    view_parser.add_argument("--height", type=positive_int, dest="chart_height",
                             help=f"Chart rows (default: {settings.chart_height})")
    view_parser.add_argument("--log", dest="diagnostic_log",
                             help="Write diagnostic logs to this file")

    web_parser = subparsers.add_parser("web", help="View a live graph in the browser")
    _add_source_arguments(web_parser)
    web_parser.add_argument("--style", "-s", dest="web_style", choices=[s.value for s in WebStyle],
                            help=f"Chart style (default: {settings.web_style})")
    web_parser.add_argument("--resolution", type=int,
                            help=f"Initial points per series (default: {settings.resolution})")
    web_parser.add_argument("--host", default=settings.host, help="Bind address")
    web_parser.add_argument("--port", type=int, default=settings.port, help="Server port")
    web_parser.add_argument("--no-open", dest="auto_open", action="store_false",
                            default=settings.auto_open,
                            help="Don't open the browser automatically")

    monitor_parser = subparsers.add_parser("monitor", help="Sample a process into a log file")
    monitor_parser.add_argument("--file", "-f", dest="log_file", default=settings.log_file,
                                help="Log file to append to")
    monitor_parser.add_argument("--interval", "-i", type=positive_int,
                                default=settings.sample_interval_ms,
                                help="Sampling interval in milliseconds")
    monitor_parser.add_argument("--pid", type=int, help="Process to sample (default: this one)")
    monitor_parser.add_argument("--no-cpu", dest="include_cpu", action="store_false",
                                default=settings.include_cpu, help="Memory metrics only")
    monitor_parser.add_argument("--count", type=positive_int, help="Stop after this many samples")
    monitor_parser.add_argument("--simulate", action="store_true",
                                help="Churn memory in this process to produce a visible pattern")

    demo_parser = subparsers.add_parser("demo", help="Generate demo data and open the viewer")
    demo_parser.add_argument("--file", "-f", dest="log_file", default="large-demo-metrics.log",
                             help="Demo log file to (re)create")
    demo_parser.add_argument("--count", type=positive_int, default=1200, help="Number of data points")
    demo_parser.add_argument("--seed", type=int, help="Random seed")
    demo_parser.add_argument("--no-view", dest="open_view", action="store_false",
                             help="Only write the file")

    return parser


def config_from_args(args: argparse.Namespace) -> ViewerConfig:
    """Build a viewer config where given flags override settings."""
    overrides = {
        name: getattr(args, name, None)
        for name in (
            "log_file",
            "metric",
            "accumulate",
            "max_data_points",
            "refresh_rate_ms",
            "style",
            "web_style",
            "resolution",
            "chart_height",
        )
    }
    return ViewerConfig.from_settings(settings, **overrides)


def run_monitor(args: argparse.Namespace) -> int:
    """Sample a process until interrupted or it exits."""
    try:
        sampler = ProcessSampler(args.pid, include_cpu=args.include_cpu)
    except SourceError as e:
        logger.error(str(e))
        return 1

    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: stop_event.set())
    if args.simulate:
        simulate_memory_activity(stop_event)

    print(f"Sampling to {args.log_file} every {args.interval}ms. Press Ctrl+C to stop.")
    print(f"In another terminal, run:\n  tgraph view --file {args.log_file}")
    try:
        run_sampler(sampler, args.log_file, args.interval, count=args.count, stop_event=stop_event)
    except KeyboardInterrupt:
        logger.info("Monitoring stopped")
    finally:
        stop_event.set()
    return 0


def run_view(config: ViewerConfig, diagnostic_log: Optional[str] = None) -> int:
    try:
        return view(config, diagnostic_log)
    except RenderSurfaceError as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the tgraph CLI.

    Args:
        argv: Arguments without the program name; sys.argv if omitted.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.log_level)

    if args.command == "view":
        return run_view(config_from_args(args), args.diagnostic_log)

    if args.command == "web":
        config = config_from_args(args)
        app = create_app(config, auto_open=args.auto_open, url=f"http://{args.host}:{args.port}")
        uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())
        return 0

    if args.command == "monitor":
        return run_monitor(args)

    if args.command == "demo":
        write_demo_file(args.log_file, args.count, seed=args.seed)
        print(f"Wrote {args.count} data points to {args.log_file}")
        if not args.open_view:
            return 0
        config = ViewerConfig.from_settings(
            settings, log_file=args.log_file, accumulate=True, style="lean")
        return run_view(config)

    parser.print_help()
    return 1
