"""
Main CLI module with argument parsing and command execution.

This module provides the demo runner for the singleton registry including:
- Command line argument parsing
- Command routing and execution
- Output formatting
"""
import argparse
import os
import sys
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from lazysingleton._version import __version__
from lazysingleton.config import ConfigurationManager, LoggingConfig
from lazysingleton.demo import (
    AuditTrail,
    LoggingService,
    NotificationFactory,
    get_gui_factory,
)
from lazysingleton.domain.exceptions import AlreadyInitializedError, SingletonError
from lazysingleton.infrastructure.logging import get_logger, setup_logging
from lazysingleton.infrastructure.patterns import (
    LazySingletonRegistry,
    configure_registry,
    get_registry,
)
from lazysingleton.cli.formatters import format_output


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "lazysingleton",
        description="Creational design pattern demos built on a thread-safe lazy singleton registry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s singleton                     # Obtain the logging service twice
  %(prog)s bypass                        # Try to construct a second logging service
  %(prog)s race --threads 50             # Race 50 threads on first access
  %(prog)s notify sms email              # Send notifications
  %(prog)s gui --platform mac            # Render MacOS widgets
        """,
    )

    # Global options
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured logging level",
    )
    parser.add_argument("--format", choices=["json", "table"], default="json", help="Output format")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available demos")

    subparsers.add_parser("singleton", help="Obtain the logging service twice and compare references")
    subparsers.add_parser("bypass", help="Attempt a construction that bypasses get_instance()")

    race_parser = subparsers.add_parser("race", help="Race concurrent callers on first access")
    race_parser.add_argument("--threads", type=int, default=50, help="Number of concurrent callers")

    notify_parser = subparsers.add_parser("notify", help="Send notifications through the factory method")
    notify_parser.add_argument("types", nargs="+", help="Notification types (email, sms, 'whats app')")

    gui_parser = subparsers.add_parser("gui", help="Render widgets through the abstract factory")
    gui_parser.add_argument("--platform", choices=["win", "mac"], default="win", help="Widget family")

    subparsers.add_parser("audit", help="Record an event on the enumeration singleton")
    subparsers.add_parser("registry", help="List singletons in the process registry")

    return parser.parse_args(argv)


def _collector() -> Tuple[List[str], Callable[[str], None]]:
    lines: List[str] = []
    return lines, lines.append


def _logging_service(writer: Callable[[str], None]) -> LoggingService:
    if not LoggingService.is_initialized():
        LoggingService.configure(writer=writer)
    return LoggingService.get_instance()


def run_singleton_demo(args: argparse.Namespace) -> Dict[str, Any]:
    lines, writer = _collector()
    first = _logging_service(writer)
    first.log("Application Started")

    second = LoggingService.get_instance()
    second.log("Logging from second instance")

    return {"output": lines, "same_instance": first is second}


def run_bypass_demo(args: argparse.Namespace) -> Dict[str, Any]:
    lines, writer = _collector()
    service = _logging_service(writer)

    result: Dict[str, Any] = {"bypass_rejected": False}
    try:
        LoggingService(writer=writer)
    except AlreadyInitializedError as e:
        result["bypass_rejected"] = True
        result["error"] = e.to_dict()

    service.log("Application Started")
    result["same_instance"] = service is LoggingService.get_instance()
    result["output"] = lines
    return result


class _ResourcePool:
    """Stand-in for an expensive shared resource."""

    def __init__(self, counter: List[int], lock: threading.Lock):
        with lock:
            counter[0] += 1
        time.sleep(0.01)


def run_race_demo(args: argparse.Namespace) -> Dict[str, Any]:
    if args.threads < 1:
        raise ValueError("--threads must be at least 1")

    constructions = [0]
    counter_lock = threading.Lock()
    barrier = threading.Barrier(args.threads)
    results: List[Any] = [None] * args.threads

    with LazySingletonRegistry(get_registry().config) as registry:
        registry.register("resource-pool", lambda: _ResourcePool(constructions, counter_lock))

        def caller(index: int) -> None:
            barrier.wait()
            results[index] = registry.get("resource-pool")

        threads = [threading.Thread(target=caller, args=(i,)) for i in range(args.threads)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    return {
        "threads": args.threads,
        "constructions": constructions[0],
        "distinct_instances": len({id(result) for result in results}),
        "same_instance": all(result is results[0] for result in results),
    }


def run_notify_demo(args: argparse.Namespace) -> Dict[str, Any]:
    lines, writer = _collector()
    factory = NotificationFactory(writer)
    for notification_type in args.types:
        factory.create_notification(notification_type).notify_user()
    return {"output": lines}


def run_gui_demo(args: argparse.Namespace) -> Dict[str, Any]:
    lines, writer = _collector()
    factory = get_gui_factory(args.platform, writer)
    factory.create_button().paint()
    factory.create_text_box().render()
    return {"platform": args.platform, "output": lines}


def run_audit_demo(args: argparse.Namespace) -> Dict[str, Any]:
    trail = AuditTrail.get_instance()
    sequence = trail.record("audit demo invoked")
    return {
        "member": trail.name,
        "sequence": sequence,
        "same_instance": AuditTrail("audit-trail") is trail,
    }


def run_registry_listing(args: argparse.Namespace) -> Dict[str, Any]:
    return {"singletons": get_registry().describe()}


COMMANDS: Dict[str, Callable[[argparse.Namespace], Dict[str, Any]]] = {
    "singleton": run_singleton_demo,
    "bypass": run_bypass_demo,
    "race": run_race_demo,
    "notify": run_notify_demo,
    "gui": run_gui_demo,
    "audit": run_audit_demo,
    "registry": run_registry_listing,
}


def _configure(args: argparse.Namespace) -> None:
    manager = ConfigurationManager(args.config)
    logging_config = manager.logging
    if args.log_level:
        logging_config = LoggingConfig(**{**logging_config.model_dump(), "level": args.log_level})
    setup_logging(logging_config)
    configure_registry(manager.registry)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    if not args.command:
        print("Error: No command specified. Use --help for usage information.")
        return 1

    try:
        _configure(args)
    except SingletonError as e:
        print(f"Error: {e}")
        return 1

    logger = get_logger(__name__)

    try:
        result = COMMANDS[args.command](args)
    except (SingletonError, ValueError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130

    print(format_output(result, args.format))
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
