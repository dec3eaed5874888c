"""Command-line interface for flowbuddy.

Provides the main entry point for running the monitor headless, or
running individual components (screen check, thought classification,
capture) for testing.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

CATEGORY_PREFIXES = ("reminder:", "research:")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="flowbuddy",
        description="Ambient focus assistant: distraction monitor and thought offloading",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/flowbuddy.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    monitor_parser = subparsers.add_parser(
        "monitor",
        help="Run a focus session; offload thoughts by typing them on stdin",
    )
    monitor_parser.add_argument(
        "--interval", type=int, default=None,
        help="Monitoring interval in seconds (5, 10, 15, 20, 25, 30 or 60)",
    )
    monitor_parser.add_argument(
        "--research", action="store_true",
        help="Enable background research for research thoughts",
    )

    subparsers.add_parser("check", help="Run a single screen context check")

    classify_parser = subparsers.add_parser("classify", help="Classify one thought")
    classify_parser.add_argument("text", type=str, help="The thought to offload")
    classify_parser.add_argument(
        "--category", choices=["auto", "reminder", "research"], default="auto",
        help="Explicit category (default: auto)",
    )
    classify_parser.add_argument(
        "--research", action="store_true",
        help="Generate a research report if the thought is a research item",
    )

    capture_parser = subparsers.add_parser("capture-test", help="Save one downsampled screen capture")
    capture_parser.add_argument(
        "--output", type=Path, default=Path("capture_test.jpg"),
        help="Where to write the JPEG (default: capture_test.jpg)",
    )

    return parser.parse_args(argv)


def split_category(line: str):
    """Split an optional ``reminder:``/``research:`` prefix off a typed line."""
    from flowbuddy.domain.models import ThoughtCategory

    stripped = line.strip()
    lowered = stripped.lower()
    for prefix in CATEGORY_PREFIXES:
        if lowered.startswith(prefix):
            return stripped[len(prefix):].strip(), ThoughtCategory(prefix[:-1])
    return stripped, ThoughtCategory.AUTO


async def _monitor(settings, args) -> None:
    """Run monitoring and intake until stdin closes or the user interrupts."""
    from flowbuddy.app import FlowBuddyApp

    if args.interval is not None:
        settings.monitoring.interval_seconds = args.interval
    settings.monitoring.enabled = True
    if args.research:
        settings.monitoring.background_research = True

    app = FlowBuddyApp(settings, config_path=args.config)

    def on_distraction(new, _old) -> None:
        if new:
            print(f"[distracted] {new}")
        else:
            print("[focused]")

    app.state.subscribe("current_distraction", on_distraction)
    await app.start()
    app.state.start_session()
    print("Session started. Type a thought and press Enter to offload it (Ctrl-D to stop).")

    loop = asyncio.get_running_loop()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            text, category = split_category(line)
            if app.pipeline.submit(text, category) is not None:
                print(f"  offloaded ({category.value})")
    finally:
        app.state.stop_session()
        await app.shutdown()

    summary = app.session_summary()
    print(f"\nSession length: {summary.duration_seconds / 60:.1f} min")
    print(f"Offloaded thoughts: {summary.thought_count} "
          f"({summary.reminder_count} reminders, {summary.research_count} research)")
    for thought in app.store.query():
        marker = " [report]" if thought.research_report else ""
        print(f"  - [{thought.category.value}] {thought.text}{marker}")


async def _check(settings) -> None:
    """Capture the screen once and print the classifier's verdict."""
    from flowbuddy.app import build_capture, build_transport
    from flowbuddy.classifier.client import ClassifierClient

    capture = build_capture(settings)
    cfg = settings.classifier
    async with build_transport(settings) as transport:
        client = ClassifierClient(
            transport,
            vision_model=cfg.vision_model,
            vision_timeout=cfg.vision_timeout,
        )
        image = await capture.capture()
        print(f"Captured {len(image)} bytes, analyzing...")
        context = await client.analyze_screen(image)

    print(f"Status:  {context.status.value}")
    print(f"App:     {context.app}")
    print(f"Summary: {context.summary}")


async def _classify(settings, args) -> None:
    """Run one thought through the intake pipeline and print the result."""
    from flowbuddy.app import FlowBuddyApp
    from flowbuddy.domain.models import ThoughtCategory
    from flowbuddy.intake.store import InMemoryThoughtStore

    settings.monitoring.enabled = False
    settings.monitoring.background_research = args.research
    app = FlowBuddyApp(settings, store=InMemoryThoughtStore())
    try:
        thought = await app.pipeline.process(args.text, ThoughtCategory(args.category))
        await app.pipeline.drain()
    finally:
        await app.shutdown()

    print(f"Category: {thought.category.value}")
    report = thought.research_report
    if report is None:
        return
    print("\n" + "=" * 60)
    print(report.topic)
    print("=" * 60)
    print(report.summary)
    print("-" * 40)
    print(report.details)
    if report.action_items:
        print("\nLinks:")
        for item in report.action_items:
            print(f"  - {item}")


async def _capture_test(settings, output: Path) -> None:
    """Capture a single downsampled screenshot and save it."""
    from flowbuddy.app import build_capture

    capture = build_capture(settings)
    data = await capture.capture()
    output.write_bytes(data)
    print(f"Saved capture to {output} ({len(data)} bytes)")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the flowbuddy CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from flowbuddy.config.settings import load_settings
    from flowbuddy.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    try:
        if args.command == "monitor":
            logger.info("Starting focus session")
            asyncio.run(_monitor(settings, args))

        elif args.command == "check":
            logger.info("Running screen context check")
            asyncio.run(_check(settings))

        elif args.command == "classify":
            asyncio.run(_classify(settings, args))

        elif args.command == "capture-test":
            logger.info("Running capture test")
            asyncio.run(_capture_test(settings, args.output))
    except KeyboardInterrupt:
        print("\nInterrupted.")


if __name__ == "__main__":
    main()
