"""CLI entrypoint for the QasaWatcher Discord bot."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import signal
import sys
import threading
from functools import partial

from dotenv import load_dotenv

from qasawatcher.config import Settings, load_settings
from qasawatcher.fetcher import QasaApiClient, fetch_listings
from qasawatcher.notifications import DiscordNotifier, NotifierSetupError
from qasawatcher.runner import QasaWatcherRunner
from qasawatcher.scheduler import IntervalTicker

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Qasa apartment notifier for Discord")
    parser.add_argument("-t", "--token", help="bot token (overrides DISCORD_TOKEN env var)")
    parser.add_argument(
        "-c",
        "--channel",
        help="channel ID for apartment notifications (overrides DISCORD_CHANNEL_ID env var)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        help="seconds between polling cycles (overrides POLL_INTERVAL_SECONDS env var)",
    )
    parser.add_argument(
        "--pacing",
        type=float,
        help="seconds between initial-scan messages (overrides PACING_DELAY_SECONDS env var)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="fetch and diff listings without posting anything to Discord",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="run the initial scan only and exit",
    )
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Apply command-line overrides on top of the environment."""
    settings = load_settings()
    overrides = {
        "token": args.token,
        "channel_id": args.channel,
        "poll_interval": args.interval,
        "pacing_delay": args.pacing,
    }
    settings = dataclasses.replace(
        settings,
        **{key: value for key, value in overrides.items() if value is not None},
    )
    if settings.poll_interval <= 0:
        raise ValueError(f"polling interval must be positive, got {settings.poll_interval}")
    if settings.pacing_delay < 0:
        raise ValueError(f"pacing delay must not be negative, got {settings.pacing_delay}")
    return settings


def build_runner(
    settings: Settings,
    notifier: DiscordNotifier | None,
    stop_event: threading.Event,
) -> QasaWatcherRunner:
    """Wire the fetcher and sink; pacing waits on the stop event so shutdown interrupts it."""
    client = QasaApiClient(params=settings.search)
    return QasaWatcherRunner(
        fetcher=partial(fetch_listings, client),
        notifier=notifier,
        channel_id=settings.channel_id,
        pacing_delay=settings.pacing_delay,
        sleep=stop_event.wait,
    )


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = resolve_settings(args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    notifier = None
    if not args.dry_run:
        if not settings.token:
            logger.error("No bot token provided (use -t or DISCORD_TOKEN)")
            return 2
        notifier = DiscordNotifier(token=settings.token)
        try:
            notifier.connect()
        except NotifierSetupError as exc:
            logger.error("%s", exc)
            notifier.close()
            return 1

    stop_event = threading.Event()
    runner = build_runner(settings, notifier, stop_event)

    if args.once:
        summary = runner.bootstrap()
        if notifier:
            notifier.close()
        return 0 if summary.status == "success" else 1

    ticker = IntervalTicker(settings.poll_interval, stop_event=stop_event)

    def handle_signal(signum, _frame) -> None:
        logger.info("Received signal %d, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    worker = threading.Thread(target=runner.run,
                              args=(ticker,),
                              name="qasa-poller",
                              daemon=True)
    worker.start()
    logger.info("Bot is now running. Press CTRL-C to exit.")

    exit_code = 0
    while not stop_event.wait(1.0):
        if not worker.is_alive():
            logger.error("Polling loop exited unexpectedly")
            exit_code = 1
            break

    stop_event.set()
    if notifier:
        notifier.close()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
