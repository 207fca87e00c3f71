#!/usr/bin/env python3
"""Command line entry point: play resources and list index manifests."""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.config
import sys
from collections.abc import Sequence
from typing import TYPE_CHECKING

from resource_kit.domain.playback.value_objects import Looping
from resource_kit.domain.shared.exceptions import DomainError
from resource_kit.domain.shared.messages import LogTemplates
from resource_kit.utils.logging import ColoredFormatter

if TYPE_CHECKING:
    from resource_kit.config.container import Container

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "()": ColoredFormatter,
                    "fmt": LOG_FORMAT,
                    "datefmt": LOG_DATE_FORMAT,
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "console",
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {"level": resolved_level, "handlers": ["console"]},
        }
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resource-kit",
        description="Play audio resources and inspect resource manifests.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    play = subparsers.add_parser("play", help="play an audio resource")
    play.add_argument("name", help="resource name without extension")
    play.add_argument("--ext", help="file extension (default: configured audio extension)")
    play.add_argument("--scope", help="subdirectory of the resource root")
    play.add_argument("--start", type=float, help="segment start in seconds")
    play.add_argument("--end", type=float, help="segment end in seconds")
    play.add_argument(
        "--loops",
        type=Looping.parse,
        default=Looping.once(),
        help="'once', 'infinite' or a number of extra plays",
    )
    play.add_argument("--volume", type=float, help="volume between 0.0 and 1.0")

    index = subparsers.add_parser("index", help="list the items of a resource index")
    index.add_argument("name", help="index manifest name without extension")
    index.add_argument("--scope", help="subdirectory of the resource root")

    return parser


async def run_play(container: Container, args: argparse.Namespace) -> None:
    """Play a resource and wait until playback stops."""
    player = container.player
    finished = asyncio.Event()

    def on_state_change(is_playing: bool) -> None:
        if not is_playing:
            finished.set()

    player.on_playback_state_change = on_state_change

    ext = args.ext or container.settings.resources.audio_extension
    player.load_resource(container.resource_source, args.name, ext, args.scope)
    if args.volume is not None:
        player.volume = args.volume

    logger.info(LogTemplates.CLI_PLAYING, args.name)
    try:
        if args.start is None and args.end is None:
            player.number_of_loops = args.loops.remaining_loops
            player.play()
        else:
            start = args.start if args.start is not None else 0.0
            end = args.end if args.end is not None else player.duration
            player.play_segment(start, end, args.loops)
        await finished.wait()
    finally:
        container.shutdown()


def run_index(container: Container, args: argparse.Namespace) -> None:
    """Print the items of an index in display order."""
    index = container.manifest_loader.load_index(args.name, scope=args.scope)
    print(f"{index.title} ({index.set_id} v{index.version})")
    for item in index.sorted_items():
        order = "-" if item.order is None else str(item.order)
        print(f"{order:>4}  {item.id}  -> {item.target.kind.value}:{item.target.ref}")


def main(argv: Sequence[str] | None = None) -> int:
    from resource_kit.config.container import create_container
    from resource_kit.config.settings import get_settings

    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging("DEBUG" if args.verbose else settings.log_level)

    container = create_container(settings)
    try:
        if args.command == "play":
            asyncio.run(run_play(container, args))
        else:
            run_index(container, args)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.CLI_INTERRUPTED)
        return 0
    except DomainError as e:
        logger.error(LogTemplates.CLI_COMMAND_FAILED, e.code, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
