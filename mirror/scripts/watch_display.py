"""Kiosk watcher: poll the server and reload the display when it changes.

Usage:
    python -m mirror.scripts.watch_display --base-url http://127.0.0.1:8000 \
        --reload-command "xdotool key --window $(xdotool search --class chromium | head -1) F5"

Each reload starts a fresh session with a new baseline.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shlex
import sys

from mirror.display.version_checker import (
    DEV_RELOAD_INTERVAL,
    POLL_INTERVAL,
    REFRESH_DELAY,
    VersionChecker,
    http_identity_fetcher,
)

logger = logging.getLogger(__name__)


def build_reload(command: list[str]):
    async def reload() -> None:
        logger.info("Reloading display: %s", shlex.join(command))
        try:
            process = await asyncio.create_subprocess_exec(*command)
        except OSError as exc:
            logger.error("Reload command failed to start: %s", exc)
            return
        code = await process.wait()
        if code != 0:
            logger.warning("Reload command exited with status %d", code)

    return reload


async def watch(args: argparse.Namespace) -> None:
    fetch = http_identity_fetcher(args.base_url)
    reload = build_reload(shlex.split(args.reload_command))
    while True:
        checker = VersionChecker(
            fetch,
            reload,
            on_updating=lambda: logger.info("Updating..."),
            poll_interval=args.poll_interval,
            refresh_delay=args.refresh_delay,
            dev_reload_interval=args.dev_reload_interval,
        )
        await checker.run()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Reload the mirror display on change")
    parser.add_argument("--base-url", default="http://127.0.0.1:8000", help="Mirror server URL")
    parser.add_argument(
        "--reload-command", required=True, help="Shell command that reloads the display"
    )
    parser.add_argument("--poll-interval", type=float, default=POLL_INTERVAL)
    parser.add_argument("--refresh-delay", type=float, default=REFRESH_DELAY)
    parser.add_argument("--dev-reload-interval", type=float, default=DEV_RELOAD_INTERVAL)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        asyncio.run(watch(args))
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
