"""Display reload poller.

The display captures a baseline identity (build time plus config version)
when its session starts, polls for it on a fixed cadence, and reloads once
when it changes. A baseline build time of ``"development"`` skips comparison
and reloads on a longer fixed timer instead.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from mirror.services.fetcher import USER_AGENT

logger = logging.getLogger(__name__)

DEV_BUILD_TIME = "development"
POLL_INTERVAL = 30.0  # seconds
REFRESH_DELAY = 2.0  # seconds, lets the "Updating..." indicator show
DEV_RELOAD_INTERVAL = 60.0  # seconds


class PollerState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    BASELINE_CAPTURED = "baseline_captured"
    POLLING = "polling"
    UPDATE_DETECTED = "update_detected"
    DEV_RELOAD_SCHEDULED = "dev_reload_scheduled"
    RELOADING = "reloading"


@dataclass(frozen=True)
class DisplayIdentity:
    build_time: str
    config_version: int | None = None

    @property
    def is_development(self) -> bool:
        return self.build_time == DEV_BUILD_TIME


IdentityFetcher = Callable[[], Awaitable[DisplayIdentity]]


def http_identity_fetcher(base_url: str, timeout: float = 10.0) -> IdentityFetcher:
    """Fetcher reading ``/api/version`` and ``/api/config-version`` from *base_url*.

    The config-version request also refreshes the server-side heartbeat.
    """
    base_url = base_url.rstrip("/")

    async def fetch() -> DisplayIdentity:
        async with httpx.AsyncClient(
            timeout=timeout, headers={"User-Agent": USER_AGENT}
        ) as client:
            version = await client.get(f"{base_url}/api/version")
            version.raise_for_status()
            config = await client.get(f"{base_url}/api/config-version")
            config.raise_for_status()
        payload = config.json()
        config_version = payload.get("version")
        if config_version == 0 and payload.get("updatedAt") is None:
            # The server's answer when it could not read the counter
            config_version = None
        return DisplayIdentity(
            build_time=str(version.json()["buildTime"]),
            config_version=config_version,
        )

    return fetch


class VersionChecker:
    """Poll-compare-reload state machine for one display session.

    ``check()`` performs a single poll; ``run()`` drives polls on the cadence
    until a reload has been issued. The reload fires at most once per instance.
    """

    def __init__(
        self,
        fetch: IdentityFetcher,
        reload: Callable[[], Awaitable[None]],
        on_updating: Callable[[], None] | None = None,
        *,
        poll_interval: float = POLL_INTERVAL,
        refresh_delay: float = REFRESH_DELAY,
        dev_reload_interval: float = DEV_RELOAD_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._fetch = fetch
        self._reload = reload
        self._on_updating = on_updating
        self.poll_interval = poll_interval
        self.refresh_delay = refresh_delay
        self.dev_reload_interval = dev_reload_interval
        self._sleep = sleep

        self.state = PollerState.UNINITIALIZED
        self.baseline: DisplayIdentity | None = None
        self.reload_count = 0

    @property
    def finished(self) -> bool:
        return self.state in (
            PollerState.UPDATE_DETECTED,
            PollerState.DEV_RELOAD_SCHEDULED,
            PollerState.RELOADING,
        )

    async def check(self) -> PollerState:
        """Fetch the identity once and advance the state. Returns the new state."""
        if self.finished:
            return self.state
        try:
            identity = await self._fetch()
        except Exception as exc:
            # Failed polls are ignored; the next one runs on the normal cadence
            logger.warning("Version check failed: %s", exc)
            return self.state

        if self.baseline is None:
            self.baseline = identity
            if identity.is_development:
                self.state = PollerState.DEV_RELOAD_SCHEDULED
                logger.info(
                    "Development build, reloading in %.0fs", self.dev_reload_interval
                )
            else:
                self.state = PollerState.BASELINE_CAPTURED
                logger.info(
                    "Initial build: %s (config version %s)",
                    identity.build_time,
                    identity.config_version,
                )
            return self.state

        if not identity.config_version and self.baseline.config_version:
            # Versions start at 1 and only grow, so this is an unreadable counter
            logger.warning("Config version unavailable, skipping this check")
            return self.state

        if identity == self.baseline:
            self.state = PollerState.POLLING
            return self.state

        logger.info(
            "New version detected: %s/%s (was: %s/%s)",
            identity.build_time,
            identity.config_version,
            self.baseline.build_time,
            self.baseline.config_version,
        )
        self.state = PollerState.UPDATE_DETECTED
        if self._on_updating is not None:
            self._on_updating()
        return self.state

    async def _issue_reload(self) -> None:
        if self.state is PollerState.RELOADING:
            return
        self.state = PollerState.RELOADING
        self.reload_count += 1
        await self._reload()

    async def run(self) -> None:
        """Poll until a change (or the development timer) triggers one reload."""
        while True:
            state = await self.check()
            if state is PollerState.UPDATE_DETECTED:
                await self._sleep(self.refresh_delay)
                await self._issue_reload()
                return
            if state is PollerState.DEV_RELOAD_SCHEDULED:
                await self._sleep(self.dev_reload_interval)
                await self._issue_reload()
                return
            await self._sleep(self.poll_interval)
