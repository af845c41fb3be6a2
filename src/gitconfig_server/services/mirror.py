# src/gitconfig_server/services/mirror.py
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from ..config import DEFAULT_REFRESH_INTERVAL_SECS
from ..registry import Environment
from ..vcs.backend import VersionControlBackend

logger = logging.getLogger("gitconfig_server.mirror")

MIN_REFRESH_INTERVAL_SECS = 1


def effective_interval(secs: int) -> int:
    if secs <= 0:
        return DEFAULT_REFRESH_INTERVAL_SECS
    return max(secs, MIN_REFRESH_INTERVAL_SECS)


class GitMirrorManager:
    """
    Keeps one working copy per environment in step with its upstream branch.

    Syncs of the same environment never overlap (per-environment lock).
    Readers do not take the lock: they address objects by ref, so they see
    either the pre- or post-refresh commit, never a half-reset tree.
    """

    def __init__(self, backend: VersionControlBackend) -> None:
        self.backend = backend
        self._locks: Dict[str, asyncio.Lock] = {}
        self._tasks: List[asyncio.Task] = []

    def _lock_for(self, env: Environment) -> asyncio.Lock:
        lock = self._locks.get(env.name)
        if lock is None:
            lock = self._locks[env.name] = asyncio.Lock()
        return lock

    async def ensure_synced(self, env: Environment) -> None:
        async with self._lock_for(env):
            await self.backend.sync(env.git)

    async def sync_all(self, envs: Iterable[Environment]) -> None:
        """Startup sync. Any failure propagates and should abort startup."""
        for env in envs:
            await self.ensure_synced(env)
            logger.info("[%s] mirror ready at %s", env.name, env.git.workdir)

    async def refresh_loop(self, env: Environment, interval: Optional[float] = None) -> None:
        delay = interval if interval is not None else effective_interval(env.git.refresh_interval_secs)
        while True:
            await asyncio.sleep(delay)
            try:
                await self.ensure_synced(env)
            except Exception as e:
                # next tick retries
                logger.warning("[%s] periodic refresh of %s failed: %s", env.name, env.git.workdir, e)

    def start(self, envs: Iterable[Environment]) -> None:
        for env in envs:
            task = asyncio.create_task(self.refresh_loop(env), name=f"git-refresh:{env.name}")
            self._tasks.append(task)
        logger.info("Started %d refresh loop(s)", len(self._tasks))

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

    @property
    def running(self) -> int:
        return sum(1 for t in self._tasks if not t.done())
