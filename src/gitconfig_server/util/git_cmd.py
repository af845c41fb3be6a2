# src/gitconfig_server/util/git_cmd.py
from __future__ import annotations

import asyncio
import logging
import os
import shlex
from dataclasses import dataclass
from typing import Optional, Sequence

from ..errors import GitOperationError, GitStage

logger = logging.getLogger("gitconfig_server.git")


def _base_git_env() -> dict:
    """
    Environment knobs so a headless server never blocks on a credential prompt.
    """
    env = {
        "GIT_TERMINAL_PROMPT": os.getenv("GIT_TERMINAL_PROMPT", "0"),
        "GIT_ASKPASS": os.getenv("GIT_ASKPASS", "echo"),
        "HTTP_PROXY": os.getenv("HTTP_PROXY", ""),
        "HTTPS_PROXY": os.getenv("HTTPS_PROXY", ""),
        "NO_PROXY": os.getenv("NO_PROXY", ""),
    }
    # Drop empty proxy keys to avoid overriding defaults
    return {k: v for k, v in env.items() if v}


@dataclass(frozen=True)
class GitResult:
    returncode: int
    stdout: bytes
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self, stage: GitStage, ref: Optional[str] = None) -> "GitResult":
        if not self.ok:
            raise GitOperationError(stage, self.stderr.strip(), ref)
        return self


async def run_git(
    args: Sequence[str],
    cwd: Optional[str] = None,
    *,
    stage: GitStage,
    timeout: Optional[float] = None,
) -> GitResult:
    """
    Run `git <args>` without blocking the event loop.

    Failing to spawn git at all raises OSError; a non-zero exit is returned to
    the caller, who decides whether that is fatal. `stage` only labels a timeout.
    """
    cmd = ["git", *args]
    env = os.environ.copy()
    env.update(_base_git_env())
    logger.debug("exec: %s (cwd=%s)", " ".join(map(shlex.quote, cmd)), cwd)

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=cwd,
        env=env,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise GitOperationError(stage, f"timed out after {timeout}s")
    return GitResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=out,
        stderr=err.decode("utf-8", errors="replace"),
    )
