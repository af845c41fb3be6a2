# src/gitconfig_server/vcs/backend.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

from ..config import GitConfig
from ..errors import GitOperationError, GitStage
from ..util.fs import repo_path, strip_subpath
from ..util.git_cmd import GitResult, run_git

logger = logging.getLogger("gitconfig_server.git")


# ─────────────────────────────────────────────────────────────
# Backend SPI: the only operations the resolution policy needs
# ─────────────────────────────────────────────────────────────

class VersionControlBackend(Protocol):
    async def sync(self, git: GitConfig) -> None: ...

    async def resolve_ref(self, git: GitConfig, refs: Sequence[str]) -> str: ...

    async def commit_date(self, git: GitConfig, refs: Sequence[str]) -> str: ...

    async def read_file(self, git: GitConfig, refs: Sequence[str], rel_path: str) -> Optional[bytes]: ...

    async def list_files(self, git: GitConfig, branch: str) -> List[str]: ...


# ─────────────────────────────────────────────────────────────
# git CLI implementation
# ─────────────────────────────────────────────────────────────

class GitCliBackend:
    """
    Drives the `git` binary, one subprocess per operation.

    Reads address objects as `<ref>:<path>` and never touch the working tree,
    so they can run while a refresh is resetting it.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    async def _git(self, git: GitConfig, stage: GitStage, *args: str) -> GitResult:
        return await run_git(["-C", str(git.workdir), *args], stage=stage, timeout=self.timeout)

    async def sync(self, git: GitConfig) -> None:
        workdir = Path(git.workdir)
        workdir.mkdir(parents=True, exist_ok=True)

        if not (workdir / ".git").exists():
            logger.info("Cloning %s into %s (branch %s)", git.repo_url, workdir, git.branch)
            res = await run_git(
                ["clone", "--branch", git.branch, "--single-branch", git.repo_url, str(workdir)],
                stage=GitStage.CLONE,
                timeout=self.timeout,
            )
            res.check(GitStage.CLONE)
            return

        logger.info("Fetching & resetting %s (branch %s)", workdir, git.branch)
        (await self._git(git, GitStage.FETCH, "fetch", "--all", "--prune")).check(GitStage.FETCH)
        target = f"origin/{git.branch}"
        (await self._git(git, GitStage.RESET, "reset", "--hard", target)).check(GitStage.RESET, target)

    async def _first_ok(
        self,
        git: GitConfig,
        refs: Sequence[str],
        stage: GitStage,
        build_args: Callable[[str], List[str]],
    ) -> str:
        last: Optional[GitResult] = None
        for ref in refs:
            res = await self._git(git, stage, *build_args(ref))
            if res.ok:
                return res.stdout.decode("utf-8", errors="replace").strip()
            last = res
        stderr = last.stderr.strip() if last is not None else "no candidate refs"
        raise GitOperationError(stage, stderr, refs[0] if refs else None)

    async def resolve_ref(self, git: GitConfig, refs: Sequence[str]) -> str:
        return await self._first_ok(
            git, refs, GitStage.REV_PARSE, lambda ref: ["rev-parse", "--verify", f"{ref}^{{commit}}"]
        )

    async def commit_date(self, git: GitConfig, refs: Sequence[str]) -> str:
        return await self._first_ok(
            git, refs, GitStage.SHOW, lambda ref: ["log", "-1", "--format=%cI", f"{ref}^{{commit}}", "--"]
        )

    async def read_file(self, git: GitConfig, refs: Sequence[str], rel_path: str) -> Optional[bytes]:
        spec_path = repo_path(git, rel_path)
        for ref in refs:
            res = await self._git(git, GitStage.SHOW, "cat-file", "blob", f"{ref}:{spec_path}")
            if res.ok:
                return res.stdout
        return None

    async def list_files(self, git: GitConfig, branch: str) -> List[str]:
        res = await self._git(git, GitStage.LIST, "ls-tree", "-r", "-z", "--name-only", branch)
        res.check(GitStage.LIST, branch)

        files: List[str] = []
        for entry in res.stdout.decode("utf-8", errors="replace").split("\0"):
            if not entry:
                continue
            rel = strip_subpath(entry, git.subpath)
            if rel:
                files.append(rel)
        return files
