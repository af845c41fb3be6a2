# src/gitconfig_server/vcs/gitpython_backend.py
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import git  # GitPython
from git.exc import BadName, BadObject, GitCommandError

from ..config import GitConfig
from ..errors import GitOperationError, GitStage
from ..util.fs import repo_path, strip_subpath

logger = logging.getLogger("gitconfig_server.git")

_REF_ERRORS = (BadName, BadObject, ValueError, IndexError)


def _stderr_of(e: GitCommandError) -> str:
    """GitPython wraps stderr as "\\n  stderr: '...'"; keep only the message."""
    raw = str(e.stderr or e).strip()
    if raw.startswith("stderr:"):
        raw = raw[len("stderr:"):].strip()
    return raw.strip("'").strip()


class GitPythonBackend:
    """
    Same contract as GitCliBackend, through GitPython's object model.

    GitPython is blocking, so every operation runs in a worker thread.
    """

    async def sync(self, git_cfg: GitConfig) -> None:
        await asyncio.to_thread(self._sync, git_cfg)

    async def resolve_ref(self, git_cfg: GitConfig, refs: Sequence[str]) -> str:
        return await asyncio.to_thread(self._resolve_ref, git_cfg, refs)

    async def commit_date(self, git_cfg: GitConfig, refs: Sequence[str]) -> str:
        return await asyncio.to_thread(self._commit_date, git_cfg, refs)

    async def read_file(self, git_cfg: GitConfig, refs: Sequence[str], rel_path: str) -> Optional[bytes]:
        return await asyncio.to_thread(self._read_file, git_cfg, refs, rel_path)

    async def list_files(self, git_cfg: GitConfig, branch: str) -> List[str]:
        return await asyncio.to_thread(self._list_files, git_cfg, branch)

    # ───────────────────────── Helpers ─────────────────────────

    def _sync(self, git_cfg: GitConfig) -> None:
        workdir = Path(git_cfg.workdir)
        workdir.mkdir(parents=True, exist_ok=True)

        if not (workdir / ".git").exists():
            logger.info("Cloning %s into %s (branch %s)", git_cfg.repo_url, workdir, git_cfg.branch)
            try:
                repo = git.Repo.clone_from(
                    git_cfg.repo_url, workdir, branch=git_cfg.branch, single_branch=True
                )
            except GitCommandError as e:
                raise GitOperationError(GitStage.CLONE, _stderr_of(e)) from e
            repo.close()
            return

        logger.info("Fetching & resetting %s (branch %s)", workdir, git_cfg.branch)
        target = f"origin/{git_cfg.branch}"
        with git.Repo(workdir) as repo:
            try:
                repo.git.fetch("--all", "--prune")
            except GitCommandError as e:
                raise GitOperationError(GitStage.FETCH, _stderr_of(e)) from e
            try:
                repo.git.reset("--hard", target)
            except GitCommandError as e:
                raise GitOperationError(GitStage.RESET, _stderr_of(e), target) from e

    def _commit(self, repo: git.Repo, refs: Sequence[str], stage: GitStage):
        last = "no candidate refs"
        for ref in refs:
            try:
                return repo.commit(ref)
            except _REF_ERRORS as e:
                last = str(e)
        raise GitOperationError(stage, last, refs[0] if refs else None)

    def _resolve_ref(self, git_cfg: GitConfig, refs: Sequence[str]) -> str:
        with git.Repo(git_cfg.workdir) as repo:
            return self._commit(repo, refs, GitStage.REV_PARSE).hexsha

    def _commit_date(self, git_cfg: GitConfig, refs: Sequence[str]) -> str:
        with git.Repo(git_cfg.workdir) as repo:
            return self._commit(repo, refs, GitStage.SHOW).committed_datetime.isoformat()

    def _read_file(self, git_cfg: GitConfig, refs: Sequence[str], rel_path: str) -> Optional[bytes]:
        spec_path = repo_path(git_cfg, rel_path)
        with git.Repo(git_cfg.workdir) as repo:
            for ref in refs:
                try:
                    commit = repo.commit(ref)
                    obj = commit.tree / spec_path
                except (KeyError, *_REF_ERRORS):
                    continue
                if obj.type == "blob":
                    return obj.data_stream.read()
        return None

    def _list_files(self, git_cfg: GitConfig, branch: str) -> List[str]:
        with git.Repo(git_cfg.workdir) as repo:
            try:
                tree = repo.commit(branch).tree
            except _REF_ERRORS as e:
                raise GitOperationError(GitStage.LIST, str(e), branch) from e
            files: List[str] = []
            for item in tree.traverse():
                if item.type != "blob":
                    continue
                rel = strip_subpath(item.path, git_cfg.subpath)
                if rel:
                    files.append(rel)
        return sorted(files)
