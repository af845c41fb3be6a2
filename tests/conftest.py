from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pytest

from gitconfig_server.config import GitConfig
from gitconfig_server.errors import GitOperationError, GitStage
from gitconfig_server.registry import Environment

GIT_ENV = {
    "GIT_AUTHOR_NAME": "Config Tester",
    "GIT_AUTHOR_EMAIL": "tester@example.com",
    "GIT_COMMITTER_NAME": "Config Tester",
    "GIT_COMMITTER_EMAIL": "tester@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(cwd: Path, *args: str) -> str:
    env = os.environ.copy()
    env.update(GIT_ENV)
    out = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=str(cwd),
        env=env,
        check=True,
        capture_output=True,
        text=True,
    )
    return out.stdout.strip()


class Upstream:
    """A plain (non-bare) repository acting as the remote."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def url(self) -> str:
        return str(self.path)

    def write(self, rel: str, content: Union[str, bytes]) -> "Upstream":
        p = self.path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            p.write_bytes(content)
        else:
            p.write_text(content, encoding="utf-8")
        return self

    def remove(self, rel: str) -> "Upstream":
        (self.path / rel).unlink()
        return self

    def commit(self, message: str = "update") -> str:
        git(self.path, "add", "-A")
        git(self.path, "commit", "-q", "--allow-empty", "-m", message)
        return git(self.path, "rev-parse", "HEAD")

    def checkout(self, branch: str, create: bool = False) -> "Upstream":
        if create:
            git(self.path, "checkout", "-q", "-b", branch)
        else:
            git(self.path, "checkout", "-q", branch)
        return self

    def tag(self, name: str) -> None:
        git(self.path, "tag", name)


@pytest.fixture
def upstream(tmp_path: Path) -> Upstream:
    if shutil.which("git") is None:
        pytest.skip("git CLI not installed")
    path = tmp_path / "upstream"
    path.mkdir()
    git(path, "init", "-q")
    git(path, "checkout", "-q", "-b", "main")
    return Upstream(path)


@pytest.fixture
def make_git_config(tmp_path: Path):
    def _make(up: Upstream, name: str = "default", subpath: Optional[str] = None, branch: str = "main") -> GitConfig:
        return GitConfig(
            repo_url=up.url,
            branch=branch,
            workdir=tmp_path / "mirrors" / name,
            subpath=subpath,
        )
    return _make


# ─────────────────────────────────────────────────────────────
# In-memory backend for policy tests that don't need git
# ─────────────────────────────────────────────────────────────

class FakeBackend:
    def __init__(
        self,
        files: Optional[Dict[str, Dict[str, bytes]]] = None,
        commits: Optional[Dict[str, str]] = None,
        dates: Optional[Dict[str, str]] = None,
        listing: Optional[List[str]] = None,
        sync_errors: Optional[List[Exception]] = None,
    ) -> None:
        self.files = files or {}
        self.commits = commits or {}
        self.dates = dates or {}
        self.listing = listing or []
        self.sync_errors = list(sync_errors or [])
        self.synced: List[str] = []
        self.reads: List[tuple] = []

    async def sync(self, git: GitConfig) -> None:
        self.synced.append(git.repo_url)
        if self.sync_errors:
            raise self.sync_errors.pop(0)

    async def resolve_ref(self, git: GitConfig, refs: Sequence[str]) -> str:
        for ref in refs:
            if ref in self.commits:
                return self.commits[ref]
        raise GitOperationError(GitStage.REV_PARSE, "unknown revision", refs[0])

    async def commit_date(self, git: GitConfig, refs: Sequence[str]) -> str:
        for ref in refs:
            if ref in self.dates:
                return self.dates[ref]
        raise GitOperationError(GitStage.SHOW, "unknown revision", refs[0])

    async def read_file(self, git: GitConfig, refs: Sequence[str], rel_path: str) -> Optional[bytes]:
        self.reads.append((tuple(refs), rel_path))
        for ref in refs:
            tree = self.files.get(ref)
            if tree is not None and rel_path in tree:
                return tree[rel_path]
        return None

    async def list_files(self, git: GitConfig, branch: str) -> List[str]:
        return list(self.listing)


@pytest.fixture
def fake_git_config(tmp_path: Path) -> GitConfig:
    return GitConfig(repo_url="https://git.example.com/cfg.git", branch="main", workdir=tmp_path / "wd")


@pytest.fixture
def fake_env(fake_git_config: GitConfig) -> Environment:
    return Environment(name="dev", git=fake_git_config, env_vars={"DB_HOST": "db.local", "PORT": "5432"})
