# src/gitconfig_server/registry.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from dotenv import dotenv_values

from .config import GitConfig, RootConfig
from .errors import NotFoundError

logger = logging.getLogger("gitconfig_server.registry")


@dataclass(frozen=True)
class Environment:
    """One tenant: its git endpoint and the variables used for templating."""
    name: str
    git: GitConfig
    env_vars: Mapping[str, str]


def merge_env_file_into(path: str, target: Dict[str, str]) -> None:
    """Overlay KEY=VALUE pairs from a dotenv file. A missing file is only a warning."""
    p = Path(path).expanduser()
    if not p.is_file():
        logger.warning("env_file %s not found; skipping", path)
        return
    try:
        values = dotenv_values(p, interpolate=False, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read env_file %s: %s", path, e)
        return
    for key, value in values.items():
        # bare `KEY` lines parse to None; there is nothing to substitute
        if value is not None:
            target[key] = value


class EnvironmentRegistry:
    def __init__(self, environments: Mapping[str, Environment]) -> None:
        self._envs: Dict[str, Environment] = dict(environments)

    def get(self, name: str) -> Environment:
        env = self._envs.get(name)
        if env is None:
            raise NotFoundError(name)
        return env

    def names(self) -> List[str]:
        return sorted(self._envs)

    def __contains__(self, name: object) -> bool:
        return name in self._envs

    def __iter__(self) -> Iterator[Environment]:
        return (self._envs[n] for n in self.names())

    def __len__(self) -> int:
        return len(self._envs)


def build_registry(cfg: RootConfig, process_env: Optional[Mapping[str, str]] = None) -> EnvironmentRegistry:
    global_env: Dict[str, str] = {}
    if cfg.env_from_process:
        global_env.update(os.environ if process_env is None else process_env)
    if cfg.env_file:
        merge_env_file_into(cfg.env_file, global_env)

    envs: Dict[str, Environment] = {}
    for name, definition in cfg.environment_definitions().items():
        env_map = dict(global_env)
        if definition.env_file:
            merge_env_file_into(definition.env_file, env_map)
        envs[name] = Environment(name=name, git=definition.git, env_vars=MappingProxyType(env_map))
        logger.info(
            "Registered environment %s (repo=%s branch=%s workdir=%s vars=%d)",
            name, definition.git.repo_url, definition.git.branch, definition.git.workdir, len(env_map),
        )
    return EnvironmentRegistry(envs)
