# src/gitconfig_server/config.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError

logger = logging.getLogger("gitconfig_server.config")

DEFAULT_REFRESH_INTERVAL_SECS = 30
DEFAULT_ENV_NAME = "default"


def normalize_subpath(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    sub = str(raw).replace("\\", "/").strip()
    while sub.startswith("./"):
        sub = sub[2:]
    sub = sub.strip("/")
    return sub or None


class GitConfig(BaseModel):
    repo_url: str
    branch: str
    workdir: Path
    subpath: Optional[str] = None
    refresh_interval_secs: int = Field(default=DEFAULT_REFRESH_INTERVAL_SECS, ge=0)

    @field_validator("subpath", mode="before")
    @classmethod
    def _normalize_subpath(cls, v):
        return normalize_subpath(v)


class HttpConfig(BaseModel):
    bind_addr: str
    base_path: str = "/"

    @property
    def normalized_base_path(self) -> str:
        base = (self.base_path or "").strip().strip("/")
        return f"/{base}" if base else "/"

    @property
    def host_port(self) -> Tuple[str, int]:
        host, sep, port = self.bind_addr.rpartition(":")
        if not sep or not host:
            raise ConfigError(f"http.bind_addr must look like host:port, got {self.bind_addr!r}")
        try:
            return host.strip("[]"), int(port)
        except ValueError:
            raise ConfigError(f"http.bind_addr has a non-numeric port: {self.bind_addr!r}")


class EnvDefinition(BaseModel):
    git: GitConfig
    env_file: Optional[str] = None


class RootConfig(BaseModel):
    """
    Two layouts are accepted:
      - single instance: `git` (+ optional global `env_file`), served as env "default"
      - multi-tenant:    `environments` map (+ optional global `env_file`)
    When both are present the `environments` map wins.
    """
    http: HttpConfig
    env_from_process: bool = False
    env_file: Optional[str] = None
    git: Optional[GitConfig] = None
    environments: Dict[str, EnvDefinition] = Field(default_factory=dict)
    backend: Literal["cli", "gitpython"] = "cli"

    @model_validator(mode="after")
    def _check_layout(self) -> "RootConfig":
        if not self.environments and self.git is None:
            raise ValueError("config must contain either `git` or `environments`")
        seen: Dict[Path, str] = {}
        for name, definition in self.environment_definitions().items():
            workdir = definition.git.workdir.expanduser().absolute()
            if workdir in seen:
                raise ValueError(
                    f"environments {seen[workdir]!r} and {name!r} share workdir {str(workdir)!r}"
                )
            seen[workdir] = name
        return self

    def environment_definitions(self) -> Dict[str, EnvDefinition]:
        if self.environments:
            return dict(self.environments)
        # single instance: per-env file is unused, the global one applies
        return {DEFAULT_ENV_NAME: EnvDefinition(git=self.git)}


def load_root_config(path: Path | str) -> RootConfig:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config file {p}: {e}") from e
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{p} must contain a mapping at the top level")
    try:
        return RootConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration in {p}: {e}") from e


class AuthSettings(BaseModel):
    required: bool = False
    username: str = ""
    password: str = ""

    @staticmethod
    def from_env() -> "AuthSettings":
        user = os.getenv("AUTH_USERNAME")
        password = os.getenv("AUTH_PASSWORD")
        if user is not None and password is not None:
            logger.info("Basic auth enabled")
            return AuthSettings(required=True, username=user, password=password)
        logger.warning("Basic auth disabled (AUTH_USERNAME / AUTH_PASSWORD not set)")
        return AuthSettings()


def git_timeout_from_env() -> Optional[float]:
    raw = os.getenv("GIT_CMD_TIMEOUT_SEC")
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric GIT_CMD_TIMEOUT_SEC=%r", raw)
        return None
    return value if value > 0 else None


__all__ = [
    "AuthSettings",
    "EnvDefinition",
    "GitConfig",
    "HttpConfig",
    "RootConfig",
    "git_timeout_from_env",
    "load_root_config",
    "normalize_subpath",
]
