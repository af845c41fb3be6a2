from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .config import AuthSettings, HttpConfig, RootConfig, git_timeout_from_env
from .registry import EnvironmentRegistry, build_registry
from .services import ConfigService, GitMirrorManager, TemplateEngine
from .vcs import make_backend


@dataclass
class AppState:
    registry: EnvironmentRegistry
    http: HttpConfig
    auth: AuthSettings
    service: ConfigService
    mirror: GitMirrorManager


def build_state(
    cfg: RootConfig,
    *,
    auth: Optional[AuthSettings] = None,
    process_env: Optional[Mapping[str, str]] = None,
) -> AppState:
    backend = make_backend(cfg.backend, timeout=git_timeout_from_env())
    return AppState(
        registry=build_registry(cfg, process_env=process_env),
        http=cfg.http,
        auth=auth if auth is not None else AuthSettings.from_env(),
        service=ConfigService(backend, TemplateEngine()),
        mirror=GitMirrorManager(backend),
    )
