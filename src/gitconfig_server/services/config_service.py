# src/gitconfig_server/services/config_service.py
from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from ..errors import GitOperationError, NotFoundError
from ..models import EnvironmentResponse, EnvMeta, PropertySource, UiMeta
from ..registry import Environment
from ..util.fs import validate_rel_path
from ..vcs.backend import VersionControlBackend
from ..vcs.refs import candidate_refs
from .assembler import ConfigAssembler, parse_profiles
from .template import TemplateEngine

logger = logging.getLogger("gitconfig_server.service")

OCTET_STREAM = "application/octet-stream"
PLAIN_TEXT = "text/plain; charset=utf-8"


@dataclass(frozen=True)
class FileContent:
    body: Union[bytes, str]
    media_type: str
    templated: bool


def is_binary(data: bytes) -> bool:
    if b"\0" in data:
        return True
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


def guess_media_type(path: str, default: str) -> str:
    mime, _ = mimetypes.guess_type(path, strict=False)
    return mime or default


def shell_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")


def property_source_name(env: Environment, raw_profiles: str) -> str:
    sub = f"/{env.git.subpath}" if env.git.subpath else ""
    return f"git:{env.git.repo_url}{sub}:{raw_profiles}"


class ConfigService:
    """Request-side operations over one environment's mirror."""

    def __init__(self, backend: VersionControlBackend, templates: Optional[TemplateEngine] = None) -> None:
        self.backend = backend
        self.templates = templates or TemplateEngine()
        self.assembler = ConfigAssembler(backend, self.templates)

    async def resolve_version(self, env: Environment, label: Optional[str]) -> str:
        try:
            return await self.backend.resolve_ref(env.git, candidate_refs(env.git, label))
        except GitOperationError as e:
            logger.warning("[%s] version lookup for %s failed: %s", env.name, label or env.git.branch, e)
            return ""

    async def resolve_commit_date(self, env: Environment, label: Optional[str]) -> str:
        try:
            return await self.backend.commit_date(env.git, candidate_refs(env.git, label))
        except GitOperationError as e:
            logger.warning("[%s] commit date lookup for %s failed: %s", env.name, label or env.git.branch, e)
            return ""

    async def environment_response(
        self,
        env: Environment,
        application: str,
        profile_str: str,
        label: Optional[str] = None,
    ) -> EnvironmentResponse:
        profiles = parse_profiles(profile_str)
        props, found_any = await self.assembler.assemble(env.git, application, profiles, label, env.env_vars)
        version = await self.resolve_version(env, label)

        sources: List[PropertySource] = []
        if found_any:
            sources.append(PropertySource(name=property_source_name(env, profile_str), source=props))

        return EnvironmentResponse(
            name=application,
            profiles=profiles,
            label=label,
            version=version,
            state="",
            property_sources=sources,
        )

    async def render_file(self, env: Environment, label: str, raw_path: str) -> FileContent:
        rel = validate_rel_path(raw_path)
        data = await self.backend.read_file(env.git, candidate_refs(env.git, label), rel)
        if data is None:
            raise NotFoundError(rel)

        if is_binary(data):
            return FileContent(body=data, media_type=guess_media_type(rel, OCTET_STREAM), templated=False)

        text = self.templates.substitute(data.decode("utf-8"), env.env_vars)
        return FileContent(body=text, media_type=guess_media_type(rel, PLAIN_TEXT), templated=True)

    async def list_files(self, env: Environment) -> List[str]:
        return await self.backend.list_files(env.git, env.git.branch)

    def env_exports(self, env: Environment) -> str:
        return "".join(
            f'export {key}="{shell_escape(env.env_vars[key])}"\n' for key in sorted(env.env_vars)
        )

    async def ui_meta(self, envs: Iterable[Environment], base_path: str, auth_enabled: bool) -> UiMeta:
        items: List[EnvMeta] = []
        for env in envs:
            items.append(EnvMeta(
                name=env.name,
                repo_url=env.git.repo_url,
                branch=env.git.branch,
                workdir=str(env.git.workdir),
                subpath=env.git.subpath or "",
                last_commit=await self.resolve_version(env, None),
                last_commit_date=await self.resolve_commit_date(env, None),
            ))
        return UiMeta(base_path=base_path, environments=items, auth_enabled=auth_enabled)
