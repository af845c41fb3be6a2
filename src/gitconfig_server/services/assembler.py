# src/gitconfig_server/services/assembler.py
from __future__ import annotations

import asyncio
import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from ..config import GitConfig
from ..errors import DocumentDecodeError, DocumentParseError
from ..vcs.backend import VersionControlBackend
from ..vcs.refs import candidate_refs
from .template import TemplateEngine

logger = logging.getLogger("gitconfig_server.assembler")

PropertyMap = Dict[str, Any]


class _ConfigLoader(yaml.SafeLoader):
    """
    Safe loader with YAML 1.2 core scalar resolution.

    Dates stay strings, `on`/`yes`/`off`/`no` stay strings, and there is no
    base-60 or leading-zero octal. Application tags (`!secret x`) are dropped
    and the value underneath is kept.
    """


_YAML11_ONLY_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
    # `=` resolves to a tag SafeConstructor cannot build
    "tag:yaml.org,2002:value",
}

_ConfigLoader.yaml_implicit_resolvers = {
    first: [(tag, rx) for tag, rx in resolvers if tag not in _YAML11_ONLY_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_ConfigLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
_ConfigLoader.add_implicit_resolver(
    "tag:yaml.org,2002:int",
    re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)
_ConfigLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(
        r"^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?"
        r"|[-+]?\.(?:inf|Inf|INF)"
        r"|\.(?:nan|NaN|NAN))$"
    ),
    list("-+.0123456789"),
)


def _construct_core_int(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> int:
    value = str(loader.construct_scalar(node))
    sign = -1 if value[:1] == "-" else 1
    if value[:1] in ("-", "+"):
        value = value[1:]
    if value.startswith("0o"):
        return sign * int(value[2:], 8)
    if value.startswith("0x"):
        return sign * int(value[2:], 16)
    # leading zeros are decimal in YAML 1.2
    return sign * int(value, 10)


def _construct_untagged(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node, deep=True)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    tag = loader.resolve(yaml.ScalarNode, node.value, (node.style is None, False))
    plain = yaml.ScalarNode(tag, node.value, node.start_mark, node.end_mark, node.style)
    return loader.construct_object(plain, deep=True)


_ConfigLoader.add_constructor("tag:yaml.org,2002:int", _construct_core_int)
_ConfigLoader.add_multi_constructor("!", _construct_untagged)


def parse_profiles(raw: str) -> List[str]:
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


def candidate_filenames(application: str, profiles: Sequence[str]) -> List[str]:
    """Files to look for, lowest precedence first."""
    names = [
        "application.yml",
        "application.yaml",
        f"{application}.yml",
        f"{application}.yaml",
    ]
    for p in profiles:
        names += [
            f"application-{p}.yml",
            f"application-{p}.yaml",
            f"{application}-{p}.yml",
            f"{application}-{p}.yaml",
        ]
    return names


def _key_text(key: Any) -> str:
    # non-string keys use their YAML literal spelling
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def _scalar(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        # JSON has no NaN / Infinity
        return value if math.isfinite(value) else 0
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def flatten(value: Any, prefix: Optional[str] = None, out: Optional[PropertyMap] = None) -> PropertyMap:
    """
    Flatten a parsed YAML document into dotted / indexed keys.

        {a: {b: [1, 2]}}  ->  {"a.b[0]": 1, "a.b[1]": 2}

    Keys already in `out` are overwritten in place.
    """
    if out is None:
        out = {}
    if isinstance(value, dict):
        for k, v in value.items():
            key = _key_text(k)
            flatten(v, key if prefix is None else f"{prefix}.{key}", out)
    elif isinstance(value, list):
        for idx, v in enumerate(value):
            flatten(v, f"[{idx}]" if prefix is None else f"{prefix}[{idx}]", out)
    elif prefix is not None:
        out[prefix] = _scalar(value)
    return out


def load_document(name: str, text: str) -> Any:
    try:
        return yaml.load(text, Loader=_ConfigLoader)
    except (yaml.YAMLError, ValueError) as e:
        # ValueError: an explicit !!int whose text is not a number
        raise DocumentParseError(name, str(e)) from e


MAX_CONCURRENT_READS = 8


class ConfigAssembler:
    def __init__(
        self,
        backend: VersionControlBackend,
        templates: TemplateEngine,
        max_concurrent_reads: int = MAX_CONCURRENT_READS,
    ) -> None:
        self.backend = backend
        self.templates = templates
        # shared by all requests: each read may spawn git subprocesses
        self._read_slots = asyncio.Semaphore(max_concurrent_reads)

    async def _read(self, git: GitConfig, refs: Sequence[str], name: str) -> Optional[bytes]:
        async with self._read_slots:
            return await self.backend.read_file(git, refs, name)

    async def assemble(
        self,
        git: GitConfig,
        application: str,
        profiles: Sequence[str],
        label: Optional[str],
        env_vars: Mapping[str, str],
    ) -> Tuple[PropertyMap, bool]:
        """
        Merge every candidate file that exists at the resolved ref.

        Returns (properties, found_any). Reads run concurrently, at most
        `max_concurrent_reads` at a time; merging follows candidate order so
        later files win.
        """
        refs = candidate_refs(git, label)
        names = candidate_filenames(application, profiles)
        contents = await asyncio.gather(*(self._read(git, refs, n) for n in names))

        result: PropertyMap = {}
        found_any = False
        for name, raw in zip(names, contents):
            if raw is None:
                continue
            found_any = True
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DocumentDecodeError(name) from e
            doc = load_document(name, self.templates.substitute(text, env_vars))
            flatten(doc, None, result)
            logger.debug("merged %s (%s)", name, refs[0])
        return result, found_any
