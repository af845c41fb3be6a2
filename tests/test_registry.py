import logging

import pytest

from gitconfig_server.config import RootConfig
from gitconfig_server.errors import NotFoundError
from gitconfig_server.registry import build_registry, merge_env_file_into


def _root(tmp_path, **extra) -> RootConfig:
    data = {
        "http": {"bind_addr": "0.0.0.0:8888"},
        "environments": {
            "prod": {"git": {"repo_url": "r", "branch": "main", "workdir": str(tmp_path / "prod")}},
            "staging": {"git": {"repo_url": "r", "branch": "dev", "workdir": str(tmp_path / "staging")}},
        },
    }
    data.update(extra)
    return RootConfig.model_validate(data)


def test_later_sources_override_earlier(tmp_path):
    (tmp_path / "global.env").write_text("# shared\nA=global\nB=global\n\nexport C=global\n", encoding="utf-8")
    (tmp_path / "prod.env").write_text("B=prod\n", encoding="utf-8")

    cfg = _root(tmp_path, env_from_process=True, env_file=str(tmp_path / "global.env"))
    cfg.environments["prod"].env_file = str(tmp_path / "prod.env")

    registry = build_registry(cfg, process_env={"A": "process", "HOME": "/home/x"})
    prod = registry.get("prod")
    staging = registry.get("staging")

    assert prod.env_vars == {"A": "global", "B": "prod", "C": "global", "HOME": "/home/x"}
    assert staging.env_vars == {"A": "global", "B": "global", "C": "global", "HOME": "/home/x"}


def test_process_env_is_ignored_unless_enabled(tmp_path):
    registry = build_registry(_root(tmp_path), process_env={"SECRET": "x"})
    assert dict(registry.get("prod").env_vars) == {}


def test_env_map_is_read_only(tmp_path):
    env = build_registry(_root(tmp_path)).get("prod")
    with pytest.raises(TypeError):
        env.env_vars["NEW"] = "value"


def test_missing_env_file_is_a_warning(tmp_path, caplog):
    target = {"KEEP": "1"}
    with caplog.at_level(logging.WARNING, logger="gitconfig_server.registry"):
        merge_env_file_into(str(tmp_path / "absent.env"), target)
    assert target == {"KEEP": "1"}
    assert "absent.env" in caplog.text


def test_values_are_not_interpolated(tmp_path):
    p = tmp_path / "x.env"
    p.write_text("A=1\nB=${A}-x\nEMPTY=\n", encoding="utf-8")
    target = {}
    merge_env_file_into(str(p), target)
    assert target == {"A": "1", "B": "${A}-x", "EMPTY": ""}


def test_lookup_and_iteration(tmp_path):
    registry = build_registry(_root(tmp_path))
    assert registry.names() == ["prod", "staging"]
    assert [e.name for e in registry] == ["prod", "staging"]
    assert "prod" in registry and "qa" not in registry
    assert len(registry) == 2
    with pytest.raises(NotFoundError):
        registry.get("qa")
