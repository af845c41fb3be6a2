import pytest

from gitconfig_server.config import GitConfig
from gitconfig_server.errors import BadRequestError
from gitconfig_server.util.fs import repo_path, strip_subpath, validate_rel_path
from gitconfig_server.vcs.refs import candidate_refs


@pytest.mark.parametrize("raw", ["../etc/passwd", "/etc/passwd", "a/../../b", "a/..", "..\\secret", "C:/x", ""])
def test_validate_rejects_escapes(raw):
    with pytest.raises(BadRequestError):
        validate_rel_path(raw)


@pytest.mark.parametrize("raw,expected", [
    ("a/./b", "a/b"),
    ("./config/app.yml", "config/app.yml"),
    ("a//b/", "a/b"),
    ("dir\\file.txt", "dir/file.txt"),
    ("file..name.yml", "file..name.yml"),
])
def test_validate_cleans_paths(raw, expected):
    assert validate_rel_path(raw) == expected


def test_bad_request_messages_name_the_problem():
    with pytest.raises(BadRequestError, match="Parent"):
        validate_rel_path("x/../y")
    with pytest.raises(BadRequestError, match="Absolute"):
        validate_rel_path("/x")


def test_repo_path_prefixes_subpath(tmp_path):
    plain = GitConfig(repo_url="u", branch="main", workdir=tmp_path)
    scoped = GitConfig(repo_url="u", branch="main", workdir=tmp_path, subpath="./envs\\prod/")
    assert repo_path(plain, "app.yml") == "app.yml"
    assert scoped.subpath == "envs/prod"
    assert repo_path(scoped, "app.yml") == "envs/prod/app.yml"


def test_strip_subpath():
    assert strip_subpath("prod/app.yml", "prod") == "app.yml"
    assert strip_subpath("production/app.yml", "prod") is None
    assert strip_subpath("prod", "prod") is None
    assert strip_subpath("x/y.yml", None) == "x/y.yml"


def test_candidate_refs(tmp_path):
    cfg = GitConfig(repo_url="u", branch="main", workdir=tmp_path)
    assert candidate_refs(cfg, None) == ["main", "origin/main"]
    assert candidate_refs(cfg, "") == ["main", "origin/main"]
    assert candidate_refs(cfg, "v1") == ["v1", "origin/v1"]
