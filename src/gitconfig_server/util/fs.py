# src/gitconfig_server/util/fs.py
from __future__ import annotations

from typing import List, Optional

from ..config import GitConfig
from ..errors import BadRequestError


def validate_rel_path(raw: str) -> str:
    """
    Turn a user supplied path into a clean, repository relative one.

    - `.` segments and empty segments (`a//b`) are dropped
    - `..` anywhere is rejected
    - absolute / root-relative input (`/etc`, `C:/x`) is rejected
    Backslashes count as separators so `..\\x` cannot slip through.
    """
    path = (raw or "").replace("\\", "/")
    if path.startswith("/"):
        raise BadRequestError("Absolute or root-relative paths are not allowed")

    parts: List[str] = []
    for seg in path.split("/"):
        if seg in ("", "."):
            continue
        if seg == "..":
            raise BadRequestError("Parent '..' segments are not allowed")
        if not parts and len(seg) == 2 and seg[1] == ":" and seg[0].isalpha():
            raise BadRequestError("Absolute or root-relative paths are not allowed")
        parts.append(seg)

    if not parts:
        raise BadRequestError("Empty path")
    return "/".join(parts)


def repo_path(git: GitConfig, rel: str) -> str:
    """`<subpath>/<rel>` in the forward-slash form git's `<ref>:<path>` syntax expects."""
    rel = rel.replace("\\", "/").strip("/")
    if git.subpath:
        return f"{git.subpath}/{rel}"
    return rel


def strip_subpath(entry: str, subpath: Optional[str]) -> Optional[str]:
    """Map a repository path back under the subpath root; None when it lies outside."""
    if not subpath:
        return entry
    prefix = subpath + "/"
    if entry.startswith(prefix):
        return entry[len(prefix):]
    return None
