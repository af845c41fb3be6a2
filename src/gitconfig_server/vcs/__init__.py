from typing import Optional

from .backend import GitCliBackend, VersionControlBackend
from .gitpython_backend import GitPythonBackend
from .refs import candidate_refs


def make_backend(kind: str = "cli", timeout: Optional[float] = None) -> VersionControlBackend:
    if kind == "gitpython":
        return GitPythonBackend()
    return GitCliBackend(timeout=timeout)


__all__ = [
    "GitCliBackend",
    "GitPythonBackend",
    "VersionControlBackend",
    "candidate_refs",
    "make_backend",
]
