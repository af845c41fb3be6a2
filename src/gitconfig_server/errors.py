# src/gitconfig_server/errors.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class GitStage(str, Enum):
    CLONE = "clone"
    FETCH = "fetch"
    RESET = "reset"
    REV_PARSE = "rev-parse"
    SHOW = "show"
    LIST = "ls-tree"


class ServerError(Exception):
    """Base class for everything the resolution engine raises on purpose."""


class ConfigError(ServerError):
    pass


class GitOperationError(ServerError):
    """
    A git invocation exited non-zero (or timed out).

    `stage` and `stderr` are kept as separate fields so callers can branch on
    the kind of failure without parsing the message.
    """

    def __init__(self, stage: GitStage, stderr: str, ref: Optional[str] = None) -> None:
        self.stage = stage
        self.stderr = stderr
        self.ref = ref
        super().__init__(str(self))

    def __str__(self) -> str:
        target = f" {self.ref}" if self.ref else ""
        return f"git {self.stage.value}{target} failed: {self.stderr}"


class DocumentParseError(ServerError):
    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"failed to parse {path}: {detail}")


class DocumentDecodeError(ServerError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path} is not valid UTF-8")


class NotFoundError(ServerError):
    def __init__(self, path: str = "") -> None:
        self.path = path
        super().__init__(f"not found: {path}" if path else "not found")


class BadRequestError(ServerError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
