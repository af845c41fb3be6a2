from __future__ import annotations

from typing import List, Optional

from ..config import GitConfig


def candidate_refs(git: GitConfig, label: Optional[str]) -> List[str]:
    """
    Refs to try, in order, for a requested label.

    A same-named local ref first (branches already checked out), then the
    remote-tracking one (tags/branches never created locally).
    """
    name = label if label else git.branch
    return [name, f"origin/{name}"]
