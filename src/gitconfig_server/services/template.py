from __future__ import annotations

import re
from typing import Mapping, Pattern, Union

# {{NAME}} / {{ NAME }} where NAME is an identifier
DEFAULT_PATTERN = r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}"


class TemplateEngine:
    """
    Single-pass `{{ NAME }}` substitution.

    Unknown names are left exactly as written. Substituted values are never
    rescanned, so a value containing `{{X}}` stays literal.
    """

    def __init__(self, pattern: Union[str, Pattern[str]] = DEFAULT_PATTERN) -> None:
        self.pattern: Pattern[str] = re.compile(pattern) if isinstance(pattern, str) else pattern

    def substitute(self, text: str, env_vars: Mapping[str, str]) -> str:
        def _replace(m: re.Match) -> str:
            value = env_vars.get(m.group(1))
            return m.group(0) if value is None else value

        return self.pattern.sub(_replace, text)
