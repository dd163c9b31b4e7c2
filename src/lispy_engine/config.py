"""Engine configuration: key choices, enabled filetypes, and comment strings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional

ENV_PREFIX = "LISPY_ENGINE_"

DEFAULT_FILETYPES: tuple[str, ...] = (
    "lisp",
    "scheme",
    "clojure",
    "fennel",
    "janet",
    "racket",
    "elisp",
    "commonlisp",
    "hy",
    "lfe",
    "query",
    "yuck",
)

# Per-filetype comment strings in ``<prefix> %s`` form.
DEFAULT_COMMENT_STRINGS: Mapping[str, str] = MappingProxyType(
    {
        "lisp": ";; %s",
        "commonlisp": ";; %s",
        "scheme": ";; %s",
        "racket": ";; %s",
        "clojure": ";; %s",
        "fennel": ";; %s",
        "elisp": ";; %s",
        "hy": ";; %s",
        "lfe": ";; %s",
        "yuck": ";; %s",
        "query": "; %s",
        "janet": "# %s",
    }
)

DEFAULT_PREFIX = ";"


@dataclass(frozen=True, slots=True)
class LispyConfig:
    kill_key: str = "ctrl+k"
    comment_key: str = ";"
    filetypes: tuple[str, ...] = DEFAULT_FILETYPES
    comment_strings: Mapping[str, str] = field(
        default_factory=lambda: DEFAULT_COMMENT_STRINGS
    )
    default_prefix: str = DEFAULT_PREFIX

    def __post_init__(self) -> None:
        if not self.kill_key:
            raise ValueError("kill_key cannot be empty")
        if not self.comment_key:
            raise ValueError("comment_key cannot be empty")
        if not self.default_prefix.strip():
            raise ValueError("default_prefix cannot be blank")
        object.__setattr__(self, "filetypes", tuple(self.filetypes))
        object.__setattr__(
            self, "comment_strings", MappingProxyType(dict(self.comment_strings))
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "LispyConfig":
        """Build a config from ``LISPY_ENGINE_*`` variables over the defaults."""

        source = os.environ if env is None else env
        config = cls()
        kill_key = source.get(f"{ENV_PREFIX}KILL_KEY")
        if kill_key:
            config = replace(config, kill_key=kill_key.strip())
        comment_key = source.get(f"{ENV_PREFIX}COMMENT_KEY")
        if comment_key:
            config = replace(config, comment_key=comment_key.strip())
        filetypes = source.get(f"{ENV_PREFIX}FILETYPES")
        if filetypes:
            names = tuple(name.strip() for name in filetypes.split(",") if name.strip())
            config = replace(config, filetypes=names)
        return config

    def enabled_for(self, filetype: str) -> bool:
        return filetype in self.filetypes

    def comment_prefix(self, filetype: str) -> str:
        """Comment prefix for ``filetype``: the trimmed text before ``%s``."""

        comment_string = self.comment_strings.get(filetype, "")
        if "%s" in comment_string:
            prefix = comment_string.split("%s", 1)[0].strip()
            if prefix:
                return prefix
        return self.default_prefix


__all__ = [
    "LispyConfig",
    "DEFAULT_FILETYPES",
    "DEFAULT_COMMENT_STRINGS",
    "DEFAULT_PREFIX",
    "ENV_PREFIX",
]
