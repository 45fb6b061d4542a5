"""

this is a module for
dropping ignored paths from a
project's file list

"""


# ignore.py
from __future__ import annotations
from typing import Iterable, List, Sequence

import pathspec


# Hard-coded excludes that *always* apply
HARDCODED = [".git", ".gitignore", "*.egg-info", "__pycache__"]


class PathFilter:
    """Callable that answers: *should this path be excluded?*"""

    def __init__(self, patterns: Sequence[str] = (), use_hardcoded: bool = True):
        self.hardcoded = pathspec.PathSpec.from_lines(
            "gitwildmatch", HARDCODED if use_hardcoded else []
        )
        lines = [p.strip() for p in patterns if p.strip() and not p.strip().startswith("#")]
        self.user_spec = pathspec.PathSpec.from_lines("gitwildmatch", lines)

    def __call__(self, path: str) -> bool:
        """Return True if the path should be *excluded*."""
        return self.hardcoded.match_file(path) or self.user_spec.match_file(path)

    def apply(self, files: Iterable[str]) -> List[str]:
        """Keep the order of `files`, minus the excluded entries."""
        return [f for f in files if not self(f)]
