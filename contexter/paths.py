# paths.py
from __future__ import annotations
from typing import Iterable, List


def normalize_path(path: str) -> str:
    """Use '/' as the separator and drop any trailing separator."""
    return path.replace("\\", "/").rstrip("/")


def sort_paths(paths: Iterable[str], normalize: bool = False) -> List[str]:
    """
    Return a sorted copy of `paths` (lexicographic, case-sensitive).

    The input is never mutated. With `normalize=True` every path goes through
    normalize_path first and entries that end up empty are dropped.
    """
    if normalize:
        cleaned = (normalize_path(p) for p in paths)
        return sorted(p for p in cleaned if p)
    return sorted(paths)


def files_under(directory_path: str, all_files: Iterable[str]) -> List[str]:
    """Entries equal to `directory_path` or nested below it."""
    prefix = directory_path + "/"
    return [f for f in all_files if f == directory_path or f.startswith(prefix)]
