# utils.py
from __future__ import annotations
import re
import subprocess
from pathlib import Path
from shutil import which
from typing import Optional


def copy_to_clipboard(text: str) -> bool:
    """
    Linux-only clipboard copy.

    Priority:
      1) wl-copy (Wayland)
      2) xclip  (X11)
      3) xsel   (X11)

    Returns True on success, False otherwise.
    """
    commands = [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ]
    for command in commands:
        if not which(command[0]):
            continue
        try:
            p = subprocess.run(command, input=text.encode("utf-8"), check=True)
            return p.returncode == 0
        except (OSError, subprocess.CalledProcessError):
            # fall through to the next tool
            continue
    return False


def format_file_size(size: int) -> str:
    if size == 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 1):g} {units[i]}"


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def download_filename(project_name: str) -> str:
    """File name used when saving a project's aggregated content."""
    safe = re.sub(r"[^\w.-]+", "_", project_name).strip("_") or "project"
    return f"{safe}-context.txt"


def write_download(content: str, project_name: str, target: Optional[Path] = None) -> Path:
    path = target or Path.cwd() / download_filename(project_name)
    path.write_text(content, encoding="utf-8")
    return path
