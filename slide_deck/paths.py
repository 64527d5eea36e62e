"""Helpers for resolving output locations and picture paths.

Every entry point supplies an explicit output directory; it is created on
demand.  Picture paths written in markdown are resolved against a base
directory (normally the directory holding the markdown file).  Remote
pictures are never fetched: they are passed through unchanged and it is up
to each renderer to reject or replace them.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from .models import REMOTE_PREFIXES


__all__ = ["prepare_output_dir", "output_path_for", "resolve_asset", "is_remote"]


def prepare_output_dir(output_dir: str | Path) -> Path:
    """Resolve *output_dir* to an absolute path and create it if needed."""
    out_path = Path(output_dir).expanduser().resolve()
    out_path.mkdir(parents=True, exist_ok=True)
    return out_path


def output_path_for(markdown_path: str | Path, output_dir: str | Path, suffix: str) -> Path:
    """``<output_dir>/<markdown stem><suffix>``, e.g. ``out/talk.tex``."""
    return Path(output_dir) / f"{Path(markdown_path).stem}{suffix}"


def is_remote(src: str) -> bool:
    return src.startswith(REMOTE_PREFIXES)


def resolve_asset(src: str, *, base_dir: Optional[Path]) -> str:
    """Return the path a renderer should load for picture *src*.

    Rules
    -----
    1. Remote or data-URIs are returned unchanged.
    2. ``file://`` URLs are stripped to an absolute path first.
    3. Relative paths are resolved against *base_dir*; without a base
       directory they are returned as written.
    """
    if is_remote(src):
        return src

    if src.startswith("file://"):
        return str(Path(src[7:]).expanduser().resolve())

    path = Path(src).expanduser()
    if path.is_absolute() or base_dir is None:
        return str(path)
    return str((Path(base_dir) / path).resolve())
