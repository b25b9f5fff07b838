from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterable, List, Optional

NamePredicate = Callable[[str], bool]


def _entries(dir_path: Path, listing_order: str) -> List[os.DirEntry]:
    with os.scandir(dir_path) as it:
        entries = list(it)
    if listing_order == "sorted":
        entries.sort(key=lambda e: e.name)
    return entries


def _walk(
    dir_path: Path,
    out: List[Path],
    predicate: Optional[NamePredicate],
    suffix: str,
    listing_order: str,
) -> None:
    for entry in _entries(dir_path, listing_order):
        if entry.is_dir():
            _walk(Path(entry.path), out, predicate, suffix, listing_order)
        elif entry.name.endswith(suffix):
            if predicate is None or predicate(entry.name):
                out.append(Path(entry.path))


def discover_sources(
    root: Path | str,
    predicate: Optional[NamePredicate] = None,
    *,
    suffix: str = ".sol",
    extra_paths: Iterable[Path | str] = (),
    listing_order: str = "sorted",
) -> List[Path]:
    """
    Recursively collect source files under `root` (depth-first).

    - predicate: receives the bare file name; None keeps every `suffix` file.
    - extra_paths: appended once after the traversal (not filtered, not checked).
    - listing_order: "sorted" (lexical per directory) or "native" (os.scandir order).

    A missing root raises FileNotFoundError; nothing is cached.
    """
    if listing_order not in ("sorted", "native"):
        raise ValueError(f"unknown listing_order: {listing_order!r}")
    out: List[Path] = []
    _walk(Path(root), out, predicate, suffix, listing_order)
    out.extend(Path(p) for p in extra_paths)
    return out


def name_contains(marker: str) -> NamePredicate:
    return lambda name: marker in name


def name_excludes(marker: str) -> NamePredicate:
    return lambda name: marker not in name
