"""Path and extension helpers shared by the prober, generator and walker.

Only the basename is ever inspected, so dots in parent directory names
(``renders.v2/logo``) never count as an extension.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Union

PathLike = Union[str, Path]

ASSET_EXT = ".psd"
ARCHIVE_EXT = ".7z"
PREVIEW_EXT = ".png"


def extension_of(path: PathLike) -> str:
    """Return the lowercase extension of ``path`` including the period.

    Returns "" when the basename has no extension. A leading dot does not
    start an extension (``.gitignore`` has none).
    """
    _, ext = os.path.splitext(os.path.basename(os.fspath(path)))
    return ext.lower()


def with_extension(path: PathLike, new_ext: str) -> PathLike:
    """Swap the extension of ``path`` for ``new_ext``.

    Text after the last period of the basename is replaced; a basename
    without a period gets ``new_ext`` appended. Path objects come back as
    Path objects, strings as strings.
    """
    raw = os.fspath(path)
    head, tail = os.path.split(raw)
    stem, ext = os.path.splitext(tail)
    swapped = os.path.join(head, stem + new_ext) if head else stem + new_ext
    if isinstance(path, Path):
        return Path(swapped)
    return swapped


def is_ignored(name: str, ignore_set: Iterable[str]) -> bool:
    """Literal membership test of a directory entry name."""
    return name in ignore_set


def filter_ignored(names: Iterable[str], ignore_set: Iterable[str]) -> list[str]:
    """Drop ignored names, keeping the listing order of the rest."""
    ignore = frozenset(ignore_set)
    return [name for name in names if not is_ignored(name, ignore)]
