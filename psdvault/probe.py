"""Companion-state probing for a single file.

Non-asset files are vacuously compliant: they always "have" a preview and
an archive, so the decision engine never acts on them.
"""
from __future__ import annotations

import os

from psdvault.config import VaultConfig
from psdvault.models import FileState
from psdvault.paths import PathLike, extension_of, with_extension


def has_preview(path: PathLike, config: VaultConfig) -> bool:
    """True if ``path`` needs no preview or its preview exists."""
    ext = extension_of(path)
    if ext not in (config.asset_extension, config.archive_extension):
        return True
    return os.path.exists(with_extension(path, config.preview_extension))


def has_archive(path: PathLike, config: VaultConfig) -> bool:
    """True if ``path`` is not an asset or its archive exists."""
    if extension_of(path) != config.asset_extension:
        return True
    return os.path.exists(with_extension(path, config.archive_extension))


def probe(path: PathLike, config: VaultConfig) -> FileState:
    ext = extension_of(path)
    asset_present = False
    if ext == config.archive_extension:
        asset_present = os.path.exists(with_extension(path, config.asset_extension))
    return FileState(
        path=os.fspath(path),
        extension=ext,
        has_preview=has_preview(path, config),
        has_archive=has_archive(path, config),
        asset_present=asset_present,
    )
