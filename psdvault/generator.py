"""Artifact generator: drives the archiver and renderer with durability waits.

No asset is ever deleted unless its archive is on disk at that moment,
either found there or just produced and confirmed by ``wait_for_file``.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from psdvault.config import VaultConfig
from psdvault.models import Action, ExternalToolError, RetryExhausted
from psdvault.paths import with_extension
from psdvault.tools import PillowPreviewRenderer, SevenZipArchiver

logger = logging.getLogger(__name__)


class Archiver(Protocol):
    def compress(self, source: Path, archive: Path) -> None: ...

    def extract(self, archive: Path, dest_dir: Path) -> None: ...


class PreviewRenderer(Protocol):
    def render(self, source: Path, preview: Path) -> None: ...


class ArtifactGenerator:
    """Executes corrective actions against the filesystem.

    Args:
        archiver: Object with compress(source, archive) / extract(archive, dest_dir)
        renderer: Object with render(source, preview)
        config: Extensions and wait bounds
        sleep: Delay primitive used between durability re-checks
    """

    def __init__(
        self,
        archiver: Archiver,
        renderer: PreviewRenderer,
        config: VaultConfig,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.archiver = archiver
        self.renderer = renderer
        self.config = config
        self._sleep = sleep

    @classmethod
    def default(cls, config: VaultConfig) -> "ArtifactGenerator":
        """Generator wired to 7-Zip and Pillow."""
        return cls(
            SevenZipArchiver(config),
            PillowPreviewRenderer(max_pixels=config.max_image_pixels),
            config,
        )

    # -----------------------------------------------------------------
    # Durability
    # -----------------------------------------------------------------

    @staticmethod
    def _is_durable(path: Path) -> bool:
        try:
            return path.is_file() and path.stat().st_size > 0
        except FileNotFoundError:
            return False

    def wait_for_file(self, path: Path, attempts: Optional[int] = None) -> bool:
        """Poll until ``path`` exists with non-zero size.

        One immediate check, then up to ``attempts`` re-checks spaced
        ``wait_interval`` seconds apart.
        """
        attempts = self.config.wait_attempts if attempts is None else attempts
        if self._is_durable(path):
            return True
        for attempt in range(1, attempts + 1):
            logger.debug("Waiting for %s (attempt %d/%d)", path, attempt, attempts)
            self._sleep(self.config.wait_interval)
            if self._is_durable(path):
                return True
        return False

    # -----------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------

    def compress_and_remove(self, asset: Path) -> Path:
        """Archive ``asset`` at maximum compression, then delete it.

        Returns:
            Path of the archive

        Raises:
            ExternalToolError: If the archiver fails; the asset is kept
            RetryExhausted: If the archive never became durable; the asset is kept
        """
        asset = Path(asset)
        archive = with_extension(asset, self.config.archive_extension)
        existed_before = archive.exists()

        try:
            self.archiver.compress(asset, archive)
        except ExternalToolError:
            if not existed_before and archive.exists():
                logger.warning("Removing partial archive %s", archive)
                archive.unlink()
            raise

        if not self.wait_for_file(archive):
            raise RetryExhausted(str(archive), self.config.wait_attempts)

        asset.unlink()
        logger.info("Archived %s -> %s", asset, archive.name)
        return archive

    def extract_and_wait(self, archive: Path) -> bool:
        """Restore the asset from ``archive`` into its directory.

        Returns:
            True once the restored asset is on disk with non-zero size
        """
        archive = Path(archive)
        asset = with_extension(archive, self.config.asset_extension)
        self.archiver.extract(archive, archive.parent)
        restored = self.wait_for_file(asset)
        if restored:
            logger.info("Extracted %s from %s", asset.name, archive)
        else:
            logger.warning("Extraction of %s produced no %s", archive, asset.name)
        return restored

    def generate_preview(self, asset: Path) -> Action:
        """Render the preview for ``asset``, then retire the asset.

        Rendering is awaited as a synchronization point before deciding:
        an existing archive means the asset is deleted, otherwise it is
        compressed and removed.

        Returns:
            The follow-up action performed (DELETE_ORIGINAL or COMPRESS_AND_REMOVE)

        Raises:
            ExternalToolError: If rendering or archiving fails
            RetryExhausted: If the preview or archive never became durable
        """
        asset = Path(asset)
        preview = with_extension(asset, self.config.preview_extension)

        self.renderer.render(asset, preview)
        if not self.wait_for_file(preview):
            raise RetryExhausted(str(preview), self.config.wait_attempts)
        logger.info("Rendered preview %s", preview)

        archive = with_extension(asset, self.config.archive_extension)
        if archive.exists():
            asset.unlink()
            logger.info("Deleted %s (archive already present)", asset)
            return Action.DELETE_ORIGINAL

        self.compress_and_remove(asset)
        return Action.COMPRESS_AND_REMOVE

    def delete_original(self, asset: Path) -> bool:
        """Delete an asset whose archive and preview both exist.

        Returns:
            False (asset kept) if the archive is gone by the time we act
        """
        asset = Path(asset)
        archive = with_extension(asset, self.config.archive_extension)
        if not archive.exists():
            logger.warning("Keeping %s: %s disappeared", asset, archive.name)
            return False
        asset.unlink()
        logger.info("Deleted redundant original %s", asset)
        return True
