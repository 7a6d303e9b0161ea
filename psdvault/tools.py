"""External collaborators: the 7-Zip archiver and the PSD preview renderer.

Both are thin wrappers. Anything that goes wrong inside them surfaces as
ExternalToolError so the walker can scope the failure to one file.
"""
from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from PIL import Image

from psdvault.config import VaultConfig
from psdvault.models import ExternalToolError

logger = logging.getLogger(__name__)

# Modes PNG can store directly; anything else (CMYK, 16-bit) is converted
_PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA"}

# Design documents routinely exceed the default bomb threshold
Image.MAX_IMAGE_PIXELS = None


class SevenZipArchiver:
    """Invokes a 7-Zip binary (7za / 7z) as a blocking subprocess."""

    def __init__(self, config: VaultConfig):
        self.binary = config.seven_zip
        self.archive_format = config.archive_format
        self.compression_level = config.compression_level
        self.timeout = config.tool_timeout

    def _run(self, args: list[str], path: Path) -> None:
        cmd = [self.binary, *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ExternalToolError(
                f"7-Zip binary not found: {self.binary}",
                tool=self.binary, path=str(path),
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalToolError(
                f"7-Zip timed out after {self.timeout}s on {path}",
                tool=self.binary, path=str(path),
            ) from e

        if result.returncode != 0:
            raise ExternalToolError(
                f"7-Zip exited with code {result.returncode} on {path}",
                tool=self.binary,
                path=str(path),
                returncode=result.returncode,
                stderr=(result.stderr or "")[:500],
            )

    def compress(self, source: Path, archive: Path) -> None:
        # a = add, -bd = no progress bar, -y = assume yes on all prompts
        self._run(
            ["a", f"-t{self.archive_format}", f"-mx={self.compression_level}",
             "-bd", "-y", str(archive), str(source)],
            source,
        )

    def extract(self, archive: Path, dest_dir: Path) -> None:
        # e = extract without directory structure
        self._run(["e", str(archive), f"-o{dest_dir}", "-bd", "-y"], archive)


class PillowPreviewRenderer:
    """Renders the flattened composite of a PSD to PNG with Pillow.

    Pillow's own decompression-bomb guard trips on ordinary poster-sized
    documents, so it is switched off and replaced by ``max_pixels``
    (0 = no ceiling), checked from the header before any pixel is decoded.
    """

    name = "pillow"

    def __init__(self, max_pixels: int = 0):
        self.max_pixels = max_pixels

    def render(self, source: Path, preview: Path) -> None:
        """Write ``preview`` from ``source``.

        The PNG is written to a sibling temp file and renamed into place,
        so a half-written preview is never visible under its final name.
        """
        tmp_path = preview.with_name(preview.name + ".tmp")
        try:
            with Image.open(source) as image:
                self._check_size(source, image.size)
                image.load()
                if image.mode not in _PNG_MODES:
                    image = image.convert("RGBA")
                image.save(tmp_path, format="PNG")
            os.replace(tmp_path, preview)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            if tmp_path.exists():
                tmp_path.unlink()
            raise ExternalToolError(
                f"Could not render preview for {source}: {e}",
                tool=self.name, path=str(source),
            ) from e

    def _check_size(self, source: Path, size: tuple[int, int]) -> None:
        width, height = size
        if self.max_pixels and width * height > self.max_pixels:
            raise ExternalToolError(
                f"{source} is {width}x{height}, above the {self.max_pixels} pixel limit",
                tool=self.name, path=str(source),
            )
