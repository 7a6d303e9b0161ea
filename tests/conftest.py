"""Shared fixtures for psdvault tests."""
from __future__ import annotations

import struct
from pathlib import Path

import pytest

from psdvault.config import VaultConfig
from psdvault.generator import ArtifactGenerator


class FakeArchiver:
    """Stand-in for 7-Zip: the archive holds the original name and bytes."""

    MARKER = b"FAKE7Z\n"

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    @classmethod
    def pack(cls, name: str, payload: bytes) -> bytes:
        return cls.MARKER + name.encode() + b"\n" + payload

    def compress(self, source: Path, archive: Path) -> None:
        self.calls.append(("compress", source.name))
        archive.write_bytes(self.pack(source.name, source.read_bytes()))

    def extract(self, archive: Path, dest_dir: Path) -> None:
        self.calls.append(("extract", archive.name))
        body = archive.read_bytes()[len(self.MARKER):]
        name, payload = body.split(b"\n", 1)
        (dest_dir / name.decode()).write_bytes(payload)


class FakeRenderer:
    """Stand-in for the Pillow renderer: writes a tiny fake PNG."""

    def __init__(self):
        self.calls: list[str] = []

    def render(self, source: Path, preview: Path) -> None:
        self.calls.append(source.name)
        preview.write_bytes(b"\x89PNG fake preview of " + source.name.encode())


def make_tree(root: Path, files: dict[str, bytes]) -> Path:
    """Create ``files`` (relative path -> content) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


def make_psd(width: int, height: int, planes: tuple[bytes, ...] | None = None) -> bytes:
    """Flat 8-bit RGB PSD with raw channel data.

    With ``planes=None`` only the header and section lengths are written, which
    is enough for Pillow to report the size without decoding any pixels.
    """
    header = struct.pack(">4sH6sHIIHH", b"8BPS", 1, b"\0" * 6, 3, height, width, 8, 3)
    # colour mode data, image resources, layer and mask info: all empty
    sections = struct.pack(">III", 0, 0, 0)
    data = b"".join(planes) if planes is not None else b""
    return header + sections + struct.pack(">H", 0) + data


def snapshot(root: Path) -> set[str]:
    """Relative paths of every regular file under ``root``."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


@pytest.fixture
def config() -> VaultConfig:
    return VaultConfig()


@pytest.fixture
def sleeps() -> list[float]:
    """Records every delay the generator asks for instead of sleeping."""
    return []


@pytest.fixture
def archiver() -> FakeArchiver:
    return FakeArchiver()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def generator(archiver, renderer, config, sleeps) -> ArtifactGenerator:
    return ArtifactGenerator(archiver, renderer, config, sleep=sleeps.append)


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Empty directory to build trees in."""
    root = tmp_path / "vault"
    root.mkdir()
    return root
