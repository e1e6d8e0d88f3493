from __future__ import annotations

import logging
import tarfile
import zipfile
from pathlib import Path
from typing import Protocol

from ..errors import ArchiveError, CommandError
from .command import run_cmd

logger = logging.getLogger(__name__)

ZIP = "zip"
TAR_GZ = "tar.gz"


class ArchiveExtractor(Protocol):
    def extract(self, archive: Path, dest: Path, fmt: str) -> Path:
        ...


def _check_readable(archive: Path, fmt: str) -> None:
    if not archive.is_file():
        raise ArchiveError(f"Archive not found: {archive}")
    if fmt == ZIP:
        ok = zipfile.is_zipfile(archive)
    elif fmt == TAR_GZ:
        ok = tarfile.is_tarfile(archive)
    else:
        raise ArchiveError(f"Unsupported archive format: {fmt}")
    if not ok:
        raise ArchiveError(f"{archive} is not a readable {fmt} archive")


class ToolArchiveExtractor:
    """Extract with the host's unzip/tar."""

    def extract(self, archive: Path, dest: Path, fmt: str) -> Path:
        _check_readable(archive, fmt)
        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveError(f"Cannot create extraction directory {dest}: {e}") from e

        if fmt == ZIP:
            argv = ["unzip", "-o", str(archive), "-d", str(dest)]
        else:
            # Keep the archive's own directory structure (no --strip-components).
            argv = ["tar", "-xzf", str(archive), "-C", str(dest)]

        try:
            run_cmd(argv)
        except CommandError as e:
            raise ArchiveError(f"Extraction of {archive} failed: {e}") from e

        logger.info("Extracted %s -> %s", archive, dest)
        return dest
