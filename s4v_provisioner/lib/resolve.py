"""Path lookups over directory snapshots.

The lookups themselves are pure functions over a DirListing, so they can be
exercised against synthetic trees; scan_dir() builds a listing from disk.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, Optional

from ..errors import ArtifactNotFoundError, ConfigNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirListing:
    """Regular files under a root: relative POSIX path -> is_executable."""

    files: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def of(cls, paths: Iterable[str], executables: Iterable[str] = ()) -> "DirListing":
        exe = set(executables)
        files = {p: p in exe for p in paths}
        for p in exe:
            files.setdefault(p, True)
        return cls(files=files)

    def has_file(self, rel: str) -> bool:
        return rel in self.files


@dataclass(frozen=True)
class ExecutableMatch:
    rel_path: str
    needs_rename: bool


def scan_dir(root: Path, *, max_depth: Optional[int] = None) -> DirListing:
    files: Dict[str, bool] = {}
    root = Path(root)
    if not root.is_dir():
        return DirListing(files=files)

    # Symlinked directories are followed; each real directory is visited once.
    seen = set()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        real = os.path.realpath(dirpath)
        if real in seen:
            dirnames[:] = []
            continue
        seen.add(real)
        rel_dir = Path(dirpath).relative_to(root)
        depth = len(rel_dir.parts)
        if max_depth is not None and depth + 1 >= max_depth:
            dirnames[:] = []
        for name in filenames:
            full = Path(dirpath) / name
            try:
                st = full.stat()
            except OSError:
                continue
            if not stat.S_ISREG(st.st_mode):
                continue
            rel = (rel_dir / name).as_posix()
            files[rel] = bool(st.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))
    return DirListing(files=files)


def locate(filename: str, fallback_subdir: str, listing: DirListing) -> Optional[str]:
    """Return the relative path of filename: top level first, then fallback_subdir."""
    if listing.has_file(filename):
        return filename
    candidate = f"{fallback_subdir}/{filename}"
    if listing.has_file(candidate):
        return candidate
    return None


def locate_config(root: Path, filename: str, fallback_subdir: str) -> Path:
    rel = locate(filename, fallback_subdir, scan_dir(root, max_depth=2))
    if rel is None:
        raise ConfigNotFoundError(
            f"'{filename}' not found in {root} or its subdirectory '{fallback_subdir}'. "
            "Run from the directory that holds the deploy package."
        )
    found = Path(root) / rel
    logger.info("Found %s at %s", filename, found)
    return found


def _depth_first_order(paths: Iterable[str]) -> list[str]:
    return sorted(paths, key=lambda p: (len(PurePosixPath(p).parts), p))


def find_executable(listing: DirListing, expected: str, final: str) -> Optional[ExecutableMatch]:
    """Search order: expected at root, final at root, then recursively
    expected and final among executable files. First match wins."""

    if listing.has_file(expected):
        return ExecutableMatch(expected, needs_rename=expected != final)
    if listing.has_file(final):
        return ExecutableMatch(final, needs_rename=False)

    executables = _depth_first_order(p for p, is_exe in listing.files.items() if is_exe)
    for name, rename in ((expected, expected != final), (final, False)):
        for p in executables:
            if PurePosixPath(p).name == name:
                return ExecutableMatch(p, needs_rename=rename)
    return None


def renamed_path(rel_path: str, final: str) -> str:
    parent = PurePosixPath(rel_path).parent
    return (parent / final).as_posix()


def resolve_executable(extract_dir: Path, expected: str, final: str) -> Path:
    """Find the streaming executable in an extracted bundle, renaming it to final."""

    match = find_executable(scan_dir(extract_dir), expected, final)
    if match is None:
        raise ArtifactNotFoundError(
            f"Could not find the executable ('{expected}' or '{final}') in {extract_dir}. "
            "Check the package structure or the release URL."
        )

    found = Path(extract_dir) / match.rel_path
    logger.info("Found executable at %s", found)
    if not match.needs_rename:
        return found

    target = Path(extract_dir) / renamed_path(match.rel_path, final)
    logger.info("Renaming '%s' to '%s'", expected, final)
    found.replace(target)
    return target
