from __future__ import annotations

import datetime
import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

from ..errors import ArtifactNotFoundError
from .prompt import Confirmer

logger = logging.getLogger(__name__)

BACKUP_TIME_FORMAT = "%Y-%m-%d-%H%M%S"


def backup_path(path: Path, *, now: Optional[datetime.datetime] = None) -> Path:
    stamp = (now or datetime.datetime.now()).strftime(BACKUP_TIME_FORMAT)
    return path.with_name(f"{path.name}.backup.{stamp}")


def backup_file(path: Path, *, now: Optional[datetime.datetime] = None) -> Path:
    dst = backup_path(path, now=now)
    shutil.copy2(path, dst)
    logger.info("Backed up %s -> %s", path, dst)
    return dst


def copy_tree(src: Path, dst: Path) -> None:
    s = Path(src)
    d = Path(dst)
    if not s.exists():
        raise FileNotFoundError(str(src))

    d.mkdir(parents=True, exist_ok=True)
    for item in s.rglob("*"):
        rel = item.relative_to(s)
        out = d / rel
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, out)


def copy_entries_except(src: Path, dst: Path, *, exclude: str) -> list[str]:
    """Copy every top-level entry of src except `exclude` into dst."""

    copied: list[str] = []
    dst.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        if entry.name == exclude:
            continue
        if entry.is_dir():
            copy_tree(entry, dst / entry.name)
        else:
            shutil.copy2(entry, dst / entry.name)
        copied.append(entry.name)
    return copied


def install_executable(src: Path, app_dir: Path, final_name: str) -> Path:
    if not src.is_file():
        raise ArtifactNotFoundError(f"Executable missing: {src}")
    app_dir.mkdir(parents=True, exist_ok=True)
    dst = app_dir / final_name
    shutil.copy2(src, dst)
    dst.chmod(0o755)
    logger.info("%s installed to %s", final_name, dst)
    return dst


def install_file(
    src: Path,
    dst: Path,
    confirmer: Confirmer,
    *,
    what: str,
    now: Callable[[], datetime.datetime] = datetime.datetime.now,
) -> bool:
    """Install src at dst. Returns False if an existing dst was kept.

    An existing destination is backed up first, then replaced only after
    confirmation.
    """

    if not dst.exists():
        logger.info("No existing %s at %s; copying %s", what, dst, src)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
        return True

    logger.warning("An existing %s was found at %s", what, dst)
    backup_file(dst, now=now())
    if not confirmer.confirm(f"Replace {dst} with {src}? A backup of the current file was created."):
        logger.warning("Keeping existing %s at %s", what, dst)
        return False

    shutil.copy2(src, dst)
    logger.info("%s updated from %s", what, src)
    return True
