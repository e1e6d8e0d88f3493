"""Raspberry Pi boot configuration edits for the USB gadget-serial mode.

Both edits are idempotent text transforms; apply_edit() adds the backup and
write around them.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Optional

from .files import backup_file

logger = logging.getLogger(__name__)

DWC2_OVERLAY = "dtoverlay=dwc2,dr_mode=peripheral"
ALL_SECTION = "[all]"
GADGET_MODULES = "modules-load=dwc2,g_serial"
CMDLINE_ANCHOR = "rootwait"


def has_dwc2_overlay(text: str) -> bool:
    return any(line.startswith("dtoverlay=dwc2") for line in text.splitlines())


def add_dwc2_overlay(text: str) -> str:
    if has_dwc2_overlay(text):
        return text

    lines = text.splitlines(keepends=True)
    for i, line in enumerate(lines):
        if line.startswith(ALL_SECTION):
            if not line.endswith("\n"):
                lines[i] = line + "\n"
            lines.insert(i + 1, DWC2_OVERLAY + "\n")
            return "".join(lines)

    if text and not text.endswith("\n"):
        text += "\n"
    return f"{text}\n{ALL_SECTION}\n{DWC2_OVERLAY}\n"


def has_gadget_modules(text: str) -> bool:
    return GADGET_MODULES in text


def add_gadget_modules(text: str) -> str:
    """Insert the module list right after the rootwait token.

    cmdline.txt must stay a single line; a file without the anchor is left
    unchanged.
    """
    if has_gadget_modules(text):
        return text
    return re.sub(rf"\b{CMDLINE_ANCHOR}\b", f"{CMDLINE_ANCHOR} {GADGET_MODULES}", text, count=1)


def apply_edit(path: Path, transform: Callable[[str], str]) -> Optional[Path]:
    """Back up and rewrite path if transform changes it. Returns the backup path.

    Bytes that are not valid UTF-8 pass through the edit unchanged.
    """

    original = path.read_text(encoding="utf-8", errors="surrogateescape")
    updated = transform(original)
    if updated == original:
        logger.info("%s already up to date", path)
        return None

    backup = backup_file(path)
    path.write_text(updated, encoding="utf-8", errors="surrogateescape")
    logger.info("Updated %s", path)
    return backup
