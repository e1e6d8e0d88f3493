from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.files import copy_entries_except, copy_tree
from ..state import add_warning, record_decision

logger = logging.getLogger(__name__)


def install_ui(extracted_dir: Path, web_root: Path, ui_subdir: str) -> bool:
    """Copy the browser bundle into the web root. False if the bundle has none."""

    src = extracted_dir / ui_subdir
    if not src.is_dir():
        return False
    if not web_root.is_dir():
        logger.warning("Web root %s not found; creating it", web_root)
    copy_tree(src, web_root)
    logger.info("Browser files copied to %s", web_root)
    return True


def install_app_files(extracted_dir: Path, app_dir: Path, ui_subdir: str) -> list[str]:
    copied = copy_entries_except(extracted_dir, app_dir, exclude=ui_subdir)
    logger.info("Copied %d entries to %s", len(copied), app_dir)
    return copied


class InstallUiStep:
    step_id = "40_install_ui"
    title = "Downloading and installing the web UI bundle"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        artifact = cfg.ui_artifact

        archive = ctx.downloader.fetch(artifact.url, ctx.work_dir / artifact.archive_name)
        extracted = ctx.extractor.extract(archive, ctx.work_dir / artifact.extract_dir, artifact.archive_format)

        if not install_ui(extracted, Path(cfg.web_root), cfg.ui_subdir):
            add_warning(
                state,
                f"'{cfg.ui_subdir}' directory not found in the UI bundle; skipped web files installation.",
            )
        record_decision(state, "ui_files", install_app_files(extracted, ctx.app_dir, cfg.ui_subdir))
        return state
