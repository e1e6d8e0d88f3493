from __future__ import annotations

import logging
import shutil
from typing import Any, Dict

from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


class CleanupScratchStep:
    step_id = "50_cleanup_scratch"
    title = "Cleaning up temporary files"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        for artifact in (ctx.cfg.ui_artifact, ctx.cfg.webrtc_artifact):
            archive = ctx.work_dir / artifact.archive_name
            extract_dir = ctx.work_dir / artifact.extract_dir
            if archive.exists():
                archive.unlink()
            if extract_dir.exists():
                shutil.rmtree(extract_dir)
        logger.info("Temporary files cleaned up")
        return state
