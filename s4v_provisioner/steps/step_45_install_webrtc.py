from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.files import install_executable
from ..lib.resolve import resolve_executable
from ..state import record_path

logger = logging.getLogger(__name__)


class InstallWebrtcStep:
    step_id = "45_install_webrtc"
    title = "Downloading and installing the pi_webrtc executable"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        artifact = cfg.webrtc_artifact

        archive = ctx.downloader.fetch(artifact.url, ctx.work_dir / artifact.archive_name)
        extracted = ctx.extractor.extract(archive, ctx.work_dir / artifact.extract_dir, artifact.archive_format)

        resolved = resolve_executable(extracted, cfg.executable_name_in_archive, cfg.executable_final_name)
        installed = install_executable(resolved, ctx.app_dir, cfg.executable_final_name)
        record_path(state, "executable", installed)
        return state
