from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.files import install_file
from ..lib.prompt import require
from ..state import add_warning, get_path, record_decision

logger = logging.getLogger(__name__)


def references_executable(unit_text: str, executable_path: str) -> bool:
    return executable_path in unit_text


class CameraServiceStep:
    step_id = "70_camera_service"
    title = "Setting up the S4V camera service"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        src = get_path(state, "unit_source")
        if not src:
            raise RuntimeError("execution.paths.unit_source missing")
        src_path = Path(src)

        unit_text = src_path.read_text(encoding="utf-8", errors="replace")
        if not references_executable(unit_text, cfg.executable_path):
            add_warning(
                state,
                f"{src_path} does not seem to call {cfg.executable_path}; check its ExecStart line.",
            )
            require(
                ctx.confirmer,
                "Continue installation despite the service file mismatch?",
                f"User aborted due to a service file mismatch in {cfg.unit_filename}.",
            )

        replaced = install_file(src_path, Path(cfg.unit_path), ctx.confirmer, what="systemd service file")
        if not replaced:
            add_warning(state, f"Kept the existing {cfg.unit_path}.")
        record_decision(state, "unit_installed", replaced)

        # No rollback: a failure below leaves the unit partially registered.
        ctx.services.daemon_reload()
        ctx.services.enable(cfg.unit_filename)
        ctx.services.start(cfg.unit_filename)
        logger.info("%s enabled and started", cfg.unit_filename)
        return state
