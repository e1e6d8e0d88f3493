from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.files import install_file
from ..state import add_warning, get_path, record_decision

logger = logging.getLogger(__name__)


class InstallNginxConfigStep:
    step_id = "35_install_nginx_config"
    title = "Configuring the nginx web server"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        src = get_path(state, "nginx_config_source")
        if not src:
            raise RuntimeError("execution.paths.nginx_config_source missing")

        dst = Path(ctx.cfg.nginx_config_path)
        replaced = install_file(Path(src), dst, ctx.confirmer, what="nginx configuration")
        if not replaced:
            add_warning(
                state,
                f"Kept the existing {dst}; make sure nginx is configured for the S4V camera manually.",
            )
        record_decision(state, "nginx_config_installed", replaced)

        # The application directory holds the TLS material and the executable.
        ctx.app_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Application directory ready at %s", ctx.app_dir)
        return state
