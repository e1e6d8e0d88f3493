from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.resolve import locate_config
from ..state import record_path

logger = logging.getLogger(__name__)


class LocateConfigsStep:
    """Find nginx.conf and the unit file before anything is downloaded."""

    step_id = "30_locate_configs"
    title = "Locating configuration files"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        nginx_conf = locate_config(ctx.cwd, cfg.nginx_config_filename, cfg.config_fallback_subdir)
        unit_file = locate_config(ctx.cwd, cfg.unit_filename, cfg.config_fallback_subdir)
        record_path(state, "nginx_config_source", nginx_conf)
        record_path(state, "unit_source", unit_file)
        return state
