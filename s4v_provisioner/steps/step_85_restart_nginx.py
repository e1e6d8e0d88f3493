from __future__ import annotations

from typing import Any, Dict

from ..context import ProvisionCtx


class RestartNginxStep:
    step_id = "85_restart_nginx"
    title = "Restarting nginx to apply changes"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ctx.services.restart(ctx.cfg.proxy_service)
        return state
