from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..context import ProvisionCtx
from ..state import record_decision

logger = logging.getLogger(__name__)


def probe_services(ctx: ProvisionCtx, units: List[str]) -> Dict[str, bool]:
    results: Dict[str, bool] = {}
    for unit in units:
        active = ctx.services.is_active(unit)
        if active:
            logger.info("%s is active and running", unit)
        else:
            logger.warning("%s may not be running correctly", unit)
            logger.warning("Check with: sudo systemctl status %s  OR  sudo journalctl -u %s", unit, unit)
        results[unit] = active
    return results


class PostCheckStep:
    """Report on the managed services and offer a reboot if one is pending.

    Advisory only; nothing is retried or fixed here.
    """

    step_id = "90_post_check"
    title = "Verifying service statuses"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        results = probe_services(ctx, [cfg.unit_filename, cfg.proxy_service])
        failed = [unit for unit, ok in results.items() if not ok]

        record_decision(state, "service_status", results)
        record_decision(state, "success", not failed)

        exe = state.get("execution") or {}
        warnings = exe.get("warnings") or []
        decisions = exe.get("decisions") or {}

        logger.info("-" * 50)
        if failed:
            logger.error("Setup finished, but these services are not running: %s", ", ".join(failed))
            logger.error("Review the messages above and the service logs for details.")
        else:
            logger.info("S4V camera setup finished successfully!")
            logger.info("The camera stream should be reachable at: https://%s.local", ctx.hostname())
            logger.warning("Browsers will warn about the self-signed certificate. This is expected.")

        if warnings:
            logger.warning("%d warning(s) during this run:", len(warnings))
            for w in warnings:
                logger.warning("  - %s", w)

        if decisions.get("reboot_required"):
            if ctx.confirmer.confirm("A reboot is required to apply the USB serial gadget changes. Reboot now?"):
                logger.info("Rebooting system...")
                ctx.services.reboot()
            else:
                logger.warning("Please reboot manually later to apply the USB serial gadget changes.")
        return state
