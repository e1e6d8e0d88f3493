from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import ProvisionConfig
from ..context import ProvisionCtx
from ..errors import MissingDependencyError, PlatformError, PrivilegeError
from ..lib.host import HostProbe
from ..state import record_decision

logger = logging.getLogger(__name__)


def verify(cfg: ProvisionConfig, host: HostProbe) -> None:
    """Fail fast unless we are root on 64-bit Raspberry Pi OS with the tools we shell out to."""

    if host.effective_uid() != 0:
        raise PrivilegeError("Root privileges are required. Re-run with 'sudo s4v-provision'.")
    logger.info("Root privileges confirmed")

    identity = host.read_text(cfg.platform_identity_file) or ""
    if cfg.platform_vendor_marker not in identity:
        raise PlatformError(
            f"This tool is intended for {cfg.platform_vendor_marker} OS only "
            f"({cfg.platform_identity_file} missing or unrecognized)."
        )

    machine = host.machine()
    if machine != cfg.required_machine:
        raise PlatformError(
            f"This tool is intended for 64-bit {cfg.platform_vendor_marker} OS only "
            f"(machine={machine}, expected {cfg.required_machine})."
        )
    logger.info("%s OS %s detected", cfg.platform_vendor_marker, machine)

    missing = host.missing_commands(cfg.required_commands)
    if missing:
        raise MissingDependencyError(missing)
    logger.info("All required commands are available")


class PreflightStep:
    step_id = "10_preflight"
    title = "Checking host prerequisites"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        verify(ctx.cfg, ctx.host)
        record_decision(state, "machine", ctx.host.machine())
        return state
