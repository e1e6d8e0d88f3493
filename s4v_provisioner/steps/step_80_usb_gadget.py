from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict

from ..context import ProvisionCtx
from ..lib.bootloader import (
    DWC2_OVERLAY,
    GADGET_MODULES,
    add_dwc2_overlay,
    add_gadget_modules,
    apply_edit,
    has_dwc2_overlay,
    has_gadget_modules,
)
from ..state import add_warning, record_decision

logger = logging.getLogger(__name__)


def _edit(
    ctx: ProvisionCtx,
    state: Dict[str, Any],
    path: Path,
    present: Callable[[str], bool],
    transform: Callable[[str], str],
    label: str,
) -> bool:
    if not path.exists():
        add_warning(state, f"{path} not found; skipped {label}.")
        return False

    if present(path.read_text(encoding="utf-8", errors="replace")):
        logger.info("%s already configured in %s", label, path)
        return False

    if not ctx.confirmer.confirm(f"Add {label} to {path}?"):
        add_warning(state, f"Skipped {label} in {path}.")
        return False

    if apply_edit(path, transform) is None:
        add_warning(state, f"Could not add {label} to {path} (no insertion point).")
        return False
    return True


class UsbGadgetStep:
    step_id = "80_usb_gadget"
    title = "Configuring the USB serial gadget"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        if not ctx.confirmer.confirm("Do you want to configure USB Serial Gadget for direct connection via USB?"):
            logger.info("Skipping USB serial gadget configuration")
            return state

        changed = _edit(
            ctx, state, Path(cfg.boot_config_path), has_dwc2_overlay, add_dwc2_overlay, DWC2_OVERLAY
        )
        changed = _edit(
            ctx, state, Path(cfg.cmdline_path), has_gadget_modules, add_gadget_modules, GADGET_MODULES
        ) or changed

        ctx.services.enable(cfg.gadget_getty_service)

        if changed:
            record_decision(state, "reboot_required", True)
            logger.info("USB serial gadget changes take effect after a reboot")
        return state
