from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from ..context import ProvisionCtx
from ..lib.pkg import partition_packages
from ..lib.prompt import require
from ..state import add_warning, record_decision

logger = logging.getLogger(__name__)


def reconcile(ctx: ProvisionCtx, required: Sequence[str]) -> List[str]:
    """Install the subset of `required` that is not installed yet."""

    _, missing = partition_packages(ctx.packages, required)
    if not missing:
        logger.info("All required system packages are already installed")
        return []

    logger.info("The following packages will be installed: %s", " ".join(missing))
    require(
        ctx.confirmer,
        "Do you want to proceed with the installation?",
        "User aborted package installation.",
    )
    ctx.packages.install(missing)
    logger.info("Packages installed successfully")
    return missing


class SystemPackagesStep:
    step_id = "20_system_packages"
    title = "Updating and installing system packages"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg

        if cfg.refresh_package_index:
            ctx.packages.refresh_index()

        if cfg.offer_upgrade:
            if ctx.confirmer.confirm("Do you want to upgrade all system packages now? (Recommended)"):
                ctx.packages.upgrade_all()
                record_decision(state, "upgraded", True)
            else:
                add_warning(state, "Skipped system package upgrade; this might lead to compatibility issues.")
                record_decision(state, "upgraded", False)

        installed = reconcile(ctx, cfg.packages)
        record_decision(state, "installed_packages", installed)
        return state
