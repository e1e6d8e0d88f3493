from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from .config import ProvisionConfig, load_config
from .context import ProvisionCtx
from .errors import ProvisionError
from .lib.archive import ToolArchiveExtractor
from .lib.certs import OpenSSLCertificateGenerator
from .lib.host import LocalHost
from .lib.net import RequestsDownloader
from .lib.pkg import AptPackageInstaller
from .lib.prompt import AssumeYesConfirmer, Confirmer, TerminalConfirmer
from .lib.systemd import SystemctlController
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import run_pipeline
from .state import new_state, record_path
from .steps import (
    CameraServiceStep,
    CertificateStep,
    CleanupScratchStep,
    InstallNginxConfigStep,
    InstallUiStep,
    InstallWebrtcStep,
    LocateConfigsStep,
    PostCheckStep,
    PreflightStep,
    RestartNginxStep,
    SystemPackagesStep,
    UsbGadgetStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        PreflightStep(),
        SystemPackagesStep(),
        LocateConfigsStep(),
        InstallNginxConfigStep(),
        InstallUiStep(),
        InstallWebrtcStep(),
        CleanupScratchStep(),
        CertificateStep(),
        CameraServiceStep(),
        UsbGadgetStep(),
        RestartNginxStep(),
        PostCheckStep(),
    ]


def build_ctx(cfg: ProvisionConfig, *, confirmer: Confirmer, cwd: Optional[Path] = None) -> ProvisionCtx:
    """Wire the production adapters for the running host."""

    return ProvisionCtx(
        cfg=cfg,
        packages=AptPackageInstaller(),
        downloader=RequestsDownloader(timeout_s=cfg.download_timeout_s),
        extractor=ToolArchiveExtractor(),
        certs=OpenSSLCertificateGenerator(),
        services=SystemctlController(),
        confirmer=confirmer,
        host=LocalHost(),
        cwd=cwd or Path.cwd(),
    )


def run(ctx: ProvisionCtx, *, steps=None) -> Dict[str, Any]:
    """Run every step once, in order. Raises ProvisionError on a fatal condition."""

    state = new_state()
    record_path(state, "cwd", ctx.cwd)
    try:
        result = run_pipeline(ctx=ctx, state=state, steps=steps if steps is not None else build_steps())
        return result.state
    except ProvisionError as e:
        e.step = state["execution"].get("current_step")
        e.state = state
        raise


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="s4v-provision",
        description="Provision a Raspberry Pi as an S4V WebRTC camera appliance.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--config", default=None, help="YAML file overriding built-in paths, URLs and versions")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the provisioning log")
    p.add_argument("-y", "--yes", action="store_true", help="Answer yes to every confirmation prompt")
    p.add_argument("--skip-upgrade", action="store_true", help="Do not offer a full system upgrade")
    p.add_argument("-v", "--verbose", action="store_true", help="Log command output")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        cfg = load_config(args.config) if args.config else ProvisionConfig()
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    if args.skip_upgrade:
        cfg = dataclasses.replace(cfg, offer_upgrade=False)

    confirmer: Confirmer = AssumeYesConfirmer() if args.yes else TerminalConfirmer()
    ctx = build_ctx(cfg, confirmer=confirmer)

    logger.info("S4V camera setup %s", __version__)
    try:
        run(ctx)
    except ProvisionError as e:
        if e.step:
            logger.error("Step %s failed: %s", e.step, e)
        else:
            logger.error("%s", e)
        return 1
    except Exception:
        logger.exception("Provisioning failed")
        raise
    return 0
