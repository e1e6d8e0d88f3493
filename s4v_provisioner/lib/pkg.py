from __future__ import annotations

import logging
from typing import List, Protocol, Sequence, Tuple

from .command import run_cmd

logger = logging.getLogger(__name__)


class PackageInstaller(Protocol):
    def is_installed(self, package: str) -> bool:
        ...

    def refresh_index(self) -> None:
        ...

    def upgrade_all(self) -> None:
        ...

    def install(self, packages: Sequence[str]) -> None:
        ...


class AptPackageInstaller:
    """dpkg/apt backed installer for the running host."""

    def is_installed(self, package: str) -> bool:
        r = run_cmd(["dpkg", "-s", package], check=False)
        return r.returncode == 0

    def refresh_index(self) -> None:
        run_cmd(["apt", "update"], capture=False)

    def upgrade_all(self) -> None:
        run_cmd(["apt", "upgrade", "-y"], capture=False)

    def install(self, packages: Sequence[str]) -> None:
        if not packages:
            return
        run_cmd(["apt", "install", "-y", *packages], capture=False)


def partition_packages(
    installer: PackageInstaller, required: Sequence[str]
) -> Tuple[List[str], List[str]]:
    """Split required packages into (present, missing), keeping input order."""

    present: List[str] = []
    missing: List[str] = []
    seen = set()
    for pkg in required:
        if pkg in seen:
            continue
        seen.add(pkg)
        if installer.is_installed(pkg):
            logger.info("Package '%s' is already installed", pkg)
            present.append(pkg)
        else:
            missing.append(pkg)
    return present, missing
