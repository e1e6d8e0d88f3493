from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import ProvisionConfig
from .lib.archive import ArchiveExtractor
from .lib.certs import CertificateGenerator
from .lib.host import HostProbe
from .lib.net import Downloader
from .lib.pkg import PackageInstaller
from .lib.prompt import Confirmer
from .lib.systemd import ServiceController


@dataclass(frozen=True)
class ProvisionCtx:
    cfg: ProvisionConfig
    packages: PackageInstaller
    downloader: Downloader
    extractor: ArchiveExtractor
    certs: CertificateGenerator
    services: ServiceController
    confirmer: Confirmer
    host: HostProbe
    cwd: Path

    @property
    def work_dir(self) -> Path:
        return self.cwd / self.cfg.work_dir

    @property
    def app_dir(self) -> Path:
        return Path(self.cfg.app_dir)

    def hostname(self) -> str:
        return self.cfg.hostname or self.host.hostname()
