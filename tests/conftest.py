"""Fakes for every host adapter plus a context rooted in tmp_path."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from s4v_provisioner.config import ProvisionConfig
from s4v_provisioner.context import ProvisionCtx
from s4v_provisioner.errors import CommandError, NetworkError
from s4v_provisioner.lib.certs import CertRequest
from s4v_provisioner.lib.command import CmdResult


class FakePackages:
    def __init__(self, installed: Sequence[str] = ()):
        self.installed = set(installed)
        self.install_calls: List[List[str]] = []
        self.refreshed = 0
        self.upgraded = 0

    def is_installed(self, package: str) -> bool:
        return package in self.installed

    def refresh_index(self) -> None:
        self.refreshed += 1

    def upgrade_all(self) -> None:
        self.upgraded += 1

    def install(self, packages: Sequence[str]) -> None:
        self.install_calls.append(list(packages))
        self.installed.update(packages)


class FakeDownloader:
    def __init__(self, fail_urls: Sequence[str] = ()):
        self.fail_urls = set(fail_urls)
        self.fetched: List[Tuple[str, Path]] = []

    def fetch(self, url: str, dest: Path) -> Path:
        self.fetched.append((url, dest))
        if url in self.fail_urls:
            raise NetworkError(f"404 for {url}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(b"archive")
        return dest


# archive name -> {relative path: (content, executable)}
Tree = Dict[str, Tuple[str, bool]]


class FakeExtractor:
    def __init__(self, trees: Optional[Dict[str, Tree]] = None):
        self.trees = trees or {}
        self.calls: List[Tuple[Path, Path, str]] = []

    def extract(self, archive: Path, dest: Path, fmt: str) -> Path:
        self.calls.append((archive, dest, fmt))
        dest.mkdir(parents=True, exist_ok=True)
        for rel, (content, executable) in self.trees.get(archive.name, {}).items():
            p = dest / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(content, encoding="utf-8")
            p.chmod(0o755 if executable else 0o644)
        return dest


class FakeCerts:
    def __init__(self):
        self.requests: List[CertRequest] = []

    def generate(self, req: CertRequest) -> None:
        self.requests.append(req)
        req.key_path.parent.mkdir(parents=True, exist_ok=True)
        req.key_path.write_text("KEY", encoding="utf-8")
        req.cert_path.write_text("CERT", encoding="utf-8")


class FakeServices:
    def __init__(self, inactive: Sequence[str] = (), fail_start: Sequence[str] = ()):
        self.inactive = set(inactive)
        self.fail_start = set(fail_start)
        self.calls: List[Tuple[str, ...]] = []

    def daemon_reload(self) -> None:
        self.calls.append(("daemon-reload",))

    def enable(self, unit: str) -> None:
        self.calls.append(("enable", unit))

    def start(self, unit: str) -> None:
        self.calls.append(("start", unit))
        if unit in self.fail_start:
            result = CmdResult(argv=["systemctl", "start", unit], returncode=1, stdout="", stderr="failed")
            raise CommandError(f"Command failed (1): systemctl start {unit}", result)

    def restart(self, unit: str) -> None:
        self.calls.append(("restart", unit))

    def is_active(self, unit: str) -> bool:
        self.calls.append(("is-active", unit))
        return unit not in self.inactive

    def reboot(self) -> None:
        self.calls.append(("reboot",))


class ScriptedConfirmer:
    """Answers by the first matching question substring, else `default`."""

    def __init__(self, rules: Optional[Dict[str, bool]] = None, default: bool = True):
        self.rules = rules or {}
        self.default = default
        self.questions: List[str] = []

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        for needle, answer in self.rules.items():
            if needle in question:
                return answer
        return self.default


class FakeHost:
    def __init__(
        self,
        *,
        uid: int = 0,
        files: Optional[Dict[str, str]] = None,
        machine: str = "aarch64",
        missing: Sequence[str] = (),
        hostname: str = "camera",
    ):
        self.uid = uid
        self.files = {"/etc/rpi-issue": "Raspberry Pi reference 2024-07-04\n"} if files is None else files
        self._machine = machine
        self.missing = list(missing)
        self._hostname = hostname

    def effective_uid(self) -> int:
        return self.uid

    def read_text(self, path: str) -> Optional[str]:
        return self.files.get(path)

    def machine(self) -> str:
        return self._machine

    def missing_commands(self, names) -> List[str]:
        return [n for n in names if n in self.missing]

    def hostname(self) -> str:
        return self._hostname


def make_config(root: Path, **overrides) -> ProvisionConfig:
    cfg = ProvisionConfig(
        app_dir=str(root / "etc/s4v"),
        web_root=str(root / "usr/share/nginx/html"),
        nginx_config_path=str(root / "etc/nginx/nginx.conf"),
        systemd_dir=str(root / "etc/systemd/system"),
        boot_config_path=str(root / "boot/firmware/config.txt"),
        cmdline_path=str(root / "boot/firmware/cmdline.txt"),
        work_dir="scratch",
    )
    return dataclasses.replace(cfg, **overrides)


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    root = tmp_path / "host"
    root.mkdir()
    return root


@pytest.fixture
def deploy_dir(tmp_path: Path) -> Path:
    d = tmp_path / "deploy"
    d.mkdir()
    return d


@pytest.fixture
def make_ctx(host_root: Path, deploy_dir: Path):
    def _make(**kwargs) -> ProvisionCtx:
        cfg = kwargs.pop("cfg", None) or make_config(host_root)
        return ProvisionCtx(
            cfg=cfg,
            packages=kwargs.pop("packages", None) or FakePackages(cfg.packages),
            downloader=kwargs.pop("downloader", None) or FakeDownloader(),
            extractor=kwargs.pop("extractor", None) or FakeExtractor(),
            certs=kwargs.pop("certs", None) or FakeCerts(),
            services=kwargs.pop("services", None) or FakeServices(),
            confirmer=kwargs.pop("confirmer", None) or ScriptedConfirmer(),
            host=kwargs.pop("host", None) or FakeHost(),
            cwd=kwargs.pop("cwd", None) or deploy_dir,
        )

    return _make
