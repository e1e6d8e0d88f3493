from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

LATEST = "latest"


@dataclass(frozen=True)
class RemoteArtifact:
    url: str
    archive_name: str
    extract_dir: str
    archive_format: str


def release_url(repo: str, version: str, asset: str) -> str:
    """Build a GitHub release download URL.

    version="latest" follows the latest-release redirect; any other value is
    treated as a pinned tag.
    """
    if version == LATEST:
        return f"https://github.com/{repo}/releases/latest/download/{asset}"
    return f"https://github.com/{repo}/releases/download/{version}/{asset}"


@dataclass(frozen=True)
class ProvisionConfig:
    # Host requirements
    platform_identity_file: str = "/etc/rpi-issue"
    platform_vendor_marker: str = "Raspberry Pi"
    required_machine: str = "aarch64"
    required_commands: Tuple[str, ...] = (
        "unzip",
        "tar",
        "openssl",
        "systemctl",
        "apt",
        "grep",
        "uname",
        "dpkg",
        "hostname",
    )

    # System packages
    packages: Tuple[str, ...] = (
        "wget",
        "unzip",
        "tar",
        "libcamera-apps",
        "libmosquitto1",
        "pulseaudio",
        "libavformat59",
        "libswscale6",
        "nginx",
        "openssl",
    )
    refresh_package_index: bool = True
    offer_upgrade: bool = True

    # Web UI bundle
    ui_repo: str = "b4iterdev/nrc-webrtc-player"
    ui_version: str = LATEST
    ui_asset: str = "release.zip"
    ui_archive_name: str = "release.zip"
    ui_extract_dir: str = "release_temp_b4iterdev"
    ui_subdir: str = "browser"

    # Streaming executable bundle
    webrtc_repo: str = "TzuHuanTai/RaspberryPi-WebRTC"
    webrtc_version: str = "v1.0.7"
    webrtc_asset_template: str = "pi-webrtc-{version}_raspios-bookworm-arm64.tar.gz"
    webrtc_archive_name: str = "pi-webrtc.tar.gz"
    webrtc_extract_dir: str = "release_temp_tzuhuantai"
    executable_name_in_archive: str = "pi-webrtc"
    executable_final_name: str = "pi_webrtc"

    # Scratch location for archives and extraction dirs
    work_dir: str = "."
    download_timeout_s: float = 60.0

    # Installed layout
    app_dir: str = "/etc/s4v"
    web_root: str = "/usr/share/nginx/html"
    tls_key_name: str = "server.key"
    tls_cert_name: str = "server.crt"
    nginx_config_path: str = "/etc/nginx/nginx.conf"
    systemd_dir: str = "/etc/systemd/system"

    # Local config inputs
    nginx_config_filename: str = "nginx.conf"
    unit_filename: str = "s4v-camera.service"
    config_fallback_subdir: str = "nrc-camera-deploypackage"

    # TLS
    hostname: str | None = None
    cert_days: int = 36500
    cert_key_bits: int = 4096
    cert_subject_prefix: str = "/C=VN/ST=HN/O=S4V/OU=NRC"
    cert_include_loopback_ip: bool = True

    # Services
    proxy_service: str = "nginx"

    # USB gadget serial
    boot_config_path: str = "/boot/firmware/config.txt"
    cmdline_path: str = "/boot/firmware/cmdline.txt"
    gadget_getty_service: str = "getty@ttyGS0.service"

    @property
    def ui_artifact(self) -> RemoteArtifact:
        return RemoteArtifact(
            url=release_url(self.ui_repo, self.ui_version, self.ui_asset),
            archive_name=self.ui_archive_name,
            extract_dir=self.ui_extract_dir,
            archive_format="zip",
        )

    @property
    def webrtc_artifact(self) -> RemoteArtifact:
        if self.webrtc_version == LATEST:
            raise ValueError(
                "webrtc_version must be a pinned tag: the executable asset name embeds the version"
            )
        asset = self.webrtc_asset_template.format(version=self.webrtc_version)
        return RemoteArtifact(
            url=release_url(self.webrtc_repo, self.webrtc_version, asset),
            archive_name=self.webrtc_archive_name,
            extract_dir=self.webrtc_extract_dir,
            archive_format="tar.gz",
        )

    @property
    def executable_path(self) -> str:
        return str(Path(self.app_dir) / self.executable_final_name)

    @property
    def tls_key_path(self) -> str:
        return str(Path(self.app_dir) / self.tls_key_name)

    @property
    def tls_cert_path(self) -> str:
        return str(Path(self.app_dir) / self.tls_cert_name)

    @property
    def unit_path(self) -> str:
        return str(Path(self.systemd_dir) / self.unit_filename)


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Check a YAML value against the type of the field's default."""
    if isinstance(default, tuple):
        if not isinstance(value, list):
            raise ValueError(f"{name} must be a list, got {type(value).__name__}")
        return tuple(str(v) for v in value)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be true or false, got {value!r}")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {value!r}")
        return value
    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{name} must be a number, got {value!r}")
        return float(value)
    # str fields, and hostname which defaults to None
    if value is None and default is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {value!r}")
    return value


def load_config(path: str) -> ProvisionConfig:
    """Load YAML overrides on top of the built-in defaults."""

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"{path} is not valid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")

    return config_from_mapping(raw)


def config_from_mapping(raw: Dict[str, Any]) -> ProvisionConfig:
    fields = {f.name for f in dataclasses.fields(ProvisionConfig)}
    unknown = sorted(k for k in raw if k not in fields)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    defaults = ProvisionConfig()
    overrides = {k: _coerce(k, v, getattr(defaults, k)) for k, v in raw.items()}
    cfg = dataclasses.replace(defaults, **overrides)

    # Resolve both download URLs now so a bad version fails before any step runs.
    cfg.ui_artifact
    cfg.webrtc_artifact
    return cfg
