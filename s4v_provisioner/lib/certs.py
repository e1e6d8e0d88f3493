from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol

from .command import run_cmd
from .files import backup_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CertRequest:
    key_path: Path
    cert_path: Path
    common_name: str
    subject_prefix: str = "/C=VN/ST=HN/O=S4V/OU=NRC"
    days: int = 36500
    key_bits: int = 4096
    include_loopback_ip: bool = True

    @property
    def subject(self) -> str:
        return f"{self.subject_prefix}/CN={self.common_name}"

    @property
    def subject_alt_name(self) -> str:
        san = f"DNS:{self.common_name}"
        if self.include_loopback_ip:
            san += ",IP:127.0.0.1"
        return san


class CertificateGenerator(Protocol):
    def generate(self, req: CertRequest) -> None:
        ...


def openssl_argv(req: CertRequest) -> List[str]:
    return [
        "openssl",
        "req",
        "-x509",
        "-newkey",
        f"rsa:{req.key_bits}",
        "-nodes",
        "-keyout",
        str(req.key_path),
        "-out",
        str(req.cert_path),
        "-sha256",
        "-days",
        str(req.days),
        "-subj",
        req.subject,
        "-addext",
        f"subjectAltName = {req.subject_alt_name}",
    ]


class OpenSSLCertificateGenerator:
    def generate(self, req: CertRequest) -> None:
        req.key_path.parent.mkdir(parents=True, exist_ok=True)
        run_cmd(openssl_argv(req))


def ensure_certificate(req: CertRequest, generator: CertificateGenerator) -> bool:
    """Generate a key/cert pair unless both already exist.

    Returns True if a new pair was generated. When only one of the two files
    is present it is backed up and the pair regenerated, since a key without
    its certificate (or the reverse) is unusable to nginx.
    """

    key_exists = req.key_path.exists()
    cert_exists = req.cert_path.exists()

    if key_exists and cert_exists:
        logger.info("TLS key and certificate already exist; skipping generation")
        return False

    if key_exists or cert_exists:
        stray = req.key_path if key_exists else req.cert_path
        logger.warning("Found %s without its counterpart; regenerating the pair", stray)
        backup_file(stray)

    logger.info("Generating self-signed certificate for %s (%d days)", req.common_name, req.days)
    generator.generate(req)
    return True
